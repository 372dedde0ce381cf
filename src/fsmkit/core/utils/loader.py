"""Dynamic module loading utilities.

Loads Python modules from plain directories so that handler functions can be
kept next to the machine definitions that reference them by name.
"""
from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from types import ModuleType
from typing import Callable, Iterable, Iterator, Optional, Set

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def iter_python_files(
    dirs: Iterable[Path],
    exclude: Optional[Set[str]] = None,
) -> Iterator[Path]:
    """Yield all *.py files from existing directories in order.

    Args:
        dirs: Directories to search (in order)
        exclude: Set of filenames to exclude (default: {"__init__.py"})

    Yields:
        Paths to Python files
    """
    if exclude is None:
        exclude = {"__init__.py"}

    for d in dirs:
        if not d or not d.exists():
            continue
        for path in sorted(d.glob("*.py")):
            if path.is_file() and path.name not in exclude:
                yield path


def load_module_from_path(path: Path, namespace: str = "fsmkit.dynamic") -> ModuleType:
    """Load a Python module from file without adding it to sys.modules.

    Raises:
        ConfigurationError: If the module cannot be loaded
    """
    module_name = f"{namespace}.{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot load module from {path}", context={"path": str(path)})
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load module {path}: {exc}",
            context={"path": str(path)},
        ) from exc
    logger.debug("Loaded module %s from %s", module_name, path)
    return module


def register_callables_from_module(
    module: ModuleType,
    register_fn: Callable[[str, Callable[..., object]], None],
    exclude_prefixes: tuple[str, ...] = ("_",),
) -> int:
    """Register the public functions defined in ``module``.

    Names starting with an excluded prefix, classes and callables imported
    from other modules are skipped.

    Returns:
        Number of callables registered
    """
    count = 0
    for name in dir(module):
        if any(name.startswith(p) for p in exclude_prefixes):
            continue
        obj = getattr(module, name)
        if not callable(obj) or isinstance(obj, type):
            continue
        if getattr(obj, "__module__", None) != module.__name__:
            continue
        register_fn(name, obj)
        count += 1
    return count


__all__ = [
    "iter_python_files",
    "load_module_from_path",
    "register_callables_from_module",
]
