"""Configuration-driven machine authoring.

Reads a machine definition from YAML (or an already-parsed mapping), resolves
every condition and side-effect name through a ``TransitionRegistry`` and
only then builds ``Transition`` values. Unknown names fail here, at build
time, never during evaluation.

Definition layout::

    name: traffic-light
    states:
      RED:
        allowed_transitions:
          - to: GREEN
            condition: timer_elapsed
            side_effect: log_change
      GREEN: {}

Handler functions can also be loaded from a directory::

    handlers/
      conditions/*.py     # every public function becomes a condition
      side_effects/*.py   # every public function becomes a side effect
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from ..exceptions import ConfigurationError
from ..utils.io import read_yaml
from ..utils.loader import iter_python_files, load_module_from_path, register_callables_from_module
from .engine import StateMachine
from .registry import TransitionRegistry
from .states import StateSource, resolve_state
from .transition import Transition

logger = logging.getLogger(__name__)

# Handler directory names, mapped to the registry they populate
HANDLER_DIRS = ("conditions", "side_effects")

DEFAULT_MACHINE_NAME = "machine"


def read_definition(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a machine definition document from YAML.

    Raises:
        ConfigurationError: If the file is missing, invalid or not a mapping
    """
    p = Path(path)
    try:
        data = read_yaml(p, default=None, raise_on_error=True)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Machine definition not found: {p}", context={"path": str(p)}) from exc
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            f"Invalid machine definition {p}: {exc}", context={"path": str(p)}
        ) from exc
    if not isinstance(data, Mapping):
        raise ConfigurationError(
            f"Machine definition {p} must be a mapping", context={"path": str(p)}
        )
    return dict(data)


def _optional_name(value: Any, field: str, where: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{where}: '{field}' must be a non-empty string")
    return value


def build_transitions(
    spec: Mapping[str, Any],
    registry: TransitionRegistry[Any, Any],
    states: StateSource,
) -> List[Transition[Any, Any]]:
    """Build transitions from a parsed definition, in document order.

    Args:
        spec: Definition mapping with a ``states`` section
        registry: Registry used to resolve condition/side-effect names
        states: Enum subclass or mapping used to resolve state names

    Raises:
        ConfigurationError: On unknown states or names, or malformed nodes
    """
    states_cfg = (spec or {}).get("states")
    if not isinstance(states_cfg, Mapping):
        raise ConfigurationError("Machine definition requires a mapping of states")

    transitions: List[Transition[Any, Any]] = []
    for state_name, info in states_cfg.items():
        from_state = resolve_state(states, state_name)
        info = info or {}
        if not isinstance(info, Mapping):
            raise ConfigurationError(f"State '{state_name}' must be a mapping")
        allowed = info.get("allowed_transitions") or []
        if not isinstance(allowed, list):
            raise ConfigurationError(f"State '{state_name}': allowed_transitions must be a list")

        for index, node in enumerate(allowed):
            where = f"State '{state_name}' transition #{index}"
            if not isinstance(node, Mapping):
                raise ConfigurationError(f"{where} must be a mapping")
            if node.get("to") is None:
                raise ConfigurationError(f"{where} is missing 'to'")
            condition_name = _optional_name(node.get("condition"), "condition", where)
            if condition_name is None:
                raise ConfigurationError(f"{where} is missing 'condition'")
            side_effect_name = _optional_name(node.get("side_effect"), "side_effect", where)

            transitions.append(
                registry.build_transition(
                    from_state,
                    resolve_state(states, node["to"]),
                    condition_name,
                    side_effect_name,
                )
            )
    return transitions


def load_machine(
    source: Union[str, Path, Mapping[str, Any]],
    registry: TransitionRegistry[Any, Any],
    states: StateSource,
    *,
    name: Optional[str] = None,
) -> StateMachine[Any, Any]:
    """Build a ``StateMachine`` from a YAML path or a parsed definition."""
    spec = source if isinstance(source, Mapping) else read_definition(source)
    transitions = build_transitions(spec, registry, states)
    machine_name = name or spec.get("name") or DEFAULT_MACHINE_NAME
    logger.debug("Built machine %s with %d transitions", machine_name, len(transitions))
    return StateMachine(transitions, name=str(machine_name))


def load_handlers(registry: TransitionRegistry[Any, Any], directory: Union[str, Path]) -> Dict[str, int]:
    """Register functions from ``directory/conditions`` and ``directory/side_effects``.

    Files are loaded in sorted order; a later file re-registering a name wins.

    Returns:
        Dict with counts of loaded handlers by kind
    """
    root = Path(directory)
    register = {
        "conditions": registry.register_condition,
        "side_effects": registry.register_side_effect,
    }
    counts: Dict[str, int] = {}
    for kind in HANDLER_DIRS:
        count = 0
        for path in iter_python_files([root / kind]):
            module = load_module_from_path(path, f"fsmkit.{kind}")
            count += register_callables_from_module(module, register[kind])
        counts[kind] = count

    total = sum(counts.values())
    if total > 0:
        logger.info("Loaded %d handlers from %s: %s", total, root, counts)
    return counts


__all__ = [
    "read_definition",
    "build_transitions",
    "load_machine",
    "load_handlers",
    "HANDLER_DIRS",
]
