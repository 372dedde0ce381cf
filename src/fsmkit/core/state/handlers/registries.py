"""Generic named registries for state machine handlers.

A registry maps a handler name to a callable. Names are late-bound: machine
definitions refer to guards and side effects by name, and the builder resolves
those names into function references before any evaluation happens.

Example usage:
    registry.register("has_work", lambda ctx: bool(ctx["queue"]))
    registry.register("has_work", other_fn)  # last registration wins

    registry.resolve("has_work")  # Returns other_fn
    registry.resolve("missing")   # Raises ConfigurationError
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

from ...exceptions import ConfigurationError

# Type variable for handler functions
T = TypeVar("T", bound=Callable[..., Any])


class HandlerRegistry(Generic[T], ABC):
    """Name to callable mapping with overwrite-on-reregister semantics.

    Registries are populated while a machine is being defined and are
    read-only afterwards. Concurrent register + lookup is not supported.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, T] = {}

    @property
    @abstractmethod
    def kind(self) -> str:
        """Handler kind used in error messages (e.g. 'condition')."""

    def register(self, name: str, handler: T) -> None:
        """Register a handler function, replacing any previous one."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        self._handlers[name] = handler

    def add(self, name: str, handler: T) -> None:
        """Add a handler function (alias for register)."""
        self.register(name, handler)

    def get(self, name: str) -> Optional[T]:
        """Get a handler by name, or None if not registered."""
        return self._handlers.get(name)

    def has(self, name: str) -> bool:
        """Check if a handler exists."""
        return name in self._handlers

    def resolve(self, name: str) -> T:
        """Return the handler registered under ``name``.

        Raises:
            ConfigurationError: If no handler is registered under that name
        """
        handler = self.get(name)
        if handler is None:
            known = ", ".join(sorted(self._handlers)) or "none"
            raise ConfigurationError(
                f"Unknown {self.kind}: {name} (registered: {known})",
                context={"kind": self.kind, "name": name},
            )
        return handler

    def names(self) -> List[str]:
        """List all registered handler names."""
        return list(self._handlers)

    @property
    def handlers(self) -> Mapping[str, T]:
        """Read-only view of the registered handlers."""
        return MappingProxyType(self._handlers)

    def reset(self) -> None:
        """Clear all handlers."""
        self._handlers.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


__all__ = ["HandlerRegistry"]
