"""Side-effect registry for state machine transitions.

Side effects run once when their transition is taken, after the machine has
committed to the destination state. They receive ``(context, from, to)`` and
may mutate the context or perform I/O.
"""
from __future__ import annotations

from typing import Any

from .handlers.registries import HandlerRegistry
from .transition import SideEffect


class SideEffectRegistry(HandlerRegistry[SideEffect]):
    """Registry of transition side effects keyed by name."""

    @property
    def kind(self) -> str:
        return "side effect"

    def execute(self, name: str, context: Any, from_state: Any, to_state: Any) -> Any:
        """Run a registered side effect.

        Raises:
            ConfigurationError: If the side effect is not registered
        """
        return self.resolve(name)(context, from_state, to_state)


__all__ = ["SideEffectRegistry"]
