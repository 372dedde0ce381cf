"""Transition value type.

A transition is one directed edge: source state, destination state, a guard
condition over the context and an optional side effect invoked when the edge
is taken. Names are diagnostic labels for the registry entries that supplied
the functions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from ..exceptions import ConfigurationError
from .states import S, ensure_state, state_label

C = TypeVar("C")

Condition = Callable[[Any], bool]
SideEffect = Callable[[Any, Any, Any], Any]


@dataclass(frozen=True)
class Transition(Generic[S, C]):
    """Immutable edge between two states."""

    from_state: S
    to_state: S
    condition: Callable[[C], bool]
    side_effect: Optional[Callable[[C, S, S], Any]] = None
    condition_name: Optional[str] = None
    side_effect_name: Optional[str] = None

    def __post_init__(self) -> None:
        ensure_state(self.from_state, role="from_state")
        ensure_state(self.to_state, role="to_state")
        if not callable(self.condition):
            raise ConfigurationError(
                "Transition condition must be callable",
                context={"from": state_label(self.from_state), "to": state_label(self.to_state)},
            )
        if self.side_effect is not None and not callable(self.side_effect):
            raise ConfigurationError(
                "Transition side_effect must be callable or None",
                context={"from": state_label(self.from_state), "to": state_label(self.to_state)},
            )

    @property
    def is_reentrant(self) -> bool:
        return self.from_state == self.to_state

    def describe(self) -> str:
        """Return a readable label like ``IDLE -> RUNNING [has_work / start]``."""
        edge = f"{state_label(self.from_state)} -> {state_label(self.to_state)}"
        cond = self.condition_name or getattr(self.condition, "__name__", "<condition>")
        if self.side_effect is None:
            return f"{edge} [{cond}]"
        effect = self.side_effect_name or getattr(self.side_effect, "__name__", "<side_effect>")
        return f"{edge} [{cond} / {effect}]"


__all__ = ["Transition", "Condition", "SideEffect", "C"]
