"""Machine builder: collects transitions and freezes them into a machine.

Names are validated eagerly so that a misspelled condition or side effect is
reported while the machine is being defined, never during evaluation.
"""
from __future__ import annotations

from typing import Any, Callable, Generic, List, Optional

from ..exceptions import ConfigurationError
from .engine import StateMachine
from .registry import TransitionRegistry
from .states import S, state_label
from .table import TransitionTable
from .transition import C, Transition


class MachineBuilder(Generic[S, C]):
    """Chainable builder for a ``StateMachine``.

    Usage:
        machine = (
            MachineBuilder(registry, name="door")
            .add_named(Door.CLOSED, Door.OPEN, "pushed", "log_change")
            .add(Door.OPEN, Door.CLOSED, lambda ctx: ctx["timeout"])
            .build()
        )
    """

    def __init__(
        self,
        registry: Optional[TransitionRegistry[S, C]] = None,
        *,
        name: str = "machine",
    ) -> None:
        self.registry = registry
        self.name = name
        self._transitions: List[Transition[S, C]] = []

    def _check_named(self, kind: str, name: Optional[str], fn: Optional[Callable[..., Any]]) -> None:
        if name is None or self.registry is None:
            return
        registered = (
            self.registry.conditions if kind == "condition" else self.registry.side_effects
        ).get(name)
        if registered is None:
            raise ConfigurationError(
                f"Unknown {kind}: {name}",
                context={"kind": kind, "name": name, "machine": self.name},
            )
        if registered is not fn:
            raise ConfigurationError(
                f"{kind.capitalize()} name '{name}' is registered with a different function",
                context={"kind": kind, "name": name, "machine": self.name},
            )

    def add(
        self,
        from_state: S,
        to_state: S,
        condition: Callable[[C], bool],
        side_effect: Optional[Callable[[C, S, S], Any]] = None,
        *,
        condition_name: Optional[str] = None,
        side_effect_name: Optional[str] = None,
    ) -> "MachineBuilder[S, C]":
        """Add a transition from directly supplied functions.

        When a registry is attached, any given name must be registered with
        exactly the supplied function.
        """
        self._check_named("condition", condition_name, condition)
        self._check_named("side effect", side_effect_name, side_effect)
        return self.add_transition(
            Transition(
                from_state=from_state,
                to_state=to_state,
                condition=condition,
                side_effect=side_effect,
                condition_name=condition_name,
                side_effect_name=side_effect_name,
            )
        )

    def add_named(
        self,
        from_state: S,
        to_state: S,
        condition_name: str,
        side_effect_name: Optional[str] = None,
    ) -> "MachineBuilder[S, C]":
        """Add a transition whose functions are resolved through the registry."""
        if self.registry is None:
            raise ConfigurationError(
                f"Cannot resolve '{condition_name}' for "
                f"{state_label(from_state)} -> {state_label(to_state)}: no registry attached",
                context={"machine": self.name},
            )
        return self.add_transition(
            self.registry.build_transition(from_state, to_state, condition_name, side_effect_name)
        )

    def add_transition(self, transition: Transition[S, C]) -> "MachineBuilder[S, C]":
        if not isinstance(transition, Transition):
            raise ConfigurationError(f"expected Transition, got {type(transition).__name__}")
        self._transitions.append(transition)
        return self

    @property
    def transitions(self) -> List[Transition[S, C]]:
        return list(self._transitions)

    def build(self) -> StateMachine[S, C]:
        """Freeze the declared transitions into a machine."""
        return StateMachine(TransitionTable(self._transitions), name=self.name)


__all__ = ["MachineBuilder"]
