"""Per-definition registry of named conditions and side effects.

Each machine definition owns its own ``TransitionRegistry``; there is no
process-wide instance, so independent definitions never see each other's
handlers. The registry is a build-time resolution aid: names are resolved
into function references when transitions are built and the registry is not
consulted again during evaluation.
"""
from __future__ import annotations

from typing import Any, Callable, Generic, Mapping, Optional

from .conditions import ConditionRegistry
from .side_effects import SideEffectRegistry
from .states import S
from .transition import C, Transition


class TransitionRegistry(Generic[S, C]):
    """Registry for conditions and side effects used by transitions."""

    def __init__(self) -> None:
        self._conditions = ConditionRegistry()
        self._side_effects = SideEffectRegistry()

    @property
    def conditions(self) -> Mapping[str, Callable[[C], bool]]:
        """Read-only view of registered conditions."""
        return self._conditions.handlers

    @property
    def side_effects(self) -> Mapping[str, Callable[[C, S, S], Any]]:
        """Read-only view of registered side effects."""
        return self._side_effects.handlers

    @property
    def condition_registry(self) -> ConditionRegistry:
        return self._conditions

    @property
    def side_effect_registry(self) -> SideEffectRegistry:
        return self._side_effects

    def register_condition(self, name: str, fn: Callable[[C], bool]) -> None:
        """Register a condition. Overwrites if already registered."""
        self._conditions.register(name, fn)

    def register_side_effect(self, name: str, fn: Callable[[C, S, S], Any]) -> None:
        """Register a side effect. Overwrites if already registered."""
        self._side_effects.register(name, fn)

    def condition(self, name: str):
        """Decorator to register a condition function.

        Usage:
            @registry.condition("has_work")
            def has_work(ctx) -> bool:
                return bool(ctx["queue"])
        """

        def decorator(fn):
            self.register_condition(name, fn)
            return fn

        return decorator

    def side_effect(self, name: str):
        """Decorator to register a side-effect function.

        Usage:
            @registry.side_effect("start_worker")
            def start_worker(ctx, from_state, to_state) -> None:
                ctx["worker"].start()
        """

        def decorator(fn):
            self.register_side_effect(name, fn)
            return fn

        return decorator

    def resolve_condition(self, name: str) -> Callable[[C], bool]:
        return self._conditions.resolve(name)

    def resolve_side_effect(self, name: str) -> Callable[[C, S, S], Any]:
        return self._side_effects.resolve(name)

    def build_transition(
        self,
        from_state: S,
        to_state: S,
        condition_name: str,
        side_effect_name: Optional[str] = None,
    ) -> Transition[S, C]:
        """Build a transition whose functions are resolved by name.

        The functions registered *now* are bound into the transition;
        re-registering a name later does not affect it.

        Raises:
            ConfigurationError: If either name is not registered
        """
        condition = self.resolve_condition(condition_name)
        side_effect = None
        if side_effect_name is not None:
            side_effect = self.resolve_side_effect(side_effect_name)
        return Transition(
            from_state=from_state,
            to_state=to_state,
            condition=condition,
            side_effect=side_effect,
            condition_name=condition_name,
            side_effect_name=side_effect_name,
        )


__all__ = ["TransitionRegistry"]
