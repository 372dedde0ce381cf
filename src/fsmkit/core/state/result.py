"""Evaluation outcome returned by ``StateMachine.evaluate``."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional

from .states import S, state_label
from .transition import C, Transition


@dataclass(frozen=True)
class EvaluationResult(Generic[S, C]):
    """Either "no transition taken" or "transition T taken".

    ``conditions_evaluated`` counts the guards called before the outcome was
    decided; evaluation stops at the first guard that passes.
    """

    previous_state: S
    state: S
    transition: Optional[Transition[S, C]] = None
    conditions_evaluated: int = 0

    @classmethod
    def no_transition(cls, state: S, conditions_evaluated: int = 0) -> "EvaluationResult[S, C]":
        return cls(previous_state=state, state=state, conditions_evaluated=conditions_evaluated)

    @classmethod
    def taken_by(cls, transition: Transition[S, C], conditions_evaluated: int) -> "EvaluationResult[S, C]":
        return cls(
            previous_state=transition.from_state,
            state=transition.to_state,
            transition=transition,
            conditions_evaluated=conditions_evaluated,
        )

    @property
    def taken(self) -> bool:
        return self.transition is not None

    @property
    def condition_name(self) -> Optional[str]:
        return self.transition.condition_name if self.transition is not None else None

    @property
    def side_effect_name(self) -> Optional[str]:
        return self.transition.side_effect_name if self.transition is not None else None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly audit record."""
        return {
            "taken": self.taken,
            "from": state_label(self.previous_state),
            "to": state_label(self.state),
            "condition": self.condition_name,
            "side_effect": self.side_effect_name,
            "conditions_evaluated": self.conditions_evaluated,
        }


__all__ = ["EvaluationResult"]
