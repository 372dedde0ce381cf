from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, List, Optional, Tuple, Union

from ..exceptions import EvaluationError
from .result import EvaluationResult
from .states import S, state_label
from .table import TransitionTable
from .transition import C, Transition

logger = logging.getLogger(__name__)


class StateMachine(Generic[S, C]):
    """Deterministic evaluator over an immutable transition table.

    A machine holds no per-run state, so one instance may be shared by any
    number of threads evaluating independent contexts.
    """

    def __init__(
        self,
        transitions: Union[TransitionTable[S, C], Iterable[Transition[S, C]]],
        *,
        name: str = "machine",
    ) -> None:
        self.name = name
        if isinstance(transitions, TransitionTable):
            self.table = transitions
        else:
            self.table = TransitionTable(transitions)

    def candidates(self, state: S) -> Tuple[Transition[S, C], ...]:
        return self.table.from_state(state)

    def allowed_targets(self, state: S) -> List[S]:
        return self.table.allowed_targets(state)

    def is_terminal(self, state: S) -> bool:
        return self.table.is_terminal(state)

    def _check_condition(self, transition: Transition[S, C], context: C) -> bool:
        try:
            result = bool(transition.condition(context))
        except Exception as exc:
            logger.warning(
                "%s: condition %s raised: %s",
                self.name,
                transition.describe(),
                exc,
            )
            raise EvaluationError(
                f"Condition '{_condition_label(transition)}' failed on "
                f"{transition.describe()}: {exc}",
                phase=EvaluationError.PHASE_CONDITION,
                state=transition.from_state,
                transition=transition,
                context={
                    "machine": self.name,
                    "from": state_label(transition.from_state),
                    "to": state_label(transition.to_state),
                    "condition": transition.condition_name,
                },
            ) from exc
        logger.debug("%s: condition %s -> %s", self.name, transition.describe(), result)
        return result

    def _run_side_effect(self, result: EvaluationResult[S, C], context: C) -> None:
        transition = result.transition
        if transition is None or transition.side_effect is None:
            return
        try:
            transition.side_effect(context, transition.from_state, transition.to_state)
        except Exception as exc:
            logger.warning(
                "%s: side effect %s raised after commit: %s",
                self.name,
                transition.describe(),
                exc,
            )
            raise EvaluationError(
                f"Side effect '{_side_effect_label(transition)}' failed on "
                f"{transition.describe()}: {exc}",
                phase=EvaluationError.PHASE_SIDE_EFFECT,
                state=transition.to_state,
                transition=transition,
                result=result,
                context={
                    "machine": self.name,
                    "from": state_label(transition.from_state),
                    "to": state_label(transition.to_state),
                    "side_effect": transition.side_effect_name,
                },
            ) from exc

    def evaluate(self, current_state: S, context: C) -> EvaluationResult[S, C]:
        """Attempt one transition from ``current_state``.

        Execution order:
        1. Candidates leaving current_state, in declaration order
        2. Guards evaluated until the first one passes (short-circuit)
        3. State committed to the selected transition's destination
        4. Side effect of that transition, if any, invoked once

        Args:
            current_state: State the machine is in
            context: Data handed to guards and side effects

        Returns:
            EvaluationResult describing the outcome; a state with no
            outgoing transitions or no passing guard yields "no transition"

        Raises:
            EvaluationError: If a guard raises (state unchanged) or a side
                effect raises (state already committed to the destination)
        """
        candidates = self.table.from_state(current_state)
        if not candidates:
            logger.debug("%s: %s has no outgoing transitions", self.name, state_label(current_state))
            return EvaluationResult.no_transition(current_state)

        selected: Optional[Transition[S, C]] = None
        evaluated = 0
        for transition in candidates:
            evaluated += 1
            if self._check_condition(transition, context):
                selected = transition
                break

        if selected is None:
            logger.debug(
                "%s: no condition passed from %s (%d checked)",
                self.name,
                state_label(current_state),
                evaluated,
            )
            return EvaluationResult.no_transition(current_state, conditions_evaluated=evaluated)

        result: EvaluationResult[S, C] = EvaluationResult.taken_by(selected, evaluated)
        logger.debug("%s: taking %s", self.name, selected.describe())
        self._run_side_effect(result, context)
        return result

    def start(self, initial_state: S, context: C) -> "MachineRun[S, C]":
        return MachineRun(self, initial_state, context)

    def __repr__(self) -> str:
        return f"StateMachine(name={self.name!r}, transitions={len(self.table)})"


class MachineRun(Generic[S, C]):
    """Current state and context of one logical machine run.

    A run is owned by a single caller; it is not safe to step the same run
    from several threads at once.
    """

    def __init__(self, machine: StateMachine[S, C], initial_state: S, context: C) -> None:
        self.machine = machine
        self.state = initial_state
        self.context = context
        self.history: List[EvaluationResult[S, C]] = []

    def step(self) -> EvaluationResult[S, C]:
        """Evaluate once from the current state and record the outcome.

        On a side-effect failure the run has already moved to the committed
        destination before the error is re-raised.
        """
        try:
            result = self.machine.evaluate(self.state, self.context)
        except EvaluationError as exc:
            if exc.committed and exc.result is not None:
                self.state = exc.result.state
                self.history.append(exc.result)
            raise
        if result.taken:
            self.state = result.state
            self.history.append(result)
        return result

    @property
    def is_terminal(self) -> bool:
        return self.machine.is_terminal(self.state)


def _condition_label(transition: Transition[Any, Any]) -> str:
    return transition.condition_name or getattr(transition.condition, "__name__", "<condition>")


def _side_effect_label(transition: Transition[Any, Any]) -> str:
    return transition.side_effect_name or getattr(transition.side_effect, "__name__", "<side_effect>")


__all__ = ["StateMachine", "MachineRun"]
