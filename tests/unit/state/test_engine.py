"""Tests for StateMachine.evaluate and MachineRun.step."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

import pytest

from fsmkit.core.exceptions import EvaluationError
from fsmkit.core.state import EvaluationResult, MachineRun, StateMachine, Transition, TransitionTable
from helpers.states import Light


def _always(ctx) -> bool:
    return True


def _never(ctx) -> bool:
    return False


class TestEvaluate:
    @pytest.fixture
    def calls(self) -> List[str]:
        return []

    def _tracked(self, calls: List[str], name: str, result: bool):
        def condition(ctx) -> bool:
            calls.append(name)
            return result

        return condition

    @pytest.mark.fast
    def test_no_outgoing_transitions_is_a_noop(self) -> None:
        machine = StateMachine([Transition(Light.RED, Light.GREEN, _always)])

        result = machine.evaluate(Light.GREEN, {})

        assert result.taken is False
        assert result.state is Light.GREEN
        assert result.previous_state is Light.GREEN
        assert result.conditions_evaluated == 0
        assert result.transition is None

    @pytest.mark.fast
    def test_no_passing_condition_is_a_noop(self, calls: List[str]) -> None:
        machine = StateMachine(
            [
                Transition(Light.RED, Light.GREEN, self._tracked(calls, "a", False)),
                Transition(Light.RED, Light.YELLOW, self._tracked(calls, "b", False)),
            ]
        )

        result = machine.evaluate(Light.RED, {})

        assert result == EvaluationResult.no_transition(Light.RED, conditions_evaluated=2)
        assert calls == ["a", "b"]

    @pytest.mark.fast
    def test_single_true_condition_is_taken(self) -> None:
        machine = StateMachine(
            [
                Transition(Light.RED, Light.OFFLINE, _never),
                Transition(Light.RED, Light.GREEN, _always, condition_name="always"),
            ]
        )

        result = machine.evaluate(Light.RED, {})

        assert result.taken is True
        assert result.state is Light.GREEN
        assert result.previous_state is Light.RED
        assert result.condition_name == "always"
        assert result.conditions_evaluated == 2

    @pytest.mark.fast
    def test_first_declared_wins_and_short_circuits(self, calls: List[str]) -> None:
        first = Transition(Light.RED, Light.GREEN, self._tracked(calls, "first", True))
        second = Transition(Light.RED, Light.YELLOW, self._tracked(calls, "second", True))
        machine = StateMachine([first, second])

        for _ in range(5):
            result = machine.evaluate(Light.RED, {})
            assert result.transition is first

        assert calls == ["first"] * 5

    @pytest.mark.fast
    def test_condition_receives_context(self) -> None:
        seen: List[Any] = []
        ctx = {"elapsed": 40}
        machine = StateMachine(
            [Transition(Light.RED, Light.GREEN, lambda c: seen.append(c) or c["elapsed"] > 30)]
        )

        assert machine.evaluate(Light.RED, ctx).taken
        assert seen == [ctx]

    @pytest.mark.fast
    def test_truthy_condition_results_count_as_true(self) -> None:
        machine = StateMachine([Transition(Light.RED, Light.GREEN, lambda ctx: ctx["queue"])])
        assert machine.evaluate(Light.RED, {"queue": [1]}).taken
        assert not machine.evaluate(Light.RED, {"queue": []}).taken

    @pytest.mark.fast
    def test_side_effect_invoked_once_only_for_taken_transition(self) -> None:
        effects: List[tuple] = []

        def record(name: str):
            return lambda ctx, frm, to: effects.append((name, frm, to))

        machine = StateMachine(
            [
                Transition(Light.RED, Light.OFFLINE, _never, side_effect=record("offline")),
                Transition(Light.RED, Light.GREEN, _always, side_effect=record("green")),
                Transition(Light.RED, Light.YELLOW, _always, side_effect=record("yellow")),
            ]
        )

        machine.evaluate(Light.RED, {})

        assert effects == [("green", Light.RED, Light.GREEN)]

    @pytest.mark.fast
    def test_side_effect_may_mutate_context(self) -> None:
        def bump(ctx: Dict[str, int], frm, to) -> None:
            ctx["count"] += 1

        machine = StateMachine([Transition(Light.RED, Light.GREEN, _always, side_effect=bump)])
        ctx = {"count": 0}
        machine.evaluate(Light.RED, ctx)
        machine.evaluate(Light.RED, ctx)
        assert ctx["count"] == 2

    @pytest.mark.fast
    def test_reentrant_transition_runs_side_effect(self) -> None:
        effects: List[tuple] = []
        machine = StateMachine(
            [
                Transition(
                    Light.YELLOW,
                    Light.YELLOW,
                    _always,
                    side_effect=lambda ctx, frm, to: effects.append((frm, to)),
                )
            ]
        )

        result = machine.evaluate(Light.YELLOW, {})

        assert result.taken is True
        assert result.state is Light.YELLOW
        assert effects == [(Light.YELLOW, Light.YELLOW)]

    @pytest.mark.fast
    def test_condition_error_propagates_as_evaluation_error(self, calls: List[str]) -> None:
        def broken(ctx) -> bool:
            raise KeyError("sensor")

        effects: List[str] = []
        machine = StateMachine(
            [
                Transition(Light.RED, Light.GREEN, broken, condition_name="sensor_ok"),
                Transition(
                    Light.RED,
                    Light.YELLOW,
                    self._tracked(calls, "later", True),
                    side_effect=lambda ctx, f, t: effects.append("ran"),
                ),
            ],
            name="lights",
        )

        with pytest.raises(EvaluationError) as exc_info:
            machine.evaluate(Light.RED, {})

        err = exc_info.value
        assert err.phase == EvaluationError.PHASE_CONDITION
        assert err.committed is False
        assert err.state is Light.RED
        assert err.result is None
        assert err.transition is not None and err.transition.to_state is Light.GREEN
        assert isinstance(err.__cause__, KeyError)
        assert err.context["machine"] == "lights"
        assert err.context["condition"] == "sensor_ok"
        assert "sensor_ok" in str(err)
        assert calls == []
        assert effects == []

    @pytest.mark.fast
    def test_side_effect_error_reports_committed_state(self) -> None:
        def explode(ctx, frm, to) -> None:
            raise RuntimeError("disk full")

        machine = StateMachine(
            [Transition(Light.RED, Light.GREEN, _always, side_effect=explode, side_effect_name="persist")]
        )

        with pytest.raises(EvaluationError) as exc_info:
            machine.evaluate(Light.RED, {})

        err = exc_info.value
        assert err.phase == EvaluationError.PHASE_SIDE_EFFECT
        assert err.committed is True
        assert err.state is Light.GREEN
        assert err.result is not None
        assert err.result.taken and err.result.state is Light.GREEN
        assert err.context["side_effect"] == "persist"
        assert isinstance(err.__cause__, RuntimeError)

    @pytest.mark.fast
    def test_accepts_prebuilt_table(self) -> None:
        table = TransitionTable([Transition(Light.RED, Light.GREEN, _always)])
        machine = StateMachine(table, name="lights")

        assert machine.table is table
        assert machine.candidates(Light.RED) == table.from_state(Light.RED)
        assert machine.allowed_targets(Light.RED) == [Light.GREEN]
        assert machine.is_terminal(Light.GREEN)
        assert "lights" in repr(machine)

    @pytest.mark.fast
    def test_debug_logging_records_taken_transition(self, caplog: pytest.LogCaptureFixture) -> None:
        machine = StateMachine(
            [Transition(Light.RED, Light.GREEN, _always, condition_name="always")], name="lights"
        )
        with caplog.at_level(logging.DEBUG, logger="fsmkit.core.state.engine"):
            machine.evaluate(Light.RED, {})

        assert any("taking RED -> GREEN [always]" in r.getMessage() for r in caplog.records)

    def test_shared_machine_across_threads(self) -> None:
        def bump(ctx: Dict[str, int], frm, to) -> None:
            ctx["hits"] += 1

        machine = StateMachine(
            [
                Transition(Light.RED, Light.GREEN, lambda ctx: ctx["id"] % 2 == 0, side_effect=bump),
                Transition(Light.RED, Light.YELLOW, _always, side_effect=bump),
            ]
        )
        contexts = [{"id": i, "hits": 0} for i in range(200)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda c: machine.evaluate(Light.RED, c), contexts))

        for ctx, result in zip(contexts, results):
            expected = Light.GREEN if ctx["id"] % 2 == 0 else Light.YELLOW
            assert result.state is expected
            assert ctx["hits"] == 1


class TestMachineRun:
    @pytest.fixture
    def machine(self) -> StateMachine:
        return StateMachine(
            [
                Transition(Light.RED, Light.GREEN, lambda ctx: ctx["go"]),
                Transition(Light.GREEN, Light.YELLOW, _always),
            ]
        )

    @pytest.mark.fast
    def test_step_advances_and_records_history(self, machine: StateMachine) -> None:
        run = machine.start(Light.RED, {"go": True})
        assert isinstance(run, MachineRun)

        first = run.step()
        second = run.step()
        third = run.step()

        assert run.state is Light.YELLOW
        assert [r.state for r in run.history] == [Light.GREEN, Light.YELLOW]
        assert first.taken and second.taken and not third.taken
        assert run.is_terminal

    @pytest.mark.fast
    def test_step_noop_keeps_state(self, machine: StateMachine) -> None:
        run = machine.start(Light.RED, {"go": False})
        result = run.step()

        assert not result.taken
        assert run.state is Light.RED
        assert run.history == []

    @pytest.mark.fast
    def test_guard_failure_leaves_state_unchanged(self) -> None:
        machine = StateMachine([Transition(Light.RED, Light.GREEN, lambda ctx: ctx["missing"])])
        run = machine.start(Light.RED, {})

        with pytest.raises(EvaluationError):
            run.step()

        assert run.state is Light.RED
        assert run.history == []

    @pytest.mark.fast
    def test_side_effect_failure_still_moves_state(self) -> None:
        def explode(ctx, frm, to) -> None:
            raise ValueError("boom")

        machine = StateMachine([Transition(Light.RED, Light.GREEN, _always, side_effect=explode)])
        run = machine.start(Light.RED, {})

        with pytest.raises(EvaluationError):
            run.step()

        assert run.state is Light.GREEN
        assert len(run.history) == 1
