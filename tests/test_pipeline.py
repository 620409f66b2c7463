"""Tests for the resumable step runner."""

import pytest

from termux_stack.pipeline import run_pipeline
from termux_stack.state_store import ensure_defaults, is_step_completed


class RecordingStep:
    def __init__(self, step_id, log, *, always_run=False):
        self.step_id = step_id
        self.log = log
        self.always_run = always_run

    def run(self, state):
        self.log.append(self.step_id)
        state.setdefault("seen", []).append(self.step_id)
        return state


def _steps(log):
    return [RecordingStep("10_a", log), RecordingStep("20_b", log), RecordingStep("30_c", log)]


def test_runs_steps_in_order_and_marks_completed():
    log = []
    state = ensure_defaults({})
    result = run_pipeline(state=state, steps=_steps(log))

    assert log == ["10_a", "20_b", "30_c"]
    assert result.ran_steps == ["10_a", "20_b", "30_c"]
    assert result.skipped_steps == []
    assert all(is_step_completed(state, s) for s in log)
    assert state["execution"]["current_step"] is None
    assert set(state["execution"]["timings"]) == {"10_a", "20_b", "30_c"}


def test_completed_steps_are_skipped_on_resume():
    log = []
    state = ensure_defaults({})
    state["execution"]["completed_steps"] = ["10_a", "20_b"]

    result = run_pipeline(state=state, steps=_steps(log))

    assert log == ["30_c"]
    assert result.skipped_steps == ["10_a", "20_b"]


def test_force_reruns_completed_steps():
    log = []
    state = ensure_defaults({})
    state["execution"]["completed_steps"] = ["10_a", "20_b", "30_c"]

    run_pipeline(state=state, steps=_steps(log), force=True)

    assert log == ["10_a", "20_b", "30_c"]


def test_always_run_step_ignores_completion():
    log = []
    state = ensure_defaults({})
    steps = [RecordingStep("10_a", log), RecordingStep("90_launch", log, always_run=True)]
    state["execution"]["completed_steps"] = ["10_a", "90_launch"]

    result = run_pipeline(state=state, steps=steps)

    assert log == ["90_launch"]
    assert result.skipped_steps == ["10_a"]


def test_start_at_and_stop_after_bound_the_run():
    log = []
    state = ensure_defaults({})

    run_pipeline(state=state, steps=_steps(log), start_at="20_b", stop_after="20_b")

    assert log == ["20_b"]


def test_unknown_step_bound_is_rejected():
    with pytest.raises(ValueError, match="Unknown start_at"):
        run_pipeline(state=ensure_defaults({}), steps=_steps([]), start_at="99_nope")


def test_failing_step_is_not_marked_completed():
    class Boom:
        step_id = "20_boom"

        def run(self, state):
            raise RuntimeError("boom")

    log = []
    state = ensure_defaults({})
    with pytest.raises(RuntimeError):
        run_pipeline(state=state, steps=[RecordingStep("10_a", log), Boom()])

    assert is_step_completed(state, "10_a")
    assert not is_step_completed(state, "20_boom")
    assert state["execution"]["current_step"] == "20_boom"
