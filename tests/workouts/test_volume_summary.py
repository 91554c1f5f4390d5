"""Tests for session volume and summary."""

from factories import build_exercise, build_session

from liftcoach.workouts.state import ExerciseState, SetState
from liftcoach.workouts.summary import summarize, total_volume
from liftcoach.workouts.transitions import complete_current_set


def _exercise(*sets: SetState) -> ExerciseState:
    return ExerciseState(id="e", name="E", muscle_group="", rest_seconds=60, sets=sets)


def test_volume_uses_completed_reps():
    exercise = _exercise(
        SetState(set_number=1, target_reps=10, completed_reps=8, weight=40, completed=True),
        SetState(set_number=2, target_reps=10, completed_reps=8, weight=40, completed=True),
    )
    assert total_volume([exercise]) == 640


def test_volume_falls_back_to_target_reps_and_ignores_missing_weight():
    exercise = _exercise(
        SetState(set_number=1, target_reps=10, weight=50),
        SetState(set_number=2, target_reps=10, weight=None),
    )
    assert total_volume([exercise]) == 500


def test_volume_of_empty_session_is_zero():
    assert total_volume([]) == 0


def test_summarize_counts_completion():
    state = build_session(build_exercise("a", sets=1, weight=20), build_exercise("b", sets=2, weight=10))
    state = complete_current_set(state, reps=10, weight=20).state

    summary = summarize(state)

    assert summary.completed_exercises == 1
    assert summary.total_exercises == 2
    assert summary.completed_sets == 1
    assert not summary.is_complete
    assert summary.total_volume == 20 * 10 + 10 * 10 * 2
