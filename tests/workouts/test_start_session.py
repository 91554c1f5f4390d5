"""Tests for building sessions from saved programs."""

from __future__ import annotations

from liftcoach.db.models import Exercise, TemplateExercise, WorkoutTemplate
from liftcoach.db.session import get_session
from liftcoach.workouts.persistence import DatabaseSetStore
from liftcoach.workouts.service import start_session
from liftcoach.workouts.transitions import complete_current_set


def test_missing_program_is_an_empty_state(db_engine):
    result = start_session("does-not-exist", "user-1")
    assert result.session is None
    assert result.empty_reason == "no_program"


def test_program_without_exercises_is_an_empty_state(make_program):
    program_id = make_program("Empty", [])
    result = start_session(program_id, "user-1")
    assert result.session is None
    assert result.empty_reason == "no_exercises"


def test_other_users_program_is_not_found(make_program, exercise_library):
    program_id = make_program("Theirs", [(exercise_library["Barbell Squat"], 3, 5, None)], owner="someone-else")
    assert start_session(program_id, "user-1").empty_reason == "no_program"


def test_builds_sets_from_targets_and_defaults(make_program, exercise_library):
    program_id = make_program(
        "Push Day",
        [
            (exercise_library["Barbell Bench Press"], 4, 6, 180),
            (exercise_library["Dumbbell Fly"], None, None, None),
        ],
    )

    result = start_session(program_id, "user-1")

    session = result.session
    assert session.name == "Push Day"
    assert session.program_id == program_id
    bench, fly = session.exercises
    assert bench.name == "Barbell Bench Press"
    assert bench.muscle_group == "chest"
    assert bench.rest_seconds == 180
    assert [s.set_number for s in bench.sets] == [1, 2, 3, 4]
    assert all(s.target_reps == 6 and s.weight == 0 for s in bench.sets)
    assert fly.total_sets == 3
    assert fly.sets[0].target_reps == 10
    assert fly.rest_seconds == 120
    assert all(e.current_set == 1 for e in session.exercises)


def test_prefills_last_weight_from_history(make_program, exercise_library):
    bench_id = exercise_library["Barbell Bench Press"]
    program_id = make_program("Push Day", [(bench_id, 2, 8, 90)])

    first = start_session(program_id, "user-1").session
    store = DatabaseSetStore("user-1")
    state = first
    for weight in (70, 75):
        completion = complete_current_set(state, reps=8, weight=weight)
        store.save_completed_set(completion.state, completion.exercise_index, completion.completed_set)
        state = completion.state

    result = start_session(program_id, "user-1")

    assert result.session.id != first.id
    assert all(s.weight == 75 for s in result.session.exercises[0].sets)
    assert result.history[bench_id].pr_weight == 75


def test_anonymous_start_has_no_history(make_program, exercise_library):
    program_id = make_program("Legs", [(exercise_library["Barbell Squat"], 3, 5, None)], shared=True)
    result = start_session(program_id, None)
    assert result.session is not None
    assert result.history == {}


def test_anonymous_start_cannot_reach_owned_programs(make_program, exercise_library):
    program_id = make_program("Secret Plan", [(exercise_library["Barbell Bench Press"], 3, 8, None)])
    result = start_session(program_id, None)
    assert result.session is None
    assert result.empty_reason == "no_program"


def test_muscle_group_prefers_body_part(db_engine):
    with get_session() as session:
        bare = Exercise(name="Farmer Carry")
        targeted = Exercise(name="Calf Raise", target_muscle="calves")
        session.add_all([bare, targeted])
        session.flush()
        ids = (bare.id, targeted.id)
        template = WorkoutTemplate(user_id="user-1", name="Odd Jobs")
        session.add(template)
        session.flush()
        for index, exercise_id in enumerate(ids):
            session.add(TemplateExercise(template_id=template.id, exercise_id=exercise_id, order_index=index))
        program_id = template.id

    bare_state, targeted_state = start_session(program_id, "user-1").session.exercises

    assert bare_state.muscle_group == "General"
    assert targeted_state.muscle_group == "calves"
