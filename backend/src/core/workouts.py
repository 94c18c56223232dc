"""Workout Log and Plan Editing - Pure functions returning updated copies.

Inputs are never mutated.
"""

from typing import Optional

from .models import WorkoutPlan, WorkoutSet


def add_workout_set(
    workout_log: dict[str, list[WorkoutSet]], exercise: str, new_set: WorkoutSet
) -> dict[str, list[WorkoutSet]]:
    """Append a set to an exercise, creating the exercise if needed."""
    updated = dict(workout_log)
    updated[exercise] = [*workout_log.get(exercise, []), new_set]
    return updated


def remove_workout_set(
    workout_log: dict[str, list[WorkoutSet]], exercise: str, index: int
) -> Optional[dict[str, list[WorkoutSet]]]:
    """Remove the set at index for an exercise.

    Returns:
        Updated log, or None if the exercise or index does not exist
    """
    sets = workout_log.get(exercise)
    if sets is None or not 0 <= index < len(sets):
        return None

    updated = dict(workout_log)
    updated[exercise] = [s for i, s in enumerate(sets) if i != index]
    return updated


def replace_exercise(
    plan: WorkoutPlan, day_index: int, exercise_index: int, new_name: str
) -> Optional[WorkoutPlan]:
    """Swap one planned exercise for another, keeping its sets and reps.

    Returns:
        Updated plan, or None if the position does not exist
    """
    if not 0 <= day_index < len(plan.days):
        return None
    exercises = plan.days[day_index].exercises
    if not 0 <= exercise_index < len(exercises):
        return None

    updated = plan.model_copy(deep=True)
    updated.days[day_index].exercises[exercise_index].name = new_name
    return updated
