"""Macro Calculations - Pure functions for nutrition math.

All functions are pure: same input always produces same output, no side effects.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from .models import (
    ActivityLevel,
    DailyEntry,
    FoodItem,
    Gender,
    GoalPair,
    MacroGoals,
    MacroTotals,
    Profile,
)


LBS_TO_KG = 0.453592
INCHES_TO_CM = 2.54

ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTRA_ACTIVE: 1.9,
}

DEFICIT_RATIO = 0.20
PROTEIN_PER_KG = 2.2
FAT_CALORIE_SHARE = 0.25
REST_CARB_RATIO = 0.8
REST_CALORIE_RATIO = 0.9


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's built-in round() uses banker's rounding, which would give
    round(2.5) == 2.
    """
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def calculate_bmr(weight_kg: float, height_cm: float, age: int, gender: str) -> float:
    """Basal metabolic rate using the Mifflin-St Jeor equation."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == Gender.MALE:
        return base + 5
    return base - 161


def rest_goals_from_workout(workout: MacroGoals) -> MacroGoals:
    """Derive rest-day goals from workout-day goals.

    Protein and fat carry over; carbs and calories are scaled down
    independently, so calories are not re-solved from the reduced carbs.
    """
    return MacroGoals(
        protein=workout.protein,
        fat=workout.fat,
        carbs=round_half_away(workout.carbs * REST_CARB_RATIO),
        calories=round_half_away(workout.calories * REST_CALORIE_RATIO),
    )


def calculate_goals(profile: Profile) -> Optional[GoalPair]:
    """Calculate workout-day and rest-day goals for a profile.

    Args:
        profile: The user's profile

    Returns:
        GoalPair, or None if a required metric is missing
    """
    required = (
        profile.weight_lbs,
        profile.height_feet,
        profile.age,
        profile.gender,
        profile.activity_level,
    )
    if not all(required):
        return None

    weight_kg = profile.weight_lbs * LBS_TO_KG
    height_cm = (profile.height_feet * 12 + (profile.height_inches or 0)) * INCHES_TO_CM

    bmr = calculate_bmr(weight_kg, height_cm, profile.age, profile.gender)
    tdee = bmr * ACTIVITY_MULTIPLIERS[ActivityLevel(profile.activity_level)]
    deficit = tdee * DEFICIT_RATIO
    target_calories = tdee - deficit

    protein = round_half_away(weight_kg * PROTEIN_PER_KG)
    fat = round_half_away(target_calories * FAT_CALORIE_SHARE / 9)
    carbs = round_half_away((target_calories - protein * 4 - fat * 9) / 4)

    workout = MacroGoals(
        protein=protein,
        carbs=carbs,
        fat=fat,
        calories=round_half_away(target_calories),
    )
    # Rest calories scale the unrounded target, not the rounded workout calories
    rest = MacroGoals(
        protein=protein,
        carbs=round_half_away(carbs * REST_CARB_RATIO),
        fat=fat,
        calories=round_half_away(target_calories * REST_CALORIE_RATIO),
    )

    return GoalPair(
        workout=workout,
        rest=rest,
        bmr=round_half_away(bmr),
        tdee=round_half_away(tdee),
        deficit=round_half_away(deficit),
    )


def goals_from_suggestion(calories: float, protein: float, carbs: float, fat: float) -> GoalPair:
    """Build a goal pair from externally suggested workout-day targets."""
    workout = MacroGoals(
        calories=round_half_away(calories),
        protein=round_half_away(protein),
        carbs=round_half_away(carbs),
        fat=round_half_away(fat),
    )
    return GoalPair(workout=workout, rest=rest_goals_from_workout(workout))


def sum_consumed(foods: Iterable[FoodItem]) -> MacroTotals:
    """Sum calories and macros over a day's foods.

    Args:
        foods: Foods logged for the day

    Returns:
        MacroTotals with the consumed amounts
    """
    foods = list(foods)
    return MacroTotals(
        calories=sum(f.calories or 0 for f in foods),
        protein=sum(f.protein or 0 for f in foods),
        carbs=sum(f.carbs or 0 for f in foods),
        fat=sum(f.fat or 0 for f in foods),
    )


def calculate_remaining(goals: MacroGoals, consumed: MacroTotals) -> MacroTotals:
    """Goal minus consumed for each field. Negative means over goal."""
    return MacroTotals(
        calories=goals.calories - consumed.calories,
        protein=goals.protein - consumed.protein,
        carbs=goals.carbs - consumed.carbs,
        fat=goals.fat - consumed.fat,
    )


def resolve_is_workout_day(entry: Optional[DailyEntry]) -> bool:
    """Day type for an entry; unset or missing entries are workout days."""
    if entry is None or entry.is_workout_day is None:
        return True
    return entry.is_workout_day


def select_goals(goals: GoalPair, entry: Optional[DailyEntry]) -> MacroGoals:
    """Pick the goal variant that applies to the entry's day type."""
    return goals.workout if resolve_is_workout_day(entry) else goals.rest
