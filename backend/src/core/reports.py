"""Report Generation - Pure functions for dashboards, charts and reminders.

All functions are pure: same input always produces same output, no side effects.
"""

import math
from datetime import date, datetime, timezone
from typing import Mapping, Optional

from .models import ChartPoint, DailyEntry, DashboardView, GoalPair
from .macros import calculate_remaining, resolve_is_workout_day, select_goals, sum_consumed


PHOTO_INTERVAL_DAYS = 7
WEEK_LENGTH = 7


def build_dashboard(goals: GoalPair, entry: Optional[DailyEntry], view_date: date) -> DashboardView:
    """Build the home screen numbers for one day.

    Args:
        goals: The user's goal pair
        entry: The day's entry, or None if nothing was logged yet
        view_date: The selected date

    Returns:
        DashboardView with goals, consumed and remaining amounts
    """
    foods = entry.foods if entry else []
    day_goals = select_goals(goals, entry)
    consumed = sum_consumed(foods)

    return DashboardView(
        view_date=view_date,
        is_workout_day=resolve_is_workout_day(entry),
        goals=day_goals,
        consumed=consumed,
        remaining=calculate_remaining(day_goals, consumed),
        foods=list(foods),
    )


def build_chart_series(entries: Mapping[str, DailyEntry]) -> list[ChartPoint]:
    """Turn daily entries into one chart point per day, oldest first.

    Args:
        entries: Daily entries keyed by ISO date

    Returns:
        List of ChartPoints sorted by date
    """
    points = []
    for key in sorted(entries):
        entry = entries[key]
        consumed = sum_consumed(entry.foods)
        points.append(
            ChartPoint(
                point_date=entry.entry_date,
                weight=entry.weight_lbs,
                calories=consumed.calories,
                protein=consumed.protein,
                carbs=consumed.carbs,
                fat=consumed.fat,
            )
        )
    return points


def last_week(points: list[ChartPoint]) -> list[ChartPoint]:
    """The most recent seven logged days."""
    return points[-WEEK_LENGTH:]


def needs_weight_entry(entries: Mapping[str, DailyEntry], today: date) -> bool:
    """True when today's weight has not been logged yet."""
    entry = entries.get(today.isoformat())
    return entry is None or entry.weight_lbs is None


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def needs_progress_photo(last_upload: Optional[datetime], now: datetime) -> bool:
    """True when no progress photo was uploaded in the last week.

    Partial days count as a full day, so an upload six days and one hour
    ago is already due.
    """
    if last_upload is None:
        return True
    elapsed_days = abs((_as_naive_utc(now) - _as_naive_utc(last_upload)).total_seconds()) / 86400
    return math.ceil(elapsed_days) >= PHOTO_INTERVAL_DAYS
