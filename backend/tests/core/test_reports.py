"""Unit tests for dashboards, charts and reminders - pure functions, no mocks needed."""

from datetime import date, datetime, timedelta, timezone

from src.core.models import ChartPoint, DailyEntry, FoodItem, GoalPair, MacroGoals, MacroTotals
from src.core.reports import (
    build_chart_series,
    build_dashboard,
    last_week,
    needs_progress_photo,
    needs_weight_entry,
)


GOALS = GoalPair(
    workout=MacroGoals(calories=2000, protein=150, carbs=200, fat=60),
    rest=MacroGoals(calories=1800, protein=150, carbs=160, fat=60),
)


class TestBuildDashboard:
    """Tests for build_dashboard."""

    def test_no_entry_shows_full_workout_goals(self):
        dashboard = build_dashboard(GOALS, None, date(2025, 6, 2))

        assert dashboard.is_workout_day is True
        assert dashboard.goals == GOALS.workout
        assert dashboard.consumed == MacroTotals()
        assert dashboard.remaining == MacroTotals(calories=2000, protein=150, carbs=200, fat=60)
        assert dashboard.foods == []

    def test_partial_day(self):
        entry = DailyEntry(
            entry_date=date(2025, 6, 2),
            foods=[FoodItem(name="Lunch", calories=500, protein=40, carbs=60, fat=10)],
        )
        dashboard = build_dashboard(GOALS, entry, date(2025, 6, 2))

        assert dashboard.remaining == MacroTotals(calories=1500, protein=110, carbs=140, fat=50)

    def test_rest_day_uses_rest_goals(self):
        entry = DailyEntry(entry_date=date(2025, 6, 2), is_workout_day=False)
        dashboard = build_dashboard(GOALS, entry, date(2025, 6, 2))

        assert dashboard.is_workout_day is False
        assert dashboard.goals == GOALS.rest
        assert dashboard.remaining.carbs == 160

    def test_over_goal_stays_negative(self):
        entry = DailyEntry(
            entry_date=date(2025, 6, 2),
            foods=[FoodItem(name="Feast", calories=2500, protein=100, carbs=250, fat=90)],
        )
        dashboard = build_dashboard(GOALS, entry, date(2025, 6, 2))

        assert dashboard.remaining.calories == -500
        assert dashboard.remaining.fat == -30


class TestBuildChartSeries:
    """Tests for build_chart_series."""

    def test_empty(self):
        assert build_chart_series({}) == []

    def test_sorted_by_date_with_totals(self):
        entries = {
            "2025-06-03": DailyEntry(
                entry_date=date(2025, 6, 3),
                weight_lbs=179.5,
                foods=[FoodItem(name="B", calories=200, protein=20, carbs=20, fat=5)],
            ),
            "2025-06-01": DailyEntry(
                entry_date=date(2025, 6, 1),
                foods=[
                    FoodItem(name="A1", calories=100, protein=10, carbs=10, fat=2),
                    FoodItem(name="A2", calories=50),
                ],
            ),
        }
        points = build_chart_series(entries)

        assert [p.point_date for p in points] == [date(2025, 6, 1), date(2025, 6, 3)]
        assert points[0].calories == 150
        assert points[0].weight is None
        assert points[1].weight == 179.5
        assert points[1].protein == 20

    def test_weight_only_day_has_zero_totals(self):
        entries = {"2025-06-01": DailyEntry(entry_date=date(2025, 6, 1), weight_lbs=180)}
        points = build_chart_series(entries)

        assert points == [ChartPoint(point_date=date(2025, 6, 1), weight=180)]


class TestLastWeek:
    """Tests for last_week."""

    def test_keeps_last_seven(self):
        points = [ChartPoint(point_date=date(2025, 6, 1) + timedelta(days=i)) for i in range(10)]
        week = last_week(points)

        assert len(week) == 7
        assert week[0].point_date == date(2025, 6, 4)
        assert week[-1].point_date == date(2025, 6, 10)

    def test_short_history(self):
        points = [ChartPoint(point_date=date(2025, 6, 1))]
        assert last_week(points) == points


class TestNeedsWeightEntry:
    """Tests for needs_weight_entry."""

    def test_no_entry_today(self):
        assert needs_weight_entry({}, date(2025, 6, 2)) is True

    def test_entry_without_weight(self):
        entries = {"2025-06-02": DailyEntry(entry_date=date(2025, 6, 2))}
        assert needs_weight_entry(entries, date(2025, 6, 2)) is True

    def test_weight_logged(self):
        entries = {"2025-06-02": DailyEntry(entry_date=date(2025, 6, 2), weight_lbs=180)}
        assert needs_weight_entry(entries, date(2025, 6, 2)) is False

    def test_only_other_days_logged(self):
        entries = {"2025-06-01": DailyEntry(entry_date=date(2025, 6, 1), weight_lbs=180)}
        assert needs_weight_entry(entries, date(2025, 6, 2)) is True


class TestNeedsProgressPhoto:
    """Tests for needs_progress_photo."""

    now = datetime(2025, 6, 10, 12, 0)

    def test_never_uploaded(self):
        assert needs_progress_photo(None, self.now) is True

    def test_recent_upload(self):
        assert needs_progress_photo(self.now - timedelta(days=3), self.now) is False

    def test_exactly_a_week(self):
        assert needs_progress_photo(self.now - timedelta(days=7), self.now) is True

    def test_partial_day_rounds_up(self):
        """Six days and one hour counts as seven days."""
        assert needs_progress_photo(self.now - timedelta(days=6, hours=1), self.now) is True

    def test_mixed_timezone_awareness(self):
        last = datetime(2025, 6, 8, 12, 0, tzinfo=timezone.utc)
        assert needs_progress_photo(last, self.now) is False
