"""Unit tests for prompt building - pure functions, no mocks needed."""

import json
from datetime import date

from src.core.models import ChartPoint, MacroTotals, Profile
from src.core.prompts import (
    MEAL_ESTIMATE_SCHEMA,
    WORKOUT_PLAN_SCHEMA,
    image_part,
    meal_idea_prompt,
    progress_photo_prompt,
    substitutes_prompt,
    text_part,
    weekly_summary_prompt,
    workout_plan_prompt,
)


PROFILE = Profile(
    weight_lbs=180,
    height_feet=5,
    height_inches=10,
    age=28,
    gender="male",
    activity_level="lightly_active",
    bf_goal=15,
)


class TestParts:
    """Tests for content part helpers."""

    def test_text_part(self):
        assert text_part("hi") == {"text": "hi"}

    def test_image_part(self):
        assert image_part("ZmFrZQ==", "image/png") == {
            "inlineData": {"data": "ZmFrZQ==", "mimeType": "image/png"}
        }


class TestPrompts:
    """Tests for the prompt builders."""

    def test_workout_plan_prompt_includes_profile(self):
        prompt = workout_plan_prompt(PROFILE)

        assert "Age: 28" in prompt
        assert "Gender: male" in prompt
        assert "reach 15% body fat" in prompt
        assert "Activity Level: lightly active" in prompt
        assert "4-day" in prompt

    def test_substitutes_prompt(self):
        prompt = substitutes_prompt("Barbell Row")
        assert "'Barbell Row'" in prompt
        assert "5 alternative exercises" in prompt

    def test_progress_photo_prompt(self):
        prompt = progress_photo_prompt(PROFILE)
        assert "goal is 15% body fat" in prompt
        assert "180.0 lbs" in prompt

    def test_meal_idea_prompt_rounds_remaining(self):
        remaining = MacroTotals(calories=612.5, protein=40.4, carbs=-12.6, fat=18.5)
        prompt = meal_idea_prompt(remaining)

        assert "Protein: 40g" in prompt
        assert "Carbs: -13g" in prompt
        assert "Fat: 19g" in prompt
        assert "Calories: 613." in prompt

    def test_weekly_summary_prompt_embeds_days(self):
        points = [
            ChartPoint(point_date=date(2025, 6, 1), weight=181.0, calories=1999.6),
            ChartPoint(point_date=date(2025, 6, 2), calories=2100.2),
        ]
        prompt = weekly_summary_prompt(points)

        assert "the last 2 days" in prompt
        expected = json.dumps([
            {"date": "2025-06-01", "weight": 181.0, "calories": 2000},
            {"date": "2025-06-02", "weight": None, "calories": 2100},
        ])
        assert expected in prompt


class TestSchemas:
    """Tests for response schemas."""

    def test_meal_schema_requires_all_fields(self):
        assert set(MEAL_ESTIMATE_SCHEMA["required"]) == {"name", "protein", "carbs", "fat", "calories"}

    def test_workout_schema_uses_camel_case(self):
        assert WORKOUT_PLAN_SCHEMA["required"] == ["planTitle", "weeklySummary", "days"]
