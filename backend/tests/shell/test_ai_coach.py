"""Unit tests for the AI coach - the Gemini client is replaced by a fake."""

import asyncio
from datetime import date

import pytest

from src.core.models import ChartPoint, MacroTotals, Profile
from src.core import prompts
from src.shell.ai_coach import AICoach
from src.shell.gemini_client import AIServiceError


class FakeGemini:
    """Records calls and answers with a canned payload."""

    def __init__(self, answer):
        self.answer = answer
        self.calls = []

    async def generate_json(self, system_prompt, parts, schema):
        self.calls.append((system_prompt, parts, schema))
        return self.answer

    async def generate_text(self, system_prompt, parts, schema=None):
        self.calls.append((system_prompt, parts, schema))
        return self.answer


PROFILE = Profile(
    weight_lbs=180,
    height_feet=5,
    height_inches=10,
    age=28,
    gender="male",
    activity_level="lightly_active",
)


class TestEstimateMeal:
    """Tests for estimate_meal."""

    def test_from_description(self):
        gemini = FakeGemini({"name": "Chicken salad", "protein": 35, "carbs": 10, "fat": 12, "calories": 300})
        food = asyncio.run(AICoach(gemini).estimate_meal(description="chicken salad"))

        assert food.name == "Chicken salad"
        assert food.calories == 300
        system_prompt, parts, schema = gemini.calls[0]
        assert system_prompt == prompts.MEAL_ESTIMATE_SYSTEM_PROMPT
        assert parts == [{"text": "Analyze this meal: chicken salad"}]
        assert schema == prompts.MEAL_ESTIMATE_SCHEMA

    def test_image_takes_precedence(self):
        gemini = FakeGemini({"name": "Pizza", "protein": 12, "carbs": 36, "fat": 10, "calories": 285})
        asyncio.run(AICoach(gemini).estimate_meal(description="salad", image_base64="aW1n", mime_type="image/png"))

        parts = gemini.calls[0][1]
        assert parts[0] == {"text": "Analyze the food in this image:"}
        assert parts[1] == {"inlineData": {"data": "aW1n", "mimeType": "image/png"}}

    def test_no_input(self):
        gemini = FakeGemini({})
        with pytest.raises(ValueError, match="Please provide input"):
            asyncio.run(AICoach(gemini).estimate_meal())
        assert gemini.calls == []

    def test_invalid_answer(self):
        gemini = FakeGemini({"name": "Mystery", "calories": -50})
        with pytest.raises(AIServiceError):
            asyncio.run(AICoach(gemini).estimate_meal(description="mystery"))


class TestOtherFeatures:
    """Tests for plans, substitutes, photos, meal ideas and summaries."""

    def test_workout_plan(self):
        gemini = FakeGemini({
            "planTitle": "Upper/Lower",
            "weeklySummary": "Four days.",
            "days": [{"day": "Day 1", "focus": "Upper", "exercises": []}],
        })
        plan = asyncio.run(AICoach(gemini).generate_workout_plan(PROFILE))

        assert plan.plan_title == "Upper/Lower"
        assert gemini.calls[0][2] == prompts.WORKOUT_PLAN_SCHEMA

    def test_substitutes(self):
        gemini = FakeGemini(["Dumbbell Row", "Cable Row"])
        names = asyncio.run(AICoach(gemini).suggest_substitutes("Barbell Row"))

        assert names == ["Dumbbell Row", "Cable Row"]
        assert gemini.calls[0][1] == [{"text": "Substitutes for Barbell Row"}]

    def test_substitutes_rejects_non_list(self):
        gemini = FakeGemini({"names": ["Dips"]})
        with pytest.raises(AIServiceError):
            asyncio.run(AICoach(gemini).suggest_substitutes("Bench Press"))

    def test_progress_photo(self):
        gemini = FakeGemini({"protein": 170, "carbs": 190, "fat": 60, "calories": 2000, "reasoning": "Lean."})
        suggestion = asyncio.run(AICoach(gemini).analyze_progress_photo(PROFILE, "aW1n"))

        assert suggestion.calories == 2000
        assert gemini.calls[0][1][1]["inlineData"]["mimeType"] == "image/jpeg"

    def test_meal_idea(self):
        gemini = FakeGemini({"mealName": "Tuna wrap", "recipe": "Wrap it.", "reasoning": "Fits."})
        idea = asyncio.run(AICoach(gemini).suggest_meal(MacroTotals(calories=500, protein=40, carbs=40, fat=15)))

        assert idea.meal_name == "Tuna wrap"
        assert "Protein: 40g" in gemini.calls[0][0]

    def test_weekly_summary(self):
        gemini = FakeGemini("Solid week. Drink more water.")
        points = [ChartPoint(point_date=date(2025, 6, 1), weight=180, calories=2000)]

        summary = asyncio.run(AICoach(gemini).summarize_week(points))

        assert summary == "Solid week. Drink more water."
        assert gemini.calls[0][2] is None
