"""AI Coach - Meal estimates, workout plans and progress feedback.

Builds prompts with core.prompts, sends them through GeminiClient and
validates the answers into core models.
"""

import logging

from pydantic import ValidationError

from ..core.models import ChartPoint, FoodItem, GoalSuggestion, MacroTotals, MealIdea, Profile, WorkoutPlan
from ..core import prompts
from .gemini_client import AIServiceError, GeminiClient


logger = logging.getLogger(__name__)


class AICoach:
    """High-level AI features on top of a Gemini client."""

    def __init__(self, gemini: GeminiClient) -> None:
        self._gemini = gemini

    async def estimate_meal(
        self,
        description: str | None = None,
        image_base64: str | None = None,
        mime_type: str = "image/jpeg",
    ) -> FoodItem:
        """Estimate a meal's macros from a description or a photo.

        Args:
            description: Free-text meal description
            image_base64: Base64-encoded meal photo (takes precedence)
            mime_type: MIME type of the photo

        Returns:
            FoodItem ready to be logged

        Raises:
            ValueError: If neither description nor image is given
            AIServiceError: If the AI call fails
        """
        if image_base64:
            parts = [
                prompts.text_part("Analyze the food in this image:"),
                prompts.image_part(image_base64, mime_type),
            ]
        elif description:
            parts = [prompts.text_part(f"Analyze this meal: {description}")]
        else:
            raise ValueError("Please provide input.")

        data = await self._gemini.generate_json(
            prompts.MEAL_ESTIMATE_SYSTEM_PROMPT, parts, prompts.MEAL_ESTIMATE_SCHEMA
        )
        return _validate(FoodItem, data)

    async def generate_workout_plan(self, profile: Profile) -> WorkoutPlan:
        """Generate a 4-day weekly plan for the profile."""
        data = await self._gemini.generate_json(
            prompts.workout_plan_prompt(profile),
            [prompts.text_part("Generate a workout plan for me.")],
            prompts.WORKOUT_PLAN_SCHEMA,
        )
        return _validate(WorkoutPlan, data)

    async def suggest_substitutes(self, exercise_name: str) -> list[str]:
        """Alternative exercises for the same muscle group."""
        data = await self._gemini.generate_json(
            prompts.substitutes_prompt(exercise_name),
            [prompts.text_part(f"Substitutes for {exercise_name}")],
            prompts.SUBSTITUTES_SCHEMA,
        )
        if not isinstance(data, list) or not all(isinstance(name, str) for name in data):
            raise AIServiceError("Invalid response from AI.")
        return data

    async def analyze_progress_photo(
        self, profile: Profile, image_base64: str, mime_type: str = "image/jpeg"
    ) -> GoalSuggestion:
        """Suggest new workout-day targets from a physique photo."""
        data = await self._gemini.generate_json(
            prompts.progress_photo_prompt(profile),
            [prompts.text_part("Analyze my progress."), prompts.image_part(image_base64, mime_type)],
            prompts.GOAL_SUGGESTION_SCHEMA,
        )
        return _validate(GoalSuggestion, data)

    async def suggest_meal(self, remaining: MacroTotals) -> MealIdea:
        """Suggest one meal that fits the remaining macros."""
        data = await self._gemini.generate_json(
            prompts.meal_idea_prompt(remaining),
            [prompts.text_part("Give me a meal idea.")],
            prompts.MEAL_IDEA_SCHEMA,
        )
        return _validate(MealIdea, data)

    async def summarize_week(self, points: list[ChartPoint]) -> str:
        """Short encouraging summary of the last days, plus one tip."""
        return await self._gemini.generate_text(
            prompts.weekly_summary_prompt(points),
            [prompts.text_part("Summarize my week.")],
        )

    async def close(self) -> None:
        await self._gemini.close()


def _validate(model, data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("AI output failed validation for %s: %s", model.__name__, e.error_count())
        raise AIServiceError("Invalid response from AI.") from e
