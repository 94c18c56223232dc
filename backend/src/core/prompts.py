"""Prompt Building - Pure functions producing AI prompts and response schemas.

Schemas use the Gemini `responseSchema` dialect (upper-case type names).
"""

import json

from .macros import round_half_away
from .models import ChartPoint, MacroTotals, Profile


MEAL_ESTIMATE_SYSTEM_PROMPT = (
    "You are a nutritional expert. Analyze the provided meal. Provide a reasonable "
    "estimate of its macronutrients (protein, carbohydrates, fat in grams) and total "
    "calories. Respond ONLY with the data in the specified JSON schema. Be concise "
    "with the name."
)

MEAL_ESTIMATE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING"},
        "protein": {"type": "NUMBER"},
        "carbs": {"type": "NUMBER"},
        "fat": {"type": "NUMBER"},
        "calories": {"type": "NUMBER"},
    },
    "required": ["name", "protein", "carbs", "fat", "calories"],
}

WORKOUT_PLAN_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "planTitle": {"type": "STRING"},
        "weeklySummary": {"type": "STRING"},
        "days": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "day": {"type": "STRING"},
                    "focus": {"type": "STRING"},
                    "exercises": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "name": {"type": "STRING"},
                                "sets": {"type": "STRING"},
                                "reps": {"type": "STRING"},
                            },
                            "required": ["name", "sets", "reps"],
                        },
                    },
                },
                "required": ["day", "focus", "exercises"],
            },
        },
    },
    "required": ["planTitle", "weeklySummary", "days"],
}

SUBSTITUTES_SCHEMA = {"type": "ARRAY", "items": {"type": "STRING"}}

GOAL_SUGGESTION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "protein": {"type": "NUMBER"},
        "carbs": {"type": "NUMBER"},
        "fat": {"type": "NUMBER"},
        "calories": {"type": "NUMBER"},
        "reasoning": {"type": "STRING"},
    },
    "required": ["protein", "carbs", "fat", "calories", "reasoning"],
}

MEAL_IDEA_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "mealName": {"type": "STRING"},
        "recipe": {"type": "STRING"},
        "reasoning": {"type": "STRING"},
    },
    "required": ["mealName", "recipe", "reasoning"],
}


def text_part(text: str) -> dict:
    """A plain-text content part."""
    return {"text": text}


def image_part(data_base64: str, mime_type: str) -> dict:
    """An inline image content part from base64 data."""
    return {"inlineData": {"data": data_base64, "mimeType": mime_type}}


def workout_plan_prompt(profile: Profile) -> str:
    activity = (profile.activity_level or "").replace("_", " ", 1)
    return (
        "You are an expert personal trainer. Based on the user's profile: "
        f"Age: {profile.age}, Gender: {profile.gender}, Weight: {profile.weight_lbs} lbs, "
        f"Goal: reach {profile.bf_goal:g}% body fat, Activity Level: {activity}. "
        "Create a balanced 4-day weekly workout plan. Include a mix of compound and "
        "isolation exercises for each day, specifying the recommended sets and reps "
        '(e.g., "3 sets of 8-12 reps"). Provide a title for the plan and a brief weekly '
        "summary. Structure the response using the specified JSON schema."
    )


def substitutes_prompt(exercise_name: str) -> str:
    return (
        "You are an expert personal trainer. The user wants to substitute the exercise "
        f"'{exercise_name}'. Provide a list of 5 alternative exercises that target the "
        "same primary muscle group. Respond ONLY with a JSON array of strings, where "
        "each string is an exercise name."
    )


def progress_photo_prompt(profile: Profile) -> str:
    return (
        "You are an elite fitness and nutrition coach. Analyze the user's physique in "
        f"the photo. Their goal is {profile.bf_goal:g}% body fat. Current weight is "
        f"{profile.weight_lbs} lbs. Provide updated daily macronutrient targets (protein, "
        "carbs, fat, calories for a workout day) to help them achieve their goal. Also "
        "provide a brief, encouraging 'reasoning'. Respond ONLY with the specified JSON "
        "schema."
    )


def meal_idea_prompt(remaining: MacroTotals) -> str:
    """Prompt for a single meal that fits the remaining macros.

    Remaining amounts are rounded to whole numbers; negative values are
    passed through so the model knows the user is over goal.
    """
    return (
        "You are a helpful nutritionist. The user has the following macros remaining "
        f"for the day: Protein: {round_half_away(remaining.protein)}g, "
        f"Carbs: {round_half_away(remaining.carbs)}g, "
        f"Fat: {round_half_away(remaining.fat)}g, "
        f"Calories: {round_half_away(remaining.calories)}. "
        "Suggest a single, simple meal or snack that fits these macros. Provide a simple "
        "recipe (as a list of steps) and a brief reason why it's a good choice. Respond "
        "ONLY in the specified JSON format."
    )


def weekly_summary_prompt(points: list[ChartPoint]) -> str:
    simplified = [
        {
            "date": p.point_date.isoformat(),
            "weight": p.weight,
            "calories": round_half_away(p.calories),
        }
        for p in points
    ]
    return (
        "You are a positive and motivating fitness coach. Here is the user's data for "
        f"the last {len(simplified)} days: {json.dumps(simplified)}. Analyze their "
        "consistency with calories and their weight trend. Provide a short (2-3 "
        "sentences), encouraging summary of their week and one simple, actionable tip "
        'for the week ahead. Address the user directly as "you".'
    )
