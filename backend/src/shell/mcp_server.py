"""MCP Server - Tool definitions for the fitness tracker.

Defines all MCP tools a client can invoke for profiles, food and workout
logging, dashboards and AI coaching.
Handles authentication via API key in Authorization header.
"""

import logging
import os
from contextvars import ContextVar
from datetime import date, datetime

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from pydantic import ValidationError

from ..core.models import FoodItem, Profile, WorkoutSet
from ..core.macros import (
    calculate_goals,
    calculate_remaining,
    goals_from_suggestion,
    select_goals,
    sum_consumed,
)
from ..core.reports import (
    build_chart_series,
    build_dashboard,
    last_week,
    needs_progress_photo,
    needs_weight_entry,
)
from ..core.workouts import replace_exercise as replace_planned_exercise
from .ai_coach import AICoach
from .auth import AuthClient
from .firestore_client import DEFAULT_APP_ID, FirestoreConfig, FitnessFirestoreClient
from .gemini_client import DEFAULT_BASE_URL, DEFAULT_MODEL, AIServiceError, GeminiClient, GeminiConfig


logger = logging.getLogger(__name__)

# Context variable to store current user_id per request
current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=[
        "localhost:*",
        "127.0.0.1:*",
        "*.run.app:*",
        "*.run.app",
    ],
)

mcp = FastMCP(
    "maxcro",
    instructions="""Maxcro Tracker - Personal macro and workout tracking assistant.

Use these tools to help users hit their daily calorie and macro goals,
log meals and workouts, and review their progress.

On first use, call setup_profile so goals can be calculated.
Use estimate_meal when the user describes a meal without numbers, then log_food.
After logging, show the updated dashboard.""",
    stateless_http=True,
    transport_security=transport_security,
)

# Lazy-initialized clients
_firestore_client: FitnessFirestoreClient | None = None
_auth_client: AuthClient | None = None
_ai_coach: AICoach | None = None


def get_firestore_client() -> FitnessFirestoreClient:
    """Get or create Firestore client."""
    global _firestore_client
    if _firestore_client is None:
        config = FirestoreConfig(
            project_id=os.environ.get("FIRESTORE_PROJECT"),
            database=os.environ.get("FIRESTORE_DATABASE", "maxcro"),
            app_id=os.environ.get("MAXCRO_APP_ID", DEFAULT_APP_ID),
        )
        _firestore_client = FitnessFirestoreClient(config)
    return _firestore_client


def get_auth_client() -> AuthClient:
    """Get or create Auth client."""
    global _auth_client
    if _auth_client is None:
        db = get_firestore_client()
        _auth_client = AuthClient(db.client, db.config.app_id)
    return _auth_client


def get_ai_coach() -> AICoach:
    """Get or create the AI coach.

    Raises:
        AIServiceError: If GEMINI_API_KEY is not set
    """
    global _ai_coach
    if _ai_coach is None:
        config = GeminiConfig(
            api_key=os.environ.get("GEMINI_API_KEY"),
            model=os.environ.get("GEMINI_MODEL", DEFAULT_MODEL),
            base_url=os.environ.get("GEMINI_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.environ.get("GEMINI_TIMEOUT", "60")),
        )
        _ai_coach = AICoach(GeminiClient(config))
    return _ai_coach


async def close_ai_coach() -> None:
    """Release the AI coach's HTTP session, if one was opened."""
    global _ai_coach
    if _ai_coach is not None:
        await _ai_coach.close()
        _ai_coach = None


def get_user_id() -> str:
    """Get current authenticated user ID.

    Raises:
        RuntimeError: If no user is authenticated
    """
    user_id = current_user_id.get()
    if user_id is None:
        raise RuntimeError("No authenticated user. Ensure API key is provided.")
    return user_id


def _parse_date(date_str: str | None) -> date:
    """Parse YYYY-MM-DD, defaulting to today. Raises ValueError."""
    if not date_str:
        return date.today()
    return date.fromisoformat(date_str)


def _validation_details(error: ValidationError) -> list[dict]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


def _entry_dict(entry) -> dict:
    return {
        "date": entry.entry_date.isoformat(),
        "weight_lbs": entry.weight_lbs,
        "is_workout_day": entry.is_workout_day,
        "foods": [f.model_dump() for f in entry.foods],
        "workout_log": {
            name: [s.model_dump() for s in sets] for name, sets in entry.workout_log.items()
        },
    }


def _save_with_goals(user_id: str, profile: Profile) -> dict:
    """Recompute goals for the profile and persist it."""
    db = get_firestore_client()
    profile.goals = calculate_goals(profile)
    if not db.save_profile(user_id, profile):
        return {"error": "Failed to save profile. Please try again."}

    result = {"profile": profile.model_dump(mode="json", exclude={"goals"})}
    if profile.goals is None:
        result["warning"] = "Profile incomplete. Goals will be calculated once all metrics are set."
    else:
        result["goals"] = profile.goals.model_dump()
    return result


# ==================== Profile Tools ====================


@mcp.tool()
def setup_profile(
    weight_lbs: float,
    height_feet: int,
    age: int,
    gender: str,
    activity_level: str,
    height_inches: int = 0,
    bf_goal: float = 20,
    name: str | None = None,
) -> dict:
    """Create the user's profile and calculate workout-day and rest-day goals.

    Call this on first use.

    Args:
        weight_lbs: Body weight in pounds (e.g., 180)
        height_feet: Height, feet part (e.g., 5)
        age: Age in years
        gender: "male" or "female"
        activity_level: sedentary, lightly_active, moderately_active,
            very_active or extra_active
        height_inches: Height, inches part (e.g., 10)
        bf_goal: Body-fat goal in percent
        name: Optional display name

    Returns:
        Stored profile and calculated goals
    """
    user_id = get_user_id()

    try:
        profile = Profile(
            name=name,
            weight_lbs=weight_lbs,
            height_feet=height_feet,
            height_inches=height_inches,
            age=age,
            gender=gender,
            activity_level=activity_level,
            bf_goal=bf_goal,
        )
    except ValidationError as e:
        return {
            "error": f"Invalid profile: {e.error_count()} field(s) rejected.",
            "details": _validation_details(e),
        }

    return _save_with_goals(user_id, profile)


@mcp.tool()
def get_profile() -> dict:
    """Retrieve the user's profile and current goals.

    Returns:
        Dictionary with profile fields and goals, or error if not set up
    """
    user_id = get_user_id()
    db = get_firestore_client()

    profile = db.get_profile(user_id)
    if profile is None:
        return {"error": "No profile found. Please use setup_profile first."}

    return profile.model_dump(mode="json")


@mcp.tool()
def update_profile(
    weight_lbs: float | None = None,
    height_feet: int | None = None,
    height_inches: int | None = None,
    age: int | None = None,
    gender: str | None = None,
    activity_level: str | None = None,
    bf_goal: float | None = None,
    name: str | None = None,
) -> dict:
    """Edit the profile. Only provided fields change; goals are recalculated.

    Recalculation replaces any goals accepted from a progress photo.

    Returns:
        Updated profile and goals
    """
    user_id = get_user_id()
    db = get_firestore_client()

    profile = db.get_profile(user_id)
    if profile is None:
        return {"error": "No profile found. Please use setup_profile first."}

    updates = {
        key: value
        for key, value in {
            "weight_lbs": weight_lbs,
            "height_feet": height_feet,
            "height_inches": height_inches,
            "age": age,
            "gender": gender,
            "activity_level": activity_level,
            "bf_goal": bf_goal,
            "name": name,
        }.items()
        if value is not None
    }
    if not updates:
        return {"error": "No updates provided."}

    try:
        profile = Profile(**{**profile.model_dump(), **updates})
    except ValidationError as e:
        return {
            "error": f"Invalid profile: {e.error_count()} field(s) rejected.",
            "details": _validation_details(e),
        }

    return _save_with_goals(user_id, profile)


# ==================== Daily Log Tools ====================


@mcp.tool()
def get_dashboard(date_str: str | None = None) -> dict:
    """Get goals, consumed and remaining macros for a day.

    Args:
        date_str: Date in YYYY-MM-DD format (defaults to today)

    Returns:
        Dashboard numbers, the day's foods and any reminders
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        view_date = _parse_date(date_str)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    profile = db.get_profile(user_id)
    if profile is None:
        return {"error": "No profile found. Please use setup_profile first."}

    entry = db.get_daily_entry(user_id, view_date)
    if profile.goals is None:
        return {
            "date": view_date.isoformat(),
            "foods": [f.model_dump() for f in entry.foods] if entry else [],
            "warning": "Goals not available yet. Complete the profile with update_profile.",
        }

    dashboard = build_dashboard(profile.goals, entry, view_date)

    today = date.today()
    today_entry = entry if view_date == today else db.get_daily_entry(user_id, today)
    today_entries = {today.isoformat(): today_entry} if today_entry else {}

    return {
        **dashboard.model_dump(mode="json"),
        "reminders": {
            "log_weight": needs_weight_entry(today_entries, today),
            "progress_photo": needs_progress_photo(profile.last_photo_upload_date, datetime.utcnow()),
        },
    }


@mcp.tool()
def log_food(
    name: str,
    calories: float,
    protein: float,
    carbs: float,
    fat: float,
    date_str: str | None = None,
) -> dict:
    """Add a food to a day's log.

    Args:
        name: Name of the food (e.g., "Chicken rice bowl")
        calories: Total calories for this serving
        protein: Protein in grams
        carbs: Carbohydrates in grams
        fat: Fat in grams
        date_str: Date in YYYY-MM-DD format (defaults to today)

    Returns:
        The logged food and the day's remaining macros
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        entry_date = _parse_date(date_str)
        food = FoodItem(name=name, calories=calories, protein=protein, carbs=carbs, fat=fat)
    except ValidationError:
        return {"error": "Invalid food. Name is required and numbers must not be negative."}
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    entry = db.add_food(user_id, entry_date, food)
    if entry is None:
        return {"error": "Failed to log food. Please try again."}

    result = {"food": food.model_dump(), "food_count": len(entry.foods)}

    profile = db.get_profile(user_id)
    if profile is None or profile.goals is None:
        result["warning"] = "No goals configured. Use setup_profile to see remaining macros."
        return result

    goals = select_goals(profile.goals, entry)
    result["remaining"] = calculate_remaining(goals, sum_consumed(entry.foods)).model_dump()
    return result


@mcp.tool()
def delete_food(index: int, date_str: str | None = None) -> dict:
    """Delete a food from a day's log by its position.

    Args:
        index: Zero-based position of the food in the day's log
        date_str: Date in YYYY-MM-DD format (defaults to today)

    Returns:
        Confirmation and the remaining foods
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        entry_date = _parse_date(date_str)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    entry = db.delete_food(user_id, entry_date, index)
    if entry is None:
        return {"error": "Food not found or delete failed."}

    return {
        "success": True,
        "foods": [f.model_dump() for f in entry.foods],
        "consumed": sum_consumed(entry.foods).model_dump(),
    }


@mcp.tool()
def log_weight(weight_lbs: float, date_str: str | None = None) -> dict:
    """Record body weight for a day.

    Args:
        weight_lbs: Body weight in pounds, must be positive
        date_str: Date in YYYY-MM-DD format (defaults to today)
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        entry_date = _parse_date(date_str)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    if weight_lbs <= 0:
        return {"error": "Weight must be greater than zero."}

    if not db.set_weight(user_id, entry_date, weight_lbs):
        return {"error": "Failed to save weight. Please try again."}
    return {"success": True, "date": entry_date.isoformat(), "weight_lbs": weight_lbs}


@mcp.tool()
def set_day_type(is_workout_day: bool, date_str: str | None = None) -> dict:
    """Mark a day as a workout day or a rest day.

    Rest days use lower carb and calorie goals.

    Args:
        is_workout_day: True for a workout day, False for a rest day
        date_str: Date in YYYY-MM-DD format (defaults to today)
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        entry_date = _parse_date(date_str)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    if not db.set_workout_day(user_id, entry_date, is_workout_day):
        return {"error": "Failed to update day type. Please try again."}
    return {"success": True, "date": entry_date.isoformat(), "is_workout_day": is_workout_day}


# ==================== Workout Tools ====================


@mcp.tool()
def log_workout_set(exercise: str, reps: int, weight: float, date_str: str | None = None) -> dict:
    """Log one set of an exercise.

    Args:
        exercise: Exercise name (e.g., "Bench Press")
        reps: Repetitions performed
        weight: Weight lifted in pounds
        date_str: Date in YYYY-MM-DD format (defaults to today)

    Returns:
        The day's sets for this exercise
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        entry_date = _parse_date(date_str)
        new_set = WorkoutSet(reps=reps, weight=weight)
    except ValidationError:
        return {"error": "Reps and weight must both be greater than zero."}
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    entry = db.add_workout_set(user_id, entry_date, exercise, new_set)
    if entry is None:
        return {"error": "Failed to log set. Please try again."}

    return {
        "exercise": exercise,
        "sets": [s.model_dump() for s in entry.workout_log[exercise]],
    }


@mcp.tool()
def delete_workout_set(exercise: str, index: int, date_str: str | None = None) -> dict:
    """Delete one logged set of an exercise by its position.

    Args:
        exercise: Exercise name
        index: Zero-based position of the set
        date_str: Date in YYYY-MM-DD format (defaults to today)
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        entry_date = _parse_date(date_str)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    entry = db.delete_workout_set(user_id, entry_date, exercise, index)
    if entry is None:
        return {"error": "Set not found or delete failed."}

    return {
        "success": True,
        "exercise": exercise,
        "sets": [s.model_dump() for s in entry.workout_log.get(exercise, [])],
    }


# ==================== Query Tools ====================


@mcp.tool()
def get_day(date_str: str) -> dict:
    """Get a specific day's raw entry (foods, weight, day type, workout log).

    Args:
        date_str: Date in YYYY-MM-DD format
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        entry_date = date.fromisoformat(date_str)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    entry = db.get_daily_entry(user_id, entry_date)
    if entry is None:
        return {"date": date_str, "foods": [], "workout_log": {}, "is_workout_day": None, "weight_lbs": None}
    return _entry_dict(entry)


@mcp.tool()
def get_charts() -> dict:
    """Get per-day weight and macro totals for progress charts.

    Returns:
        Dictionary with one point per logged day, oldest first
    """
    user_id = get_user_id()
    db = get_firestore_client()

    points = build_chart_series(db.get_daily_entries(user_id))
    return {"points": [p.model_dump(mode="json") for p in points]}


# ==================== AI Tools ====================


@mcp.tool()
async def estimate_meal(
    description: str | None = None,
    image_base64: str | None = None,
    mime_type: str = "image/jpeg",
) -> dict:
    """Estimate calories and macros for a meal from text or a photo.

    The estimate is not logged; pass it to log_food to record it.

    Args:
        description: Meal description (e.g., "2 eggs and toast with butter")
        image_base64: Base64-encoded meal photo
        mime_type: MIME type of the photo
    """
    get_user_id()
    try:
        food = await get_ai_coach().estimate_meal(description, image_base64, mime_type)
    except ValueError as e:
        return {"error": str(e)}
    except AIServiceError as e:
        return {"error": f"Failed to analyze food. Please try again. ({e})"}
    return {"estimate": food.model_dump()}


@mcp.tool()
async def generate_workout_plan() -> dict:
    """Generate a 4-day weekly workout plan from the profile and save it."""
    user_id = get_user_id()
    db = get_firestore_client()

    profile = db.get_profile(user_id)
    if profile is None:
        return {"error": "No profile found. Please use setup_profile first."}

    try:
        plan = await get_ai_coach().generate_workout_plan(profile)
    except AIServiceError as e:
        return {"error": f"Failed to generate workout plan. Please try again. ({e})"}

    result = {"plan": plan.model_dump()}
    if not db.save_workout_plan(user_id, plan):
        result["warning"] = "Plan generated but could not be saved."
    return result


@mcp.tool()
async def suggest_substitutes(exercise_name: str) -> dict:
    """Suggest 5 alternative exercises for the same muscle group.

    Args:
        exercise_name: Exercise to replace
    """
    get_user_id()
    try:
        names = await get_ai_coach().suggest_substitutes(exercise_name)
    except AIServiceError as e:
        return {"error": f"Failed to find substitutes. Please try again. ({e})"}
    return {"exercise": exercise_name, "substitutes": names}


@mcp.tool()
def replace_exercise(day_index: int, exercise_index: int, new_name: str) -> dict:
    """Swap an exercise in the saved workout plan.

    Args:
        day_index: Zero-based plan day
        exercise_index: Zero-based exercise within the day
        new_name: Replacement exercise name
    """
    user_id = get_user_id()
    db = get_firestore_client()

    plan = db.get_workout_plan(user_id)
    if plan is None:
        return {"error": "No workout plan found. Use generate_workout_plan first."}

    updated = replace_planned_exercise(plan, day_index, exercise_index, new_name)
    if updated is None:
        return {"error": "Exercise position not found in plan."}

    if not db.save_workout_plan(user_id, updated):
        return {"error": "Failed to save workout plan. Please try again."}
    return {"plan": updated.model_dump()}


@mcp.tool()
async def suggest_meal(date_str: str | None = None) -> dict:
    """Suggest a meal that fits the macros remaining for a day.

    Args:
        date_str: Date in YYYY-MM-DD format (defaults to today)
    """
    user_id = get_user_id()
    db = get_firestore_client()

    try:
        view_date = _parse_date(date_str)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    profile = db.get_profile(user_id)
    if profile is None or profile.goals is None:
        return {"error": "No goals configured. Use setup_profile first."}

    dashboard = build_dashboard(profile.goals, db.get_daily_entry(user_id, view_date), view_date)
    try:
        idea = await get_ai_coach().suggest_meal(dashboard.remaining)
    except AIServiceError as e:
        return {"error": f"Failed to get meal idea. Please try again. ({e})"}
    return {"remaining": dashboard.remaining.model_dump(), "idea": idea.model_dump()}


@mcp.tool()
async def analyze_progress_photo(image_base64: str, mime_type: str = "image/jpeg") -> dict:
    """Analyze a physique photo and propose new daily targets.

    The proposal is not applied; call accept_goals to use it.

    Args:
        image_base64: Base64-encoded progress photo
        mime_type: MIME type of the photo
    """
    user_id = get_user_id()
    db = get_firestore_client()

    profile = db.get_profile(user_id)
    if profile is None:
        return {"error": "No profile found. Please use setup_profile first."}

    try:
        suggestion = await get_ai_coach().analyze_progress_photo(profile, image_base64, mime_type)
    except AIServiceError as e:
        return {"error": f"Failed to analyze photo. Please try again. ({e})"}

    if not db.record_progress_photo(user_id, datetime.utcnow(), suggestion):
        logger.warning("Progress photo analysis not recorded for %s", user_id[:8])

    proposed = goals_from_suggestion(
        suggestion.calories, suggestion.protein, suggestion.carbs, suggestion.fat
    )
    return {"reasoning": suggestion.reasoning, "proposed_goals": proposed.model_dump(exclude_none=True)}


@mcp.tool()
def accept_goals(calories: float, protein: float, carbs: float, fat: float) -> dict:
    """Replace goals with suggested workout-day targets.

    Rest-day goals are derived from them (80% carbs, 90% calories).

    Args:
        calories: Workout-day calorie target
        protein: Workout-day protein target in grams
        carbs: Workout-day carb target in grams
        fat: Workout-day fat target in grams
    """
    user_id = get_user_id()
    db = get_firestore_client()

    profile = db.get_profile(user_id)
    if profile is None:
        return {"error": "No profile found. Please use setup_profile first."}

    if min(calories, protein, carbs, fat) < 0:
        return {"error": "Targets must not be negative."}

    profile.goals = goals_from_suggestion(calories, protein, carbs, fat)
    profile.last_photo_upload_date = datetime.utcnow()
    if not db.save_profile(user_id, profile):
        return {"error": "Failed to save goals. Please try again."}
    return {"success": True, "goals": profile.goals.model_dump(exclude_none=True)}


@mcp.tool()
async def get_weekly_summary() -> dict:
    """Get an AI-written summary of the last 7 logged days with one tip.

    Returns:
        Dictionary with the days summarized and the summary text
    """
    user_id = get_user_id()
    db = get_firestore_client()

    week = last_week(build_chart_series(db.get_daily_entries(user_id)))
    if not week:
        return {"error": "No logged days yet. Log some food first."}

    try:
        summary = await get_ai_coach().summarize_week(week)
    except AIServiceError as e:
        return {"error": f"Failed to summarize your week. Please try again. ({e})"}

    return {
        "days": [p.model_dump(mode="json") for p in week],
        "summary": summary,
    }
