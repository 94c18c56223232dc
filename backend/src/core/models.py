"""Core Data Models - Pydantic models for type safety.

All models are value objects with no behavior beyond validation.
"""

from datetime import datetime
from datetime import date as DateType
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Gender(str, Enum):
    """Gender used by the Mifflin-St Jeor equation."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(str, Enum):
    """Daily activity level, each mapped to a TDEE multiplier."""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"
    EXTRA_ACTIVE = "extra_active"


class MacroGoals(BaseModel):
    """Calorie and macro targets for one day type."""

    calories: int = Field(description="Daily calorie target")
    protein: int = Field(description="Protein target in grams")
    carbs: int = Field(description="Carbohydrate target in grams")
    fat: int = Field(description="Fat target in grams")


class GoalPair(BaseModel):
    """Workout-day and rest-day goals derived from a profile."""

    workout: MacroGoals
    rest: MacroGoals
    bmr: Optional[int] = Field(default=None, description="Rounded basal metabolic rate")
    tdee: Optional[int] = Field(default=None, description="Rounded total daily energy expenditure")
    deficit: Optional[int] = Field(default=None, description="Rounded daily calorie deficit")


class Profile(BaseModel):
    """User profile captured at onboarding.

    Body metrics are optional so a partially completed form can be stored;
    goals are only computable once every required metric is present.
    """

    name: Optional[str] = None
    weight_lbs: Optional[float] = Field(default=None, ge=0, description="Body weight in pounds")
    height_feet: Optional[int] = Field(default=None, ge=0)
    height_inches: Optional[int] = Field(default=None, ge=0, lt=12)
    age: Optional[int] = Field(default=None, ge=0)
    gender: Optional[Gender] = None
    activity_level: Optional[ActivityLevel] = None
    bf_goal: float = Field(default=20, ge=0, le=100, description="Body-fat goal in percent")
    goals: Optional[GoalPair] = Field(default=None, description="Cached goals, recomputed on save")
    last_photo_upload_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(use_enum_values=True)


class FoodItem(BaseModel):
    """A single food logged for a day. Absent numbers count as zero."""

    name: str = Field(min_length=1, description="Name of the food")
    protein: float = Field(default=0, ge=0, description="Protein in grams")
    carbs: float = Field(default=0, ge=0, description="Carbohydrates in grams")
    fat: float = Field(default=0, ge=0, description="Fat in grams")
    calories: float = Field(default=0, ge=0, description="Total calories")


class WorkoutSet(BaseModel):
    """One logged set of an exercise."""

    reps: int = Field(gt=0)
    weight: float = Field(gt=0, description="Weight lifted in pounds")


class DailyEntry(BaseModel):
    """Everything logged for one calendar day."""

    entry_date: DateType = Field(description="Date of this entry (YYYY-MM-DD)")
    weight_lbs: Optional[float] = Field(default=None, gt=0)
    foods: list[FoodItem] = Field(default_factory=list)
    is_workout_day: Optional[bool] = Field(default=None, description="None means workout day")
    workout_log: dict[str, list[WorkoutSet]] = Field(default_factory=dict)


class MacroTotals(BaseModel):
    """Summed or remaining calories and macros. Remaining values may be negative."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class DashboardView(BaseModel):
    """Numbers shown on the home screen for the selected date."""

    view_date: DateType
    is_workout_day: bool
    goals: MacroGoals
    consumed: MacroTotals
    remaining: MacroTotals
    foods: list[FoodItem]


class ChartPoint(BaseModel):
    """Per-day totals used by the progress charts."""

    point_date: DateType
    weight: Optional[float] = None
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class PlannedExercise(BaseModel):
    name: str
    sets: str
    reps: str


class WorkoutDay(BaseModel):
    day: str
    focus: str
    exercises: list[PlannedExercise]


class WorkoutPlan(BaseModel):
    """Weekly workout plan generated by the AI coach."""

    plan_title: str = Field(alias="planTitle")
    weekly_summary: str = Field(alias="weeklySummary")
    days: list[WorkoutDay]

    model_config = ConfigDict(populate_by_name=True)


class MealIdea(BaseModel):
    """Meal suggestion that fits the remaining macros."""

    meal_name: str = Field(alias="mealName")
    recipe: str
    reasoning: str

    model_config = ConfigDict(populate_by_name=True)


class GoalSuggestion(BaseModel):
    """Workout-day targets proposed from a progress photo."""

    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    calories: float = Field(ge=0)
    reasoning: str


class User(BaseModel):
    """Anonymous account record stored in Firestore."""

    api_key_hash: str = Field(description="SHA256 hash of API key - never store plaintext")
    created_at: datetime = Field(default_factory=datetime.utcnow)
