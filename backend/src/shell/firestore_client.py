"""Firestore Client - Persistence for profiles, daily entries and plans.

This module handles all database I/O for the tracker.
All I/O is contained here; business logic is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable

from google.cloud import firestore

from ..core.models import DailyEntry, FoodItem, GoalSuggestion, Profile, WorkoutPlan, WorkoutSet
from ..core.workouts import add_workout_set, remove_workout_set


logger = logging.getLogger(__name__)

DEFAULT_APP_ID = "maxcro-tracker-live"


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        app_id: Namespace under the artifacts collection
    """

    project_id: str | None = None
    database: str | None = None
    app_id: str = DEFAULT_APP_ID


class FitnessFirestoreClient:
    """Client for persisting profiles and daily entries to Firestore.

    Document structure per user:
        artifacts/{app_id}/users/{user_id}/
            profile/main: { weight_lbs, height_feet, ..., goals }
            dailyEntries/{YYYY-MM-DD}: { entry_date, foods: [...], ... }
            workoutPlan/current: { planTitle, weeklySummary, days }
            progressPhotos/{auto_id}: { taken_at, suggestion }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _app_ref(self) -> firestore.DocumentReference:
        return self.client.collection("artifacts").document(self.config.app_id)

    def _user_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to user document."""
        return self._app_ref().collection("users").document(user_id)

    def _profile_ref(self, user_id: str) -> firestore.DocumentReference:
        return self._user_ref(user_id).collection("profile").document("main")

    def _entries_ref(self, user_id: str) -> firestore.CollectionReference:
        return self._user_ref(user_id).collection("dailyEntries")

    def _entry_ref(self, user_id: str, entry_date: date) -> firestore.DocumentReference:
        """Get reference to daily entry document."""
        return self._entries_ref(user_id).document(entry_date.isoformat())

    def _plan_ref(self, user_id: str) -> firestore.DocumentReference:
        return self._user_ref(user_id).collection("workoutPlan").document("current")

    @staticmethod
    def _entry_from_doc(doc_id: str, data: dict) -> DailyEntry:
        data = dict(data)
        data.setdefault("entry_date", doc_id)
        if isinstance(data["entry_date"], str):
            data["entry_date"] = date.fromisoformat(data["entry_date"])
        return DailyEntry(**data)

    # ==================== Profile Operations ====================

    def get_profile(self, user_id: str) -> Profile | None:
        """Fetch the user's profile.

        Args:
            user_id: The user's ID

        Returns:
            Profile if found, None otherwise
        """
        logger.debug("Fetching profile for user: %s", user_id[:8])
        try:
            doc = self._profile_ref(user_id).get()
            if not doc.exists:
                return None
            return Profile(**doc.to_dict())
        except Exception as e:
            logger.error("Failed to fetch profile: %s", str(e))
            return None

    def save_profile(self, user_id: str, profile: Profile) -> bool:
        """Save the user's profile, replacing the stored document.

        Args:
            user_id: The user's ID
            profile: Profile to save

        Returns:
            True if successful
        """
        logger.info("Saving profile for user: %s", user_id[:8])
        try:
            data = profile.model_dump()
            data["updated_at"] = datetime.utcnow()
            self._profile_ref(user_id).set(data)
            return True
        except Exception as e:
            logger.error("Failed to save profile: %s", str(e))
            return False

    # ==================== Daily Entry Operations ====================

    def get_daily_entries(self, user_id: str) -> dict[str, DailyEntry]:
        """Fetch every daily entry for a user.

        Args:
            user_id: The user's ID

        Returns:
            Mapping of ISO date to DailyEntry (may be empty)
        """
        logger.debug("Fetching daily entries for user: %s", user_id[:8])
        entries: dict[str, DailyEntry] = {}
        try:
            for doc in self._entries_ref(user_id).stream():
                entries[doc.id] = self._entry_from_doc(doc.id, doc.to_dict())
            logger.debug("Found %d daily entries", len(entries))
            return entries
        except Exception as e:
            logger.error("Failed to fetch daily entries: %s", str(e))
            return {}

    def get_daily_entry(self, user_id: str, entry_date: date) -> DailyEntry | None:
        """Fetch one day's entry.

        Args:
            user_id: The user's ID
            entry_date: Date of the entry

        Returns:
            DailyEntry if found, None otherwise
        """
        logger.debug("Fetching entry for %s on %s", user_id[:8], entry_date)
        try:
            doc = self._entry_ref(user_id, entry_date).get()
            if not doc.exists:
                return None
            return self._entry_from_doc(doc.id, doc.to_dict())
        except Exception as e:
            logger.error("Failed to fetch entry: %s", str(e))
            return None

    def upsert_daily_entry(self, user_id: str, entry_date: date, fields: dict) -> bool:
        """Merge fields into a day's entry, creating it if needed.

        Only the provided fields are overwritten.

        Args:
            user_id: The user's ID
            entry_date: Date of the entry
            fields: Partial entry fields

        Returns:
            True if successful
        """
        logger.info("Updating entry for %s on %s: %s", user_id[:8], entry_date, sorted(fields))
        try:
            data = dict(fields)
            data["entry_date"] = entry_date.isoformat()
            self._entry_ref(user_id, entry_date).set(data, merge=True)
            return True
        except Exception as e:
            logger.error("Failed to update entry: %s", str(e))
            return False

    def _load_or_new(self, user_id: str, entry_date: date) -> DailyEntry | None:
        """Load a day's entry for a read-modify-write, or start a new one.

        Returns None when the read fails, so callers never overwrite a
        stored list they could not see.
        """
        try:
            doc = self._entry_ref(user_id, entry_date).get()
            if not doc.exists:
                return DailyEntry(entry_date=entry_date)
            return self._entry_from_doc(doc.id, doc.to_dict())
        except Exception as e:
            logger.error("Failed to load entry for update: %s", str(e))
            return None

    def add_food(self, user_id: str, entry_date: date, food: FoodItem) -> DailyEntry | None:
        """Append a food to a day's entry.

        Args:
            user_id: The user's ID
            entry_date: Date of the entry
            food: The food to add

        Returns:
            Updated DailyEntry if successful, None otherwise
        """
        entry = self._load_or_new(user_id, entry_date)
        if entry is None:
            return None
        entry.foods.append(food)

        foods = [f.model_dump() for f in entry.foods]
        if self.upsert_daily_entry(user_id, entry_date, {"foods": foods}):
            return entry
        return None

    def delete_food(self, user_id: str, entry_date: date, index: int) -> DailyEntry | None:
        """Delete the food at a position in a day's entry.

        Args:
            user_id: The user's ID
            entry_date: Date of the entry
            index: Zero-based position of the food

        Returns:
            Updated DailyEntry if successful, None otherwise
        """
        entry = self.get_daily_entry(user_id, entry_date)
        if entry is None:
            return None

        if not 0 <= index < len(entry.foods):
            logger.warning("Food index out of range: %d", index)
            return None

        entry.foods = [f for i, f in enumerate(entry.foods) if i != index]

        foods = [f.model_dump() for f in entry.foods]
        if self.upsert_daily_entry(user_id, entry_date, {"foods": foods}):
            return entry
        return None

    def set_weight(self, user_id: str, entry_date: date, weight_lbs: float) -> bool:
        """Record the day's body weight."""
        if weight_lbs <= 0:
            logger.warning("Ignoring non-positive weight: %s", weight_lbs)
            return False
        return self.upsert_daily_entry(user_id, entry_date, {"weight_lbs": float(weight_lbs)})

    def set_workout_day(self, user_id: str, entry_date: date, is_workout_day: bool) -> bool:
        """Mark a day as a workout day or a rest day."""
        return self.upsert_daily_entry(user_id, entry_date, {"is_workout_day": is_workout_day})

    def add_workout_set(
        self, user_id: str, entry_date: date, exercise: str, new_set: WorkoutSet
    ) -> DailyEntry | None:
        """Append a set to the day's workout log.

        Returns:
            Updated DailyEntry if successful, None otherwise
        """
        entry = self._load_or_new(user_id, entry_date)
        if entry is None:
            return None
        entry.workout_log = add_workout_set(entry.workout_log, exercise, new_set)

        if self._save_workout_log(user_id, entry):
            return entry
        return None

    def delete_workout_set(
        self, user_id: str, entry_date: date, exercise: str, index: int
    ) -> DailyEntry | None:
        """Remove one set from the day's workout log.

        Returns:
            Updated DailyEntry if successful, None otherwise
        """
        entry = self.get_daily_entry(user_id, entry_date)
        if entry is None:
            return None

        workout_log = remove_workout_set(entry.workout_log, exercise, index)
        if workout_log is None:
            logger.warning("Workout set not found: %s #%d", exercise, index)
            return None
        entry.workout_log = workout_log

        if self._save_workout_log(user_id, entry):
            return entry
        return None

    def _save_workout_log(self, user_id: str, entry: DailyEntry) -> bool:
        workout_log = {
            name: [s.model_dump() for s in sets] for name, sets in entry.workout_log.items()
        }
        return self.upsert_daily_entry(user_id, entry.entry_date, {"workout_log": workout_log})

    def watch_daily_entries(
        self, user_id: str, callback: Callable[[dict[str, DailyEntry]], None]
    ) -> Callable[[], None]:
        """Subscribe to live updates of a user's daily entries.

        The callback receives the full snapshot on every change.

        Args:
            user_id: The user's ID
            callback: Called with a mapping of ISO date to DailyEntry

        Returns:
            Function that cancels the subscription
        """

        def on_snapshot(docs, changes, read_time) -> None:
            snapshot = {doc.id: self._entry_from_doc(doc.id, doc.to_dict()) for doc in docs}
            logger.debug("Entries snapshot for %s: %d days", user_id[:8], len(snapshot))
            callback(snapshot)

        watch = self._entries_ref(user_id).on_snapshot(on_snapshot)
        logger.info("Watching daily entries for user: %s", user_id[:8])
        return watch.unsubscribe

    # ==================== Plan & Photo Operations ====================

    def get_workout_plan(self, user_id: str) -> WorkoutPlan | None:
        """Fetch the user's current workout plan."""
        try:
            doc = self._plan_ref(user_id).get()
            if not doc.exists:
                return None
            return WorkoutPlan(**doc.to_dict())
        except Exception as e:
            logger.error("Failed to fetch workout plan: %s", str(e))
            return None

    def save_workout_plan(self, user_id: str, plan: WorkoutPlan) -> bool:
        """Replace the user's current workout plan."""
        logger.info("Saving workout plan for user: %s", user_id[:8])
        try:
            self._plan_ref(user_id).set(plan.model_dump(by_alias=True))
            return True
        except Exception as e:
            logger.error("Failed to save workout plan: %s", str(e))
            return False

    def record_progress_photo(
        self, user_id: str, taken_at: datetime, suggestion: GoalSuggestion
    ) -> bool:
        """Record a progress photo analysis and the targets it suggested."""
        logger.info("Recording progress photo for user: %s", user_id[:8])
        try:
            self._user_ref(user_id).collection("progressPhotos").document().set({
                "taken_at": taken_at,
                "suggestion": suggestion.model_dump(),
            })
            return True
        except Exception as e:
            logger.error("Failed to record progress photo: %s", str(e))
            return False
