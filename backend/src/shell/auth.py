"""Authentication - Anonymous accounts backed by API keys.

Handles API key creation, hashing, and validation. Never stores plaintext keys.
"""

import hashlib
import logging
import secrets
from datetime import datetime

from google.cloud import firestore

from ..core.models import User
from .firestore_client import DEFAULT_APP_ID


logger = logging.getLogger(__name__)

API_KEY_PREFIX = "mxc_"
KEY_RANDOM_BYTES = 32
MIN_KEY_LENGTH = 40
USER_ID_LENGTH = 32


def generate_api_key() -> str:
    """New bearer key for an anonymous account: `mxc_` plus URL-safe random text."""
    return API_KEY_PREFIX + secrets.token_urlsafe(KEY_RANDOM_BYTES)


def hash_api_key(api_key: str) -> str:
    """Derive the account's user id (and document id) from its key.

    Only this digest is stored, so a key cannot be recovered from Firestore.
    """
    return hashlib.sha256(api_key.encode()).hexdigest()[:USER_ID_LENGTH]


def validate_api_key_format(api_key: str | None) -> bool:
    """Cheap shape check run before any Firestore lookup."""
    return bool(api_key) and api_key.startswith(API_KEY_PREFIX) and len(api_key) >= MIN_KEY_LENGTH


class AuthClient:
    """Client for anonymous sign-in and API key validation against Firestore."""

    def __init__(self, db: firestore.Client, app_id: str = DEFAULT_APP_ID) -> None:
        """Initialize auth client.

        Args:
            db: Firestore client instance
            app_id: Namespace under the artifacts collection
        """
        self._db = db
        self._app_id = app_id

    def _get_account_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to account document."""
        return (
            self._db.collection("artifacts")
            .document(self._app_id)
            .collection("accounts")
            .document(user_id)
        )

    def sign_in_anonymously(self) -> tuple[str, str]:
        """Create an anonymous account and its API key.

        Returns:
            Tuple of (api_key, user_id) - api_key is only returned once!
        """
        api_key = generate_api_key()
        user_id = hash_api_key(api_key)

        user = User(api_key_hash=user_id, created_at=datetime.utcnow())
        self._get_account_ref(user_id).set(user.model_dump())

        logger.info("Anonymous user created: %s", user_id[:8])
        return api_key, user_id

    def validate_api_key(self, api_key: str) -> str | None:
        """Validate an API key and return the user_id if valid.

        Args:
            api_key: The API key to validate

        Returns:
            user_id if valid, None if invalid
        """
        if not validate_api_key_format(api_key):
            logger.warning("Invalid API key format")
            return None

        user_id = hash_api_key(api_key)

        try:
            account_doc = self._get_account_ref(user_id).get()
            if account_doc.exists:
                logger.debug("API key validated for user: %s", user_id[:8])
                return user_id
            logger.warning("API key not found in database")
            return None
        except Exception as e:
            logger.error("Error validating API key: %s", str(e))
            return None

    def user_exists(self, user_id: str) -> bool:
        """Check if a user exists.

        Args:
            user_id: The user's ID

        Returns:
            True if user exists
        """
        try:
            return self._get_account_ref(user_id).get().exists
        except Exception:
            logger.exception("Error checking user: %s", user_id[:8])
            return False
