"""Preference and device token stores.

In Firestore each user keeps their settings under ``users/{uid}/config``:
``preferences`` holds the reminder settings and ``fcm`` the push token. The
dispatcher reads all preferences at once through a collection group query on
``config`` and recovers the user ID from each document's grandparent.
"""

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore_v1.base_query import FieldFilter
from pydantic import ValidationError

from src.reminders.exceptions import PreferenceStoreError
from src.reminders.models import DeviceToken, ReminderFrequency, ReminderPreference

logger = logging.getLogger(__name__)

CONFIG_COLLECTION = "config"
USERS_COLLECTION = "users"
FCM_DOCUMENT = "fcm"

DEFAULT_READ_TIMEOUT_SECONDS = 30.0


class PreferenceStore(Protocol):
    """Bulk source of reminder preferences."""

    def get_daily_preferences(self) -> list[ReminderPreference]:
        """Fetch every preference with daily reminders enabled in one query.

        :raises PreferenceStoreError: If the store cannot be queried.
        """
        ...


class TokenStore(Protocol):
    """Per-user push token lookup."""

    def get_token(self, user_id: str) -> DeviceToken | None:
        """Fetch a user's device token, or None if they have not registered one."""
        ...


def _build_preference(user_id: str, data: Mapping[str, Any]) -> ReminderPreference:
    """Build a preference from a daily config document.

    Documents that still fail validation are kept without a delivery time, so
    they are counted as scanned and then skipped.
    """
    try:
        return ReminderPreference.model_validate({**data, "user_id": user_id})
    except ValidationError as e:
        logger.debug(f"Malformed preference for user {user_id}: {e}")
        return ReminderPreference(user_id=user_id, reminder_frequency=ReminderFrequency.DAILY)


class FirestorePreferenceStore:
    """Reads reminder preferences from Firestore."""

    def __init__(self, client: Any, *, timeout: float = DEFAULT_READ_TIMEOUT_SECONDS) -> None:
        """Initialise the store.

        :param client: A google.cloud.firestore.Client.
        :param timeout: Seconds allowed for each Firestore read.
        """
        self._client = client
        self._timeout = timeout

    def get_daily_preferences(self) -> list[ReminderPreference]:
        """Fetch all daily preferences across users with a collection group query.

        :returns: Preferences with the owning user ID filled in.
        :raises PreferenceStoreError: If the query fails.
        """
        query = self._client.collection_group(CONFIG_COLLECTION).where(
            filter=FieldFilter("reminderFrequency", "==", ReminderFrequency.DAILY.value)
        )
        try:
            snapshots = list(query.stream(timeout=self._timeout))
        except GoogleAPIError as e:
            raise PreferenceStoreError(f"Failed to query reminder preferences: {e}") from e

        preferences = []
        for snapshot in snapshots:
            user_ref = snapshot.reference.parent.parent
            if user_ref is None:
                logger.debug(f"Skipping top-level config document {snapshot.id}")
                continue

            preferences.append(_build_preference(user_ref.id, snapshot.to_dict() or {}))

        return preferences


class FirestoreTokenStore:
    """Reads FCM registration tokens from Firestore."""

    def __init__(self, client: Any, *, timeout: float = DEFAULT_READ_TIMEOUT_SECONDS) -> None:
        """Initialise the store.

        :param client: A google.cloud.firestore.Client.
        :param timeout: Seconds allowed for each Firestore read.
        """
        self._client = client
        self._timeout = timeout

    def get_token(self, user_id: str) -> DeviceToken | None:
        """Fetch the FCM token stored at ``users/{user_id}/config/fcm``.

        :param user_id: The user to look up.
        :returns: The device token, or None if no token document or field exists.
        """
        path = f"{USERS_COLLECTION}/{user_id}/{CONFIG_COLLECTION}/{FCM_DOCUMENT}"
        snapshot = self._client.document(path).get(timeout=self._timeout)
        data = snapshot.to_dict() if snapshot.exists else None
        if not data or not data.get("token"):
            return None
        return DeviceToken(user_id=user_id, token=data["token"])


class InMemoryPreferenceStore:
    """Dictionary-backed preference store for tests and local runs."""

    def __init__(self, documents: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        """Initialise the store.

        :param documents: Preference documents keyed by user ID.
        """
        self._documents = dict(documents or {})

    def put(self, user_id: str, document: Mapping[str, Any]) -> None:
        """Store or replace a user's preference document."""
        self._documents[user_id] = document

    def get_daily_preferences(self) -> list[ReminderPreference]:
        """Return the preferences of every daily document."""
        return [
            _build_preference(user_id, document)
            for user_id, document in self._documents.items()
            if document.get("reminderFrequency") == ReminderFrequency.DAILY
        ]


class InMemoryTokenStore:
    """Dictionary-backed token store for tests and local runs."""

    def __init__(self, tokens: Mapping[str, str] | None = None) -> None:
        """Initialise the store.

        :param tokens: FCM tokens keyed by user ID.
        """
        self._tokens = dict(tokens or {})

    def get_token(self, user_id: str) -> DeviceToken | None:
        """Return the user's token, if any."""
        token = self._tokens.get(user_id)
        if not token:
            return None
        return DeviceToken(user_id=user_id, token=token)
