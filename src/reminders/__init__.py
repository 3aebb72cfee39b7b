"""Daily journal reminder dispatch."""

from src.reminders.dispatch import ReminderDispatchJob
from src.reminders.exceptions import (
    DeliveryError,
    FirebaseConfigError,
    PreferenceStoreError,
    ReminderError,
)
from src.reminders.models import (
    DeviceToken,
    DispatchOutcome,
    DispatchReport,
    PushMessage,
    ReminderFrequency,
    ReminderPreference,
)
from src.reminders.sender import FcmPushSender, NotificationSender, build_journal_reminder
from src.reminders.stores import (
    FirestorePreferenceStore,
    FirestoreTokenStore,
    InMemoryPreferenceStore,
    InMemoryTokenStore,
)
from src.reminders.window import should_send

__all__ = [
    "DeliveryError",
    "DeviceToken",
    "DispatchOutcome",
    "DispatchReport",
    "FcmPushSender",
    "FirebaseConfigError",
    "FirestorePreferenceStore",
    "FirestoreTokenStore",
    "InMemoryPreferenceStore",
    "InMemoryTokenStore",
    "NotificationSender",
    "PreferenceStoreError",
    "PushMessage",
    "ReminderDispatchJob",
    "ReminderError",
    "ReminderFrequency",
    "ReminderPreference",
    "build_journal_reminder",
    "should_send",
]
