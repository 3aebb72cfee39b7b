"""Wiring of the reminder dispatch job to Firestore and FCM."""

from firebase_admin import firestore

from src.firebase.app import get_firebase_app
from src.firebase.config import FirebaseConfig
from src.reminders.config import ReminderConfig, get_reminder_settings
from src.reminders.dispatch import ReminderDispatchJob
from src.reminders.sender import FcmPushSender, NotificationSender, build_journal_reminder
from src.reminders.stores import FirestorePreferenceStore, FirestoreTokenStore


def build_dispatch_job(
    reminder_config: ReminderConfig | None = None,
    firebase_config: FirebaseConfig | None = None,
) -> ReminderDispatchJob:
    """Build a dispatch job backed by Firestore and Firebase Cloud Messaging.

    :param reminder_config: Reminder settings. Defaults to environment settings.
    :param firebase_config: Firebase credentials. Defaults to environment settings.
    :returns: A ready-to-run dispatch job.
    """
    reminder_config = reminder_config or get_reminder_settings()
    app = get_firebase_app(firebase_config)
    client = firestore.client(app)

    sender = NotificationSender(
        tokens=FirestoreTokenStore(client, timeout=reminder_config.read_timeout_seconds),
        push=FcmPushSender(app, dry_run=reminder_config.dry_run),
        message=build_journal_reminder(reminder_config.journal_link),
    )
    return ReminderDispatchJob(
        FirestorePreferenceStore(client, timeout=reminder_config.read_timeout_seconds),
        sender,
        window_minutes=reminder_config.window_minutes,
        max_workers=reminder_config.max_workers,
        timeout_seconds=reminder_config.tick_timeout_seconds,
    )
