"""Custom exceptions for the journal reminder dispatcher."""


class ReminderError(Exception):
    """Base exception for reminder dispatch errors."""


class PreferenceStoreError(ReminderError):
    """Raised when the reminder preferences cannot be queried at all.

    This is fatal for the current tick; the next scheduled tick retries.
    """


class DeliveryError(ReminderError):
    """Raised when a notification cannot be delivered to a single user."""

    def __init__(self, user_id: str, error: str) -> None:
        """Initialise DeliveryError.

        :param user_id: ID of the user whose notification failed.
        :param error: Description of the underlying failure.
        """
        self.user_id = user_id
        self.error = error
        super().__init__(f"Failed to notify user '{user_id}': {error}")


class FirebaseConfigError(ReminderError):
    """Raised when Firebase credentials are present but unusable."""
