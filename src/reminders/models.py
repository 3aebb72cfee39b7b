"""Models for reminder preferences and dispatch results."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReminderFrequency(StrEnum):
    """How often a user wants to be reminded to journal."""

    DAILY = "daily"
    WEEKLY = "weekly"
    OFF = "off"


class DispatchOutcome(StrEnum):
    """Result of notifying a single user.

    Failures are raised as DeliveryError rather than returned.
    """

    SENT = "sent"
    SKIPPED = "skipped"  # No device token registered


class ReminderPreference(BaseModel):
    """A user's journal reminder settings as stored in their config document.

    Field aliases match the document keys written by the settings screen.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(..., description="Owning user ID")
    reminder_frequency: str = Field(
        default=ReminderFrequency.OFF,
        alias="reminderFrequency",
        description="One of daily, weekly or off",
    )
    delivery_time: str | None = Field(
        default=None,
        alias="deliveryTime",
        description="Local wall-clock time as H:MM or HH:MM",
    )
    timezone: str | None = Field(default=None, description="IANA timezone name")

    @field_validator("delivery_time", "timezone", mode="before")
    @classmethod
    def drop_non_string(cls, v: Any) -> str | None:
        """Treat wrongly typed values as missing.

        A missing delivery time skips the record and a missing timezone means UTC.

        :param v: Raw value from the document.
        :returns: The value if it is a string, otherwise None.
        """
        return v if isinstance(v, str) else None

    @property
    def is_daily(self) -> bool:
        """Whether this preference asks for daily reminders."""
        return self.reminder_frequency == ReminderFrequency.DAILY


class DeviceToken(BaseModel):
    """A push registration token for a user's device."""

    user_id: str = Field(..., description="Owning user ID")
    token: str = Field(..., min_length=1, description="FCM registration token")


class PushMessage(BaseModel):
    """Content of a push notification."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Notification title")
    body: str = Field(..., description="Notification body")
    link: str = Field(..., description="Deep link opened when the notification is tapped")


class DispatchReport(BaseModel):
    """Result of a single dispatch tick."""

    users_scanned: int = Field(default=0, description="Daily preference records fetched")
    users_matched: int = Field(default=0, description="Users inside their delivery window")
    notifications_sent: int = Field(default=0, description="Notifications handed to FCM")
    notifications_skipped: int = Field(default=0, description="Matched users with no token")
    notifications_failed: int = Field(default=0, description="Lookups or sends that failed")
    notifications_timed_out: int = Field(
        default=0,
        description="Sends still pending at the tick deadline (also counted as failed)",
    )
    errors: list[str] = Field(default_factory=list, description="Per-user error messages")
