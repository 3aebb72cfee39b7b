"""Configuration for journal reminder dispatch using pydantic-settings."""

from functools import lru_cache
from urllib.parse import urljoin

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE


class ReminderConfig(BaseSettings):
    """Configuration for the reminder dispatch job.

    All settings are loaded from environment variables with the REMINDER_ prefix.

    :param window_minutes: Length of the delivery window after the preferred time.
    :param tick_timeout_seconds: Maximum time a tick waits for sends to settle.
    :param max_workers: Number of sends issued in parallel.
    :param read_timeout_seconds: Timeout for each Firestore read.
    :param journal_path: Route of the journal view opened from the notification.
    :param app_url: Public origin of the web app, e.g. https://app.example.com.
    :param dry_run: Validate messages with FCM without delivering them.
    """

    model_config = SettingsConfigDict(
        env_prefix="REMINDER_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    window_minutes: int = Field(
        default=15,
        ge=1,
        le=60,
        description="Delivery window length in minutes",
    )
    tick_timeout_seconds: float = Field(
        default=300,
        gt=0,
        le=900,
        description="Seconds to wait for all sends before giving up on the tick",
    )
    max_workers: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Concurrent notification sends",
    )
    read_timeout_seconds: float = Field(
        default=30,
        gt=0,
        le=300,
        description="Seconds allowed for each Firestore query or document read",
    )
    journal_path: str = Field(
        default="/journal",
        description="Route of the journal view",
    )
    app_url: str | None = Field(
        default=None,
        description="Public HTTPS origin of the web app, used to build absolute links",
    )
    dry_run: bool = Field(
        default=False,
        description="Send messages to FCM in dry-run mode",
    )

    @property
    def journal_link(self) -> str:
        """Deep link to the journal view, absolute when app_url is set."""
        if not self.app_url:
            return self.journal_path
        return urljoin(self.app_url.rstrip("/") + "/", self.journal_path.lstrip("/"))


@lru_cache
def get_reminder_settings() -> ReminderConfig:
    """Get cached reminder settings.

    :returns: Configured ReminderConfig instance.
    """
    return ReminderConfig()
