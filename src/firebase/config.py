"""Configuration for Firebase Admin credentials using pydantic-settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE


class FirebaseConfig(BaseSettings):
    """Credentials for the Firebase Admin SDK.

    All settings are loaded from environment variables with the FIREBASE_ prefix.
    Either a service account (client_email + private_key), a credentials file or
    inline JSON may be given. With none of them the SDK falls back to
    application default credentials.

    :param project_id: Firebase / GCP project ID.
    :param client_email: Service account email.
    :param private_key: Service account private key (PEM).
    :param credentials_json: Path to a service account file, or inline JSON.
    """

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_id: str | None = Field(default=None, description="Firebase project ID")
    client_email: str | None = Field(default=None, description="Service account email")
    private_key: str | None = Field(default=None, description="Service account private key")
    credentials_json: str | None = Field(
        default=None,
        description="Service account file path or inline JSON",
    )

    @field_validator("private_key")
    @classmethod
    def restore_newlines(cls, v: str | None) -> str | None:
        """Turn escaped newlines from single-line env values back into real ones.

        :param v: Raw private key from the environment.
        :returns: PEM text with real newlines.
        """
        if v is None:
            return None
        return v.replace("\\n", "\n")

    @property
    def has_service_account(self) -> bool:
        """Whether enough fields are set to build a service account certificate."""
        return bool(self.project_id and self.client_email and self.private_key)


@lru_cache
def get_firebase_settings() -> FirebaseConfig:
    """Get cached Firebase settings.

    :returns: Configured FirebaseConfig instance.
    """
    return FirebaseConfig()
