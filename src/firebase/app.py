"""Firebase Admin app initialisation."""

import json
import logging
from pathlib import Path
from typing import Any

import firebase_admin
from firebase_admin import credentials

from src.firebase.config import FirebaseConfig, get_firebase_settings
from src.reminders.exceptions import FirebaseConfigError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


def build_credential(config: FirebaseConfig) -> credentials.Base:
    """Build a Firebase credential from configuration.

    Precedence: inline JSON, credentials file, service account fields,
    then application default credentials.

    :param config: Firebase configuration.
    :returns: Credential usable by firebase_admin.initialize_app.
    :raises FirebaseConfigError: If the configured credentials cannot be loaded.
    """
    raw = (config.credentials_json or "").strip()

    try:
        if raw.startswith("{"):
            logger.debug("Using inline JSON Firebase credentials")
            return credentials.Certificate(json.loads(raw))

        if raw:
            if not Path(raw).exists():
                raise FirebaseConfigError(f"Firebase credentials file not found: {raw}")
            logger.debug(f"Using Firebase credentials file: {raw}")
            return credentials.Certificate(raw)

        if config.has_service_account:
            logger.debug("Using Firebase service account from environment")
            service_account: dict[str, Any] = {
                "type": "service_account",
                "project_id": config.project_id,
                "client_email": config.client_email,
                "private_key": config.private_key,
                "token_uri": GOOGLE_TOKEN_URI,
            }
            return credentials.Certificate(service_account)
    except (ValueError, OSError) as e:
        raise FirebaseConfigError(f"Invalid Firebase credentials: {e}") from e

    logger.debug("Using application default credentials for Firebase")
    return credentials.ApplicationDefault()


def get_firebase_app(config: FirebaseConfig | None = None) -> firebase_admin.App:
    """Return the default Firebase app, initialising it on first use.

    :param config: Firebase configuration. Defaults to environment settings.
    :returns: The initialised Firebase app.
    :raises FirebaseConfigError: If the configured credentials cannot be loaded.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    config = config or get_firebase_settings()
    options = {"projectId": config.project_id} if config.project_id else None
    app = firebase_admin.initialize_app(build_credential(config), options=options)
    logger.info(f"Firebase app initialised: project_id={config.project_id}")
    return app
