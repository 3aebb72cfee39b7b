"""Firebase Admin integration."""

from src.firebase.app import build_credential, get_firebase_app
from src.firebase.config import FirebaseConfig, get_firebase_settings

__all__ = [
    "FirebaseConfig",
    "build_credential",
    "get_firebase_app",
    "get_firebase_settings",
]
