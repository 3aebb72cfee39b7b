"""Push notification delivery for journal reminders."""

import logging
from typing import Any, Protocol

from firebase_admin import messaging

from src.reminders.exceptions import DeliveryError
from src.reminders.models import DispatchOutcome, PushMessage
from src.reminders.stores import TokenStore

logger = logging.getLogger(__name__)

JOURNAL_REMINDER_TITLE = "Time to Journal! 📖"
JOURNAL_REMINDER_BODY = "Take a moment to document your thoughts for today."


def build_journal_reminder(link: str) -> PushMessage:
    """Build the fixed journal reminder notification.

    :param link: Deep link to the journal view.
    :returns: The reminder message.
    """
    return PushMessage(title=JOURNAL_REMINDER_TITLE, body=JOURNAL_REMINDER_BODY, link=link)


class PushSender(Protocol):
    """Delivers a push message to a single device."""

    def send(self, token: str, message: PushMessage) -> str:
        """Send a message and return the provider's message ID."""
        ...


class FcmPushSender:
    """Sends push messages through Firebase Cloud Messaging."""

    def __init__(self, app: Any = None, *, dry_run: bool = False) -> None:
        """Initialise the sender.

        :param app: Firebase app to send with. Defaults to the default app.
        :param dry_run: Ask FCM to validate the message without delivering it.
        """
        self._app = app
        self._dry_run = dry_run

    @staticmethod
    def build_message(token: str, message: PushMessage) -> messaging.Message:
        """Build an FCM message for a web push subscriber.

        FCM only accepts absolute HTTPS links in webpush options, so other
        links are passed through the data payload for the service worker.

        :param token: FCM registration token.
        :param message: Notification content.
        :returns: The FCM message.
        """
        webpush = None
        if message.link.startswith("https://"):
            webpush = messaging.WebpushConfig(
                fcm_options=messaging.WebpushFCMOptions(link=message.link),
            )

        return messaging.Message(
            token=token,
            notification=messaging.Notification(title=message.title, body=message.body),
            data={"link": message.link},
            webpush=webpush,
        )

    def send(self, token: str, message: PushMessage) -> str:
        """Send a message to one device.

        :param token: FCM registration token.
        :param message: Notification content.
        :returns: The FCM message ID.
        :raises firebase_admin.exceptions.FirebaseError: If FCM rejects the message.
        """
        return messaging.send(
            self.build_message(token, message),
            dry_run=self._dry_run,
            app=self._app,
        )


class NotificationSender:
    """Looks up a user's device token and sends them the journal reminder."""

    def __init__(self, tokens: TokenStore, push: PushSender, message: PushMessage) -> None:
        """Initialise the sender.

        :param tokens: Store to look up device tokens in.
        :param push: Push delivery backend.
        :param message: The notification to send to every user.
        """
        self._tokens = tokens
        self._push = push
        self._message = message

    def send(self, user_id: str) -> DispatchOutcome:
        """Notify a single user.

        :param user_id: The user to notify.
        :returns: SENT on delivery, SKIPPED if the user has no device token.
        :raises DeliveryError: If the token lookup or the send fails.
        """
        try:
            device = self._tokens.get_token(user_id)
        except Exception as e:
            raise DeliveryError(user_id, f"token lookup failed: {e}") from e

        if device is None:
            logger.debug(f"No device token for user {user_id}, skipping")
            return DispatchOutcome.SKIPPED

        try:
            message_id = self._push.send(device.token, self._message)
        except Exception as e:
            raise DeliveryError(user_id, f"push send failed: {e}") from e

        logger.info(f"Sent journal reminder to user {user_id}: message_id={message_id}")
        return DispatchOutcome.SENT
