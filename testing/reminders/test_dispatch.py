"""Tests for the reminder dispatch job."""

import threading
import unittest
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

from src.reminders.dispatch import ReminderDispatchJob
from src.reminders.exceptions import PreferenceStoreError
from src.reminders.models import DeviceToken, DispatchOutcome
from src.reminders.sender import NotificationSender, build_journal_reminder
from src.reminders.stores import InMemoryPreferenceStore, InMemoryTokenStore

TICK = datetime(2025, 1, 15, 20, 5, tzinfo=UTC)


def _daily(delivery_time: str | None = "20:00", timezone: str | None = None) -> dict:
    document: dict = {"reminderFrequency": "daily"}
    if delivery_time is not None:
        document["deliveryTime"] = delivery_time
    if timezone is not None:
        document["timezone"] = timezone
    return document


class TestReminderDispatchJob(unittest.TestCase):
    """Tests for ReminderDispatchJob.run_tick."""

    def setUp(self) -> None:
        """Set up a push sender that records the tokens it is called with."""
        self.push = MagicMock()
        self.push.send.return_value = "projects/test/messages/1"

    def _job(
        self,
        documents: dict[str, dict],
        tokens: dict[str, str] | None = None,
        token_store: object | None = None,
        **kwargs: object,
    ) -> ReminderDispatchJob:
        sender = NotificationSender(
            tokens=token_store or InMemoryTokenStore(tokens or {}),
            push=self.push,
            message=build_journal_reminder("/journal"),
        )
        return ReminderDispatchJob(InMemoryPreferenceStore(documents), sender, **kwargs)

    def test_end_to_end_matches_only_user_in_window(self) -> None:
        """Test the Denver/UTC example: only the Denver user is due.

        16:05 UTC in January is 09:05 in Denver (MST), five minutes into the
        window, while the UTC user is at 16:05, far past 09:00.
        """
        job = self._job(
            {
                "a": _daily("09:00", "America/Denver"),
                "b": _daily("09:00", "UTC"),
            },
            tokens={"a": "token-a", "b": "token-b"},
        )

        report = job.run_tick(datetime(2025, 1, 15, 16, 5, tzinfo=UTC))

        self.assertEqual(report.users_scanned, 2)
        self.assertEqual(report.users_matched, 1)
        self.assertEqual(report.notifications_sent, 1)
        self.push.send.assert_called_once()
        self.assertEqual(self.push.send.call_args.args[0], "token-a")

    def test_daylight_saving_shifts_utc_tick(self) -> None:
        """Test that the Denver user matches an hour earlier in UTC during DST."""
        job = self._job({"a": _daily("09:00", "America/Denver")}, tokens={"a": "token-a"})

        summer = job.run_tick(datetime(2025, 7, 15, 15, 5, tzinfo=UTC))
        self.assertEqual(summer.notifications_sent, 1)

        late = job.run_tick(datetime(2025, 7, 15, 16, 5, tzinfo=UTC))
        self.assertEqual(late.users_matched, 0)

    def test_sends_fixed_journal_message(self) -> None:
        """Test that the journal reminder content is sent."""
        job = self._job({"a": _daily()}, tokens={"a": "token-a"})

        job.run_tick(TICK)

        message = self.push.send.call_args.args[1]
        self.assertEqual(message.title, "Time to Journal! 📖")
        self.assertEqual(message.body, "Take a moment to document your thoughts for today.")
        self.assertEqual(message.link, "/journal")

    def test_missing_delivery_time_is_scanned_but_not_matched(self) -> None:
        """Test that a daily record without a time is skipped without error."""
        job = self._job({"a": _daily(delivery_time=None)}, tokens={"a": "token-a"})

        report = job.run_tick(TICK)

        self.assertEqual(report.users_scanned, 1)
        self.assertEqual(report.users_matched, 0)
        self.assertEqual(report.errors, [])
        self.push.send.assert_not_called()

    def test_non_daily_preferences_are_not_scanned(self) -> None:
        """Test that weekly and off preferences are never notified."""
        job = self._job(
            {
                "weekly": {"reminderFrequency": "weekly", "deliveryTime": "20:00"},
                "off": {"reminderFrequency": "off", "deliveryTime": "20:00"},
            },
            tokens={"weekly": "token-w", "off": "token-o"},
        )

        report = job.run_tick(TICK)

        self.assertEqual(report.users_scanned, 0)
        self.push.send.assert_not_called()

    def test_malformed_delivery_time_is_skipped(self) -> None:
        """Test that bad time strings do not abort the tick."""
        job = self._job(
            {"bad": _daily("25:99"), "good": _daily("20:00")},
            tokens={"bad": "token-bad", "good": "token-good"},
        )

        report = job.run_tick(TICK)

        self.assertEqual(report.users_matched, 1)
        self.assertEqual(report.notifications_sent, 1)

    @patch("src.reminders.window.ZoneInfo")
    def test_region_name_timezone_does_not_abort_tick(self, mock_zoneinfo: MagicMock) -> None:
        """Test that a timezone naming a tzdata directory falls back to UTC for that user."""

        def load(name: str) -> ZoneInfo:
            if name == "America":
                raise IsADirectoryError(21, "Is a directory", "tzdata/zoneinfo/America")
            return ZoneInfo(name)

        mock_zoneinfo.side_effect = load
        job = self._job(
            {"a": _daily(timezone="America"), "b": _daily()},
            tokens={"a": "token-a", "b": "token-b"},
        )

        report = job.run_tick(TICK)

        self.assertEqual(report.users_matched, 2)
        self.assertEqual(report.notifications_sent, 2)
        self.assertEqual(report.notifications_failed, 0)

    def test_non_string_timezone_is_scanned_and_matched_as_utc(self) -> None:
        """Test that a numeric timezone field neither drops the record nor the count."""
        document = {"reminderFrequency": "daily", "deliveryTime": "20:00", "timezone": 0}
        job = self._job({"a": document}, tokens={"a": "token-a"})

        report = job.run_tick(TICK)

        self.assertEqual(report.users_scanned, 1)
        self.assertEqual(report.users_matched, 1)
        self.assertEqual(report.notifications_sent, 1)

    def test_partial_failure_is_isolated(self) -> None:
        """Test that one failing token lookup does not stop the others."""
        token_store = MagicMock()

        def get_token(user_id: str) -> DeviceToken:
            if user_id == "u2":
                raise RuntimeError("firestore unavailable")
            return DeviceToken(user_id=user_id, token=f"token-{user_id}")

        token_store.get_token.side_effect = get_token
        job = self._job(
            {"u1": _daily(), "u2": _daily(), "u3": _daily()},
            token_store=token_store,
        )

        report = job.run_tick(TICK)

        self.assertEqual(report.users_matched, 3)
        self.assertEqual(report.notifications_sent, 2)
        self.assertEqual(report.notifications_failed, 1)
        self.assertEqual(len(report.errors), 1)
        self.assertIn("u2", report.errors[0])
        sent_tokens = sorted(call.args[0] for call in self.push.send.call_args_list)
        self.assertEqual(sent_tokens, ["token-u1", "token-u3"])

    def test_push_failure_is_counted(self) -> None:
        """Test that a rejected push is counted as failed."""
        self.push.send.side_effect = [ValueError("invalid registration token")]
        job = self._job({"a": _daily()}, tokens={"a": "token-a"}, max_workers=1)

        report = job.run_tick(TICK)

        self.assertEqual(report.notifications_sent, 0)
        self.assertEqual(report.notifications_failed, 1)
        self.assertIn("invalid registration token", report.errors[0])

    def test_user_without_token_is_skipped(self) -> None:
        """Test that a matched user with no token is skipped, not failed."""
        job = self._job({"a": _daily(), "b": _daily()}, tokens={"a": "token-a"})

        report = job.run_tick(TICK)

        self.assertEqual(report.users_matched, 2)
        self.assertEqual(report.notifications_sent, 1)
        self.assertEqual(report.notifications_skipped, 1)
        self.assertEqual(report.notifications_failed, 0)

    def test_no_matches_sends_nothing(self) -> None:
        """Test a tick where nobody is due."""
        job = self._job({"a": _daily("08:00")}, tokens={"a": "token-a"})

        report = job.run_tick(TICK)

        self.assertEqual(report.users_matched, 0)
        self.assertEqual(report.notifications_sent, 0)
        self.push.send.assert_not_called()

    def test_repeated_tick_in_window_sends_again(self) -> None:
        """Test that no state is kept between ticks."""
        job = self._job({"a": _daily()}, tokens={"a": "token-a"})

        job.run_tick(TICK)
        job.run_tick(TICK)

        self.assertEqual(self.push.send.call_count, 2)

    def test_store_failure_aborts_tick(self) -> None:
        """Test that a preference store failure propagates."""
        store = MagicMock()
        store.get_daily_preferences.side_effect = PreferenceStoreError("query failed")
        sender = MagicMock()
        job = ReminderDispatchJob(store, sender)

        with self.assertRaises(PreferenceStoreError):
            job.run_tick(TICK)

        sender.send.assert_not_called()

    def test_unexpected_sender_error_is_counted(self) -> None:
        """Test that errors outside DeliveryError are still isolated."""
        sender = MagicMock()
        sender.send.side_effect = lambda user_id: (
            DispatchOutcome.SENT if user_id == "a" else _raise(KeyError(user_id))
        )
        job = ReminderDispatchJob(InMemoryPreferenceStore({"a": _daily(), "b": _daily()}), sender)

        report = job.run_tick(TICK)

        self.assertEqual(report.notifications_sent, 1)
        self.assertEqual(report.notifications_failed, 1)

    def test_slow_send_times_out_with_partial_results(self) -> None:
        """Test that a hung send does not block the tick past its timeout."""
        release = threading.Event()
        sender = MagicMock()

        def send(user_id: str) -> DispatchOutcome:
            if user_id == "slow":
                release.wait(5)
            return DispatchOutcome.SENT

        sender.send.side_effect = send
        job = ReminderDispatchJob(
            InMemoryPreferenceStore({"fast": _daily(), "slow": _daily()}),
            sender,
            max_workers=2,
            timeout_seconds=0.2,
        )

        try:
            report = job.run_tick(TICK)
        finally:
            release.set()

        self.assertEqual(report.notifications_sent, 1)
        self.assertEqual(report.notifications_failed, 1)
        self.assertEqual(report.notifications_timed_out, 1)
        self.assertIn("slow", report.errors[0])


def _raise(exc: Exception) -> DispatchOutcome:
    raise exc


if __name__ == "__main__":
    unittest.main()
