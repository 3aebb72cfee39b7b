"""Scheduled dispatch of daily journal reminders."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime

from src.reminders.exceptions import DeliveryError, PreferenceStoreError
from src.reminders.models import DispatchOutcome, DispatchReport, ReminderPreference
from src.reminders.sender import NotificationSender
from src.reminders.stores import PreferenceStore
from src.reminders.window import DEFAULT_WINDOW_MINUTES, should_send

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8
DEFAULT_TICK_TIMEOUT_SECONDS = 300.0


class ReminderDispatchJob:
    """Sends the journal reminder to every user whose delivery window is open.

    The job holds no state between ticks. Running it twice inside the same
    window notifies the same users twice.
    """

    def __init__(
        self,
        preferences: PreferenceStore,
        sender: NotificationSender,
        *,
        window_minutes: int = DEFAULT_WINDOW_MINUTES,
        max_workers: int = DEFAULT_MAX_WORKERS,
        timeout_seconds: float = DEFAULT_TICK_TIMEOUT_SECONDS,
    ) -> None:
        """Initialise the job.

        :param preferences: Store holding every user's reminder preference.
        :param sender: Sender used to notify matched users.
        :param window_minutes: Length of the delivery window.
        :param max_workers: Maximum number of concurrent sends.
        :param timeout_seconds: How long a tick waits for sends to settle.
        """
        self._preferences = preferences
        self._sender = sender
        self._window_minutes = window_minutes
        self._max_workers = max_workers
        self._timeout_seconds = timeout_seconds

    def find_matches(
        self,
        preferences: list[ReminderPreference],
        now_utc: datetime,
    ) -> list[ReminderPreference]:
        """Filter preferences down to those inside their delivery window.

        :param preferences: Candidate preferences.
        :param now_utc: Current instant.
        :returns: Preferences due a reminder on this tick.
        """
        return [p for p in preferences if should_send(p, now_utc, self._window_minutes)]

    def run_tick(self, now_utc: datetime) -> DispatchReport:
        """Run one dispatch tick.

        :param now_utc: The instant this tick represents.
        :returns: Counts of scanned, matched, sent and failed users.
        :raises PreferenceStoreError: If the preferences cannot be fetched.
        """
        try:
            preferences = self._preferences.get_daily_preferences()
        except PreferenceStoreError:
            logger.exception("Reminder tick aborted: preference store unavailable")
            raise

        report = DispatchReport(users_scanned=len(preferences))
        matched = self.find_matches(preferences, now_utc)
        report.users_matched = len(matched)
        logger.info(
            f"Reminder tick at {now_utc.isoformat()}: "
            f"{report.users_scanned} daily users scanned, {report.users_matched} in window"
        )

        if matched:
            self._dispatch(matched, report)

        logger.info(
            f"Reminder tick complete: "
            f"sent={report.notifications_sent}, "
            f"skipped={report.notifications_skipped}, "
            f"failed={report.notifications_failed}, "
            f"timed_out={report.notifications_timed_out}"
        )
        return report

    def _dispatch(self, matched: list[ReminderPreference], report: DispatchReport) -> None:
        """Notify matched users in parallel and record each outcome.

        :param matched: Users due a reminder.
        :param report: Report to update in place.
        """
        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(matched)),
            thread_name_prefix="reminder-send",
        )
        futures: dict[Future[DispatchOutcome], str] = {
            executor.submit(self._sender.send, preference.user_id): preference.user_id
            for preference in matched
        }
        done, _ = wait(futures, timeout=self._timeout_seconds)
        # Sends still running are abandoned, not interrupted
        executor.shutdown(wait=False, cancel_futures=True)

        for future, user_id in futures.items():
            if future not in done:
                error_msg = f"Timed out notifying user {user_id}"
                logger.error(error_msg)
                report.notifications_failed += 1
                report.notifications_timed_out += 1
                report.errors.append(error_msg)
                continue

            try:
                outcome = future.result()
            except DeliveryError as e:
                logger.error(str(e))
                report.notifications_failed += 1
                report.errors.append(str(e))
                continue
            except Exception as e:
                error_msg = f"Unexpected error notifying user {user_id}: {e}"
                logger.exception(error_msg)
                report.notifications_failed += 1
                report.errors.append(error_msg)
                continue

            if outcome is DispatchOutcome.SENT:
                report.notifications_sent += 1
            else:
                report.notifications_skipped += 1
