"""Dagster ops for dispatching daily journal reminders."""

from datetime import UTC, datetime

from dagster import OpExecutionContext, op
from src.reminders.exceptions import PreferenceStoreError
from src.reminders.factory import build_dispatch_job
from src.reminders.models import DispatchReport


@op(
    name="dispatch_journal_reminders",
    description="Send the daily journal reminder to users whose delivery window is open.",
)
def dispatch_journal_reminders_op(context: OpExecutionContext) -> DispatchReport:
    """Run one reminder dispatch tick.

    No retry policy: a failed tick is retried by the next scheduled run.

    :param context: Dagster execution context.
    :returns: Report with counts of scanned, matched, sent and failed users.
    """
    now = datetime.now(UTC)
    context.log.info(f"Starting journal reminder dispatch for {now.isoformat()}")

    job = build_dispatch_job()
    try:
        report = job.run_tick(now)
    except PreferenceStoreError as e:
        context.log.error(f"Journal reminder dispatch aborted: {e}")
        raise

    for error in report.errors:
        context.log.warning(error)

    context.log.info(
        f"Journal reminder dispatch complete: "
        f"scanned={report.users_scanned}, "
        f"matched={report.users_matched}, "
        f"sent={report.notifications_sent}, "
        f"skipped={report.notifications_skipped}, "
        f"failed={report.notifications_failed}"
    )
    return report
