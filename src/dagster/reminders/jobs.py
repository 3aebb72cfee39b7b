"""Dagster jobs for dispatching daily journal reminders."""

from dagster import job
from src.dagster.reminders.ops import dispatch_journal_reminders_op


@job(
    name="dispatch_journal_reminders_job",
    description="Send daily journal reminders (runs every 15 minutes).",
)
def dispatch_journal_reminders_job() -> None:
    """Dispatch journal reminders job."""
    dispatch_journal_reminders_op()
