"""Dagster jobs and schedules for daily journal reminders."""

from src.dagster.reminders.definitions import defs
from src.dagster.reminders.jobs import dispatch_journal_reminders_job
from src.dagster.reminders.ops import dispatch_journal_reminders_op
from src.dagster.reminders.schedules import dispatch_journal_reminders_schedule

__all__ = [
    "defs",
    "dispatch_journal_reminders_job",
    "dispatch_journal_reminders_op",
    "dispatch_journal_reminders_schedule",
]
