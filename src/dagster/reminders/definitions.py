"""Dagster definitions for journal reminder jobs and schedules."""

from dagster import Definitions
from src.dagster.reminders.jobs import dispatch_journal_reminders_job
from src.dagster.reminders.schedules import dispatch_journal_reminders_schedule

defs = Definitions(
    jobs=[dispatch_journal_reminders_job],
    schedules=[dispatch_journal_reminders_schedule],
)
