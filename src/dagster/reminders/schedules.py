"""Dagster schedules for dispatching daily journal reminders."""

from dagster import DefaultScheduleStatus, ScheduleDefinition
from src.dagster.reminders.jobs import dispatch_journal_reminders_job

# Ticks must line up with the 15 minute delivery window
dispatch_journal_reminders_schedule = ScheduleDefinition(
    job=dispatch_journal_reminders_job,
    cron_schedule="*/15 * * * *",
    execution_timezone="UTC",
    default_status=DefaultScheduleStatus.RUNNING,
)
