"""Dagster Util Sensors."""

import logging

from dagster import (
    DefaultSensorStatus,
    Definitions,
    RunFailureSensorContext,
    run_failure_sensor,
)

logger = logging.getLogger(__name__)


@run_failure_sensor(
    default_status=DefaultSensorStatus.RUNNING,
    minimum_interval_seconds=60,
)
def report_run_failure(context: RunFailureSensorContext) -> None:
    """Log an error once per failed run so it reaches Sentry."""
    run = context.dagster_run
    message = context.failure_event.message if context.failure_event else None

    context.log.info(f"Reporting failed run {run.run_id} of {run.job_name}")
    logger.error(
        f"Dagster failure: job={run.job_name} run_id={run.run_id} reason={message or 'unknown'}"
    )


util_sensor_defs = Definitions(
    sensors=[report_run_failure],
)
