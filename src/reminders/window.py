"""Delivery window matching for daily journal reminders.

A user is due a reminder when the current local time falls inside the
half-open window ``[delivery_time, delivery_time + window)``. Minutes are
counted from local midnight and never wrap, so a window that would run past
midnight is cut off at 23:59.
"""

import logging
import re
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.reminders.models import ReminderPreference

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"
DEFAULT_WINDOW_MINUTES = 15

_DELIVERY_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_delivery_time(value: str) -> int | None:
    """Parse an ``H:MM`` or ``HH:MM`` string into minutes since midnight.

    :param value: Time of day in 24h format.
    :returns: Minutes since midnight, or None if the string is malformed.
    """
    match = _DELIVERY_TIME_PATTERN.match(value.strip())
    if match is None:
        return None

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def resolve_timezone(name: str | None) -> ZoneInfo:
    """Resolve an IANA timezone name, falling back to UTC.

    :param name: Timezone name, possibly missing or invalid.
    :returns: The matching ZoneInfo, or UTC.
    """
    if not name:
        return ZoneInfo(DEFAULT_TIMEZONE)

    # tzdata raises IsADirectoryError for region names such as "America"
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.debug(f"Unknown timezone {name!r}, falling back to {DEFAULT_TIMEZONE}")
        return ZoneInfo(DEFAULT_TIMEZONE)


def local_minutes(now_utc: datetime, tz: ZoneInfo) -> int:
    """Minutes since local midnight of an instant, truncated to the minute.

    Naive datetimes are treated as UTC.

    :param now_utc: The instant to convert.
    :param tz: Target timezone.
    :returns: ``hour * 60 + minute`` in local time.
    """
    if now_utc.tzinfo is None:
        now_utc = now_utc.replace(tzinfo=UTC)
    local = now_utc.astimezone(tz)
    return local.hour * 60 + local.minute


def should_send(
    preference: ReminderPreference,
    now_utc: datetime,
    window_minutes: int = DEFAULT_WINDOW_MINUTES,
) -> bool:
    """Decide whether a preference is due a reminder at the given instant.

    :param preference: The user's reminder preference.
    :param now_utc: Current instant.
    :param window_minutes: Length of the delivery window.
    :returns: True if the user should be notified on this tick.
    """
    if not preference.is_daily or not preference.delivery_time:
        return False

    pref_minutes = parse_delivery_time(preference.delivery_time)
    if pref_minutes is None:
        logger.debug(
            f"Skipping user {preference.user_id}: "
            f"unparseable delivery time {preference.delivery_time!r}"
        )
        return False

    now_minutes = local_minutes(now_utc, resolve_timezone(preference.timezone))
    diff = now_minutes - pref_minutes
    return 0 <= diff < window_minutes
