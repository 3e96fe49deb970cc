"""Calendar helpers: flooring to hour/day/week and stored timestamp parsing."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum

from powermeter.config import settings
from powermeter.errors import InvalidArgumentError, UpstreamFailureError


class DateLevel(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"


def normalize_date(value: datetime, level: DateLevel | str) -> datetime:
    """Floor ``value`` to the start of its hour, day or week.

    Weeks start on Sunday. Flooring to the week subtracts whole days, so a
    Tuesday the 2nd floors into the previous month.
    """
    try:
        level = DateLevel(level)
    except ValueError:
        raise InvalidArgumentError(
            f"normalize_date: level must be one of "
            f"{', '.join(lvl.value for lvl in DateLevel)}, got {level!r}"
        ) from None

    floored = value.replace(minute=0, second=0, microsecond=0)
    if level is DateLevel.HOUR:
        return floored

    floored = floored.replace(hour=0)
    if level is DateLevel.DAY:
        return floored

    # Python counts Monday as 0; step back to the preceding Sunday.
    return floored - timedelta(days=(floored.weekday() + 1) % 7)


def parse_timestamp(value: object, tz: tzinfo) -> datetime:
    """Stored record timestamp -> aware datetime in ``tz``.

    Records carry either epoch milliseconds or an ISO-8601 string.
    """
    if isinstance(value, bool):
        raise UpstreamFailureError(f"Malformed record timestamp: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        try:
            value = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                raise UpstreamFailureError(f"Malformed record timestamp: {value!r}") from None
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=tz)
            return parsed.astimezone(tz)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz)
    raise UpstreamFailureError(f"Malformed record timestamp: {value!r}")


def period_date(timestamp: object, tz: tzinfo) -> date:
    """Calendar date a day/month record describes.

    Ingestion stamps these records one calendar day after the period they
    cover, so the stored timestamp is shifted back one day.
    """
    return (parse_timestamp(timestamp, tz) - timedelta(days=1)).date()


def to_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def month_name(month: int) -> str:
    return calendar.month_name[month]


def local_now() -> datetime:
    """Current time in the configured server zone. Default service clock."""
    return datetime.now(settings.tzinfo)
