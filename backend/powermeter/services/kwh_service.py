"""kWh queries: the ``(type, count)`` router over the rollup lists."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from powermeter.errors import InvalidArgumentError, QueryNotImplementedError
from powermeter.services.dates import (
    DateLevel,
    local_now,
    month_name,
    normalize_date,
    period_date,
    to_millis,
)
from powermeter.services.records import Resolution, numeric_field
from powermeter.services.rollups import RollupAccessor
from powermeter.services.store import OrderedStore
from powermeter.services.summary import summarize, summarize_seconds
from powermeter.services.units import pulses_list_to_kwh, round4

logger = logging.getLogger(__name__)

KWH_TYPES = ("seconds", "today", "hour", "day", "week", "month", "year")

# query type -> (rollup list, description unit, breakdown converted to kWh,
#                description names the requested rather than the found count)
_RANGE_QUERIES: dict[str, tuple[Resolution, str, str | None, bool]] = {
    "hour": (Resolution.HOURS, "hour", None, True),
    "day": (Resolution.DAYS, "day", "perHour", False),
    "week": (Resolution.WEEKS, "week", "perDay", False),
    "month": (Resolution.MONTHS, "month", "perDay", True),
}


class KwhService:
    """Answers kWh questions from the pre-aggregated rollup lists."""

    def __init__(self, store: OrderedStore, clock: Callable[[], datetime] = local_now):
        self._rollups = RollupAccessor(store)
        self._clock = clock

    async def handle_kwh(
        self, type: str, count: int | str = 1, now: datetime | None = None
    ) -> dict[str, Any]:
        """Dispatch a kWh query.

        ``type`` is one of seconds, today, hour, day, week, month or year.
        ``count`` is the number of most recent buckets, or ``"this"`` for the
        running month.
        """
        if type not in KWH_TYPES:
            raise InvalidArgumentError(
                "type must be a string with one of the keywords: " + ",".join(KWH_TYPES)
            )
        _check_count(type, count)
        now = now or self._clock()
        logger.debug("kwh query type=%s count=%s", type, count)

        if type == "seconds":
            return await self.get_kwh_seconds(count, now)
        if type == "today":
            return await self.get_kwh_today(now)
        if type == "year":
            raise QueryNotImplementedError("kWh per year is not implemented yet")
        if type == "month" and count == "this":
            return await self.get_current_month(now)
        return await self._get_range(type, count)

    async def get_kwh_seconds(self, count: int, now: datetime) -> dict[str, Any]:
        values = await self._rollups.seconds_range_from_end(count)
        summary = summarize_seconds(values)
        for item in values:
            item["watt"] = int(numeric_field(item, "watt"))

        return {
            "description": f"kWh and Watt consumption per second for {count} seconds",
            "count": count,
            "time": now.isoformat(),
            "timestamp": to_millis(now),
            "summary": summary,
            "list": values,
        }

    async def get_kwh_today(self, now: datetime) -> dict[str, Any]:
        """kWh used from server-local midnight up to ``now``."""
        midnight = normalize_date(now, DateLevel.DAY)
        minutes = round((now.timestamp() - midnight.timestamp()) / 60)

        kwh = 0.0
        if minutes > 0:
            values = await self._rollups.range_from_end(Resolution.MINUTES, minutes)
            kwh = sum(numeric_field(item, "kwh") for item in values)

        return {
            "description": "kWh used today from midnight to now.",
            "date": now.isoformat(),
            "kwh": round4(kwh),
        }

    async def get_current_month(self, now: datetime) -> dict[str, Any]:
        """Completed days of the running month plus today so far."""
        today = now.date()
        values = await self._rollups.range_from_end(Resolution.DAYS, today.day)

        completed = 0.0
        for item in values:
            day = period_date(item.get("timestamp"), now.tzinfo)
            if (day.year, day.month) == (today.year, today.month) and day < today:
                completed += numeric_field(item, "kwh")

        so_far = await self.get_kwh_today(now)
        return {
            "description": (
                f"kWh used so far this month, {month_name(today.month)} {today.year}"
            ),
            "date": now.isoformat(),
            "kwh": round4(completed + so_far["kwh"]),
        }

    async def _get_range(self, type: str, count: int) -> dict[str, Any]:
        resolution, unit, breakdown, names_requested = _RANGE_QUERIES[type]
        values = await self._rollups.range_from_end(resolution, count)
        if breakdown:
            for item in values:
                if breakdown in item:
                    item[breakdown] = pulses_list_to_kwh(item[breakdown])

        summary = summarize(values)
        found = len(summary["list"])
        shown = count if names_requested else found
        description = f"kWh consumption per {unit} for {shown} {unit}s."
        if found != count:
            description += (
                f" {count} {unit}s was asked for, but only {found} {unit}s was found."
            )
            summary["requested"] = count
        summary["description"] = description
        summary["count"] = found
        return summary


def _check_count(type: str, count: object) -> None:
    if count == "this":
        if type != "month":
            raise InvalidArgumentError(f'The keyword "this" is only valid for month, not {type}')
        return
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidArgumentError(f"count must be an integer or a keyword, got {count!r}")
    if count < 1:
        raise InvalidArgumentError(f"count must be a positive integer, got {count}")
