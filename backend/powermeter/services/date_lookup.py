"""Calendar-date lookups with a lazily populated year/month hash cache.

The hash lives in the store under key ``YYYY`` and field ``MM``; its value is
a JSON object mapping ``DD`` to the finished day record. A miss scans the
``days`` list once and memoizes the result. Cached days are never expired,
a finished day is assumed immutable.
"""

from __future__ import annotations

import calendar
import json
import logging
from datetime import date, datetime
from typing import Any, Callable

from powermeter.config import settings
from powermeter.errors import (
    InvalidArgumentError,
    NotFoundError,
    OutOfRangeError,
    UpstreamFailureError,
)
from powermeter.services.dates import local_now, month_name, period_date
from powermeter.services.records import Resolution, load_json
from powermeter.services.rollups import RollupAccessor
from powermeter.services.store import OrderedStore
from powermeter.services.units import pulses_list_to_kwh

logger = logging.getLogger(__name__)


def _parse_component(value: int | str, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")


class DateLookupService:
    """Resolves (year, month[, day]) against the day and month rollups."""

    def __init__(
        self,
        store: OrderedStore,
        clock: Callable[[], datetime] = local_now,
        start_year: int | None = None,
    ):
        self._store = store
        self._rollups = RollupAccessor(store)
        self._clock = clock
        self._start_year = start_year if start_year is not None else settings.service_start_year

    # --- validation ---

    def assert_year(self, year: int | str, now: datetime | None = None) -> int:
        now = now or self._clock()
        if isinstance(year, str) and len(year.strip()) != 4:
            raise InvalidArgumentError("Year must be a valid four digit year.")
        value = _parse_component(year, "year")
        if not 1000 <= value <= 9999:
            raise InvalidArgumentError("Year must be a valid four digit year.")
        if not self._start_year <= value <= now.year:
            raise OutOfRangeError(
                f"Year must be a year between {self._start_year} and this year."
            )
        return value

    def assert_month(
        self, year: int | str, month: int | str, now: datetime | None = None
    ) -> int:
        now = now or self._clock()
        value = _parse_component(month, "month")
        if not 1 <= value <= 12:
            raise OutOfRangeError("month must be a valid month between 01 and 12")
        if _parse_component(year, "year") >= now.year and value > now.month:
            raise OutOfRangeError("month is in the future. Please provide a date in the past.")
        return value

    def assert_day(
        self, year: int, month: int, day: int | str, now: datetime | None = None
    ) -> int:
        now = now or self._clock()
        value = _parse_component(day, "day")
        last = calendar.monthrange(year, month)[1]
        if not 1 <= value <= last:
            raise OutOfRangeError(
                f"day must be an integer between 1 and {last} for {year}-{month:02d}"
            )
        if date(year, month, value) > now.date():
            raise OutOfRangeError("day is in the future. Please provide a date in the past.")
        return value

    # --- lookups ---

    async def find_by_date(
        self,
        year: int | str,
        month: int | str,
        day: int | str,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Day record for a calendar date, from the cache or a scan of ``days``."""
        now = now or self._clock()
        year = self.assert_year(year, now)
        month = self.assert_month(year, month, now)
        day = self.assert_day(year, month, day, now)
        year_key, month_key, day_key = f"{year:04d}", f"{month:02d}", f"{day:02d}"

        cached = await self._load_month(year_key, month_key)
        if cached is not None and day_key in cached:
            logger.debug("Date cache hit for %s-%s-%s", year_key, month_key, day_key)
            return cached[day_key]

        target = date(year, month, day)
        record = await self._scan_days(target, now)
        if record is None:
            raise NotFoundError(
                "Could not find data for given date. It might be outside the data "
                "we have stored."
            )

        record.pop("total", None)
        for field in ("perHour", "perMinute"):
            if field in record:
                record[field] = pulses_list_to_kwh(record[field])
        record["description"] = f"kWh usage for {target.strftime('%a %b %d %Y')}"

        await self._save_in_month(year_key, month_key, day_key, record)
        return record

    async def get_month_summary(
        self, year: int | str, month: int | str, now: datetime | None = None
    ) -> dict[str, Any]:
        """Month record for ``(year, month)`` with ``perDay`` in kWh."""
        now = now or self._clock()
        year = self.assert_year(year, now)
        month = self.assert_month(year, month, now)
        tz = now.tzinfo or settings.tzinfo

        for record in await self._rollups.scan(Resolution.MONTHS):
            covered = period_date(record.get("timestamp"), tz)
            if (covered.year, covered.month) == (year, month):
                if "perDay" in record:
                    record["perDay"] = pulses_list_to_kwh(record["perDay"])
                record["description"] = f"kWh usage for {month_name(month)}, {year}."
                return record

        raise NotFoundError(
            "Did not find data for the specified month. "
            "This might be outside the period we have data for"
        )

    async def _scan_days(self, target: date, now: datetime) -> dict[str, Any] | None:
        tz = now.tzinfo or settings.tzinfo
        for record in await self._rollups.scan(Resolution.DAYS):
            if period_date(record.get("timestamp"), tz) == target:
                return record
        return None

    async def _load_month(self, year_key: str, month_key: str) -> dict[str, Any] | None:
        raw = await self._store.hget(year_key, month_key)
        if raw is None:
            return None
        cached = load_json(raw, f"date cache {year_key}/{month_key}")
        if not isinstance(cached, dict):
            raise UpstreamFailureError(f"Date cache {year_key}/{month_key} is not an object")
        return cached

    async def _save_in_month(
        self, year_key: str, month_key: str, day_key: str, record: dict[str, Any]
    ) -> None:
        # Re-read so days cached meanwhile by another request are kept.
        cached = await self._load_month(year_key, month_key) or {}
        cached[day_key] = record
        await self._store.hset(year_key, month_key, json.dumps(cached))
        logger.info("Cached day record %s-%s-%s", year_key, month_key, day_key)
