"""Instantaneous power from the seconds and minutes rollups."""

from __future__ import annotations

import logging
from typing import Any

from powermeter.config import settings
from powermeter.errors import EmptyAggregateError, InvalidArgumentError
from powermeter.services.dates import parse_timestamp
from powermeter.services.records import Resolution, numeric_field
from powermeter.services.rollups import RollupAccessor
from powermeter.services.store import OrderedStore

logger = logging.getLogger(__name__)

MINUTES_PER_HOUR = 60


class WattsService:
    def __init__(self, store: OrderedStore):
        self._rollups = RollupAccessor(store)

    async def get_watts(self, interval: int = 10) -> dict[str, Any]:
        """Average, max and min watts over the last ``interval`` seconds."""
        if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
            raise InvalidArgumentError(
                "interval must be an Integer representing seconds, "
                f"got {interval!r}"
            )
        values = await self._rollups.seconds_range_from_end(interval)
        if not values:
            logger.debug("Watts over %ss requested before any second records", interval)
            raise EmptyAggregateError("No second records stored yet")

        watts = [numeric_field(item, "watt") for item in values]
        return {
            "description": "Current Usage in Watts, averaged over interval seconds",
            "watt": int(sum(watts) / len(watts)),
            "max": int(max(watts)),
            "min": int(min(watts)),
            "time": _time_of(values[0]),
            "interval": interval,
        }

    async def get_watts_last_hour_series(self) -> dict[str, Any]:
        """Average watts per minute over the last hour."""
        values = await self._rollups.range_from_end(Resolution.MINUTES, MINUTES_PER_HOUR)
        items = [
            {
                "time": _time_of(item),
                "watt": int(numeric_field(item, "watt")),
                "perSecond": item.get("perSecond", []),
            }
            for item in values
        ]
        return {
            "description": "Average watts per minute over an hour.",
            "container": "Array",
            "items": items,
        }


def _time_of(record: dict[str, Any]) -> str | None:
    if record.get("time"):
        return record["time"]
    if record.get("timestamp") is None:
        return None
    return parse_timestamp(record["timestamp"], settings.tzinfo).isoformat()
