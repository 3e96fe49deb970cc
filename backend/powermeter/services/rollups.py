"""Resolution-aware suffix reads over the rollup lists."""

from __future__ import annotations

import logging
import math
from typing import Any

from powermeter.errors import InvalidArgumentError
from powermeter.services.records import Resolution, decode_record
from powermeter.services.store import OrderedStore

logger = logging.getLogger(__name__)

# The seconds list holds one record per 10 seconds of samples.
SECONDS_PER_STORED_UNIT = 10


class RollupAccessor:
    """Reads the seconds/minutes/hours/days/weeks/months lists.

    Lists are append-only and chronological, the tail being the newest
    record. Only suffix reads are offered for queries; ``scan`` reads the
    whole list for date lookups.
    """

    def __init__(self, store: OrderedStore):
        self._store = store

    async def range_from_end(
        self, resolution: Resolution | str, count: int
    ) -> list[dict[str, Any]]:
        """Last ``count`` records, oldest first.

        A list shorter than ``count`` returns everything it holds; callers
        report the shortfall.
        """
        resolution = _resolution(resolution)
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidArgumentError(f"count must be a positive integer, got {count!r}")

        raw = await self._store.range_from_end(resolution.value, count)
        if len(raw) < count:
            logger.debug(
                "Short read on %s: asked for %d, found %d", resolution.value, count, len(raw)
            )
        return [decode_record(item, resolution) for item in raw]

    async def seconds_range_from_end(self, count: int) -> list[dict[str, Any]]:
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidArgumentError(f"count must be a positive integer, got {count!r}")
        return await self.range_from_end(
            Resolution.SECONDS, math.ceil(count / SECONDS_PER_STORED_UNIT)
        )

    async def scan(self, resolution: Resolution | str) -> list[dict[str, Any]]:
        resolution = _resolution(resolution)
        raw = await self._store.range_all(resolution.value)
        return [decode_record(item, resolution) for item in raw]


def _resolution(value: Resolution | str) -> Resolution:
    try:
        return Resolution(value)
    except ValueError:
        raise InvalidArgumentError(
            f"Unknown resolution {value!r}; expected one of "
            f"{', '.join(r.value for r in Resolution)}"
        ) from None
