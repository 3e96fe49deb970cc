"""Absolute meter register reading and its audit log."""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from typing import Any, Callable

from powermeter.errors import InvalidArgumentError, NotFoundError, UpstreamFailureError
from powermeter.services.dates import local_now, parse_timestamp, to_millis
from powermeter.services.records import load_json
from powermeter.services.store import OrderedStore
from powermeter.services.units import round4

logger = logging.getLogger(__name__)

METER_TOTAL_KEY = "meterTotal"
METER_DELTA_KEY = "meterTotalDelta"  # written by older versions only
METER_UPDATES_LIST = "meterUpdates"


class MeterService:
    """Reads and corrects the cumulative meter total.

    ``put_total`` is a read-modify-write with no locking: two overlapping
    calls can both read the same old value, and the later write wins with
    a stale ``oldValue`` in its audit entry. Corrections are rare and made
    by hand, so this race is accepted rather than guarded.
    """

    def __init__(self, store: OrderedStore, clock: Callable[[], datetime] = local_now):
        self._store = store
        self._clock = clock

    async def get_total(self, now: datetime | None = None) -> dict[str, Any]:
        now = now or self._clock()
        current = await self._read_current(now.tzinfo)
        if current is None:
            raise NotFoundError("No meter total has been registered on the server yet")
        value, stamped = current

        delta = None
        last = await self._store.range_from_end(METER_UPDATES_LIST, 1)
        if last:
            entry = load_json(last[0], METER_UPDATES_LIST)
            delta = entry.get("delta") if isinstance(entry, dict) else None
        else:
            legacy_delta = await self._store.get(METER_DELTA_KEY)
            if legacy_delta is not None:
                delta = _to_float(legacy_delta, METER_DELTA_KEY)

        timestamp = stamped or now
        return {
            "description": "Current Power meter total registered on server",
            "value": round4(value),
            "timestamp": to_millis(timestamp),
            "time": timestamp.isoformat(),
            "delta": delta,
        }

    async def put_total(self, value: Any, now: datetime | None = None) -> dict[str, Any]:
        """Store a new absolute reading and append the change to the audit log."""
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidArgumentError(
                f"Value ({value!r}) passed as argument must be a valid Integer or Float."
            )
        now = now or self._clock()
        new_value = float(value)

        current = await self._read_current(now.tzinfo)
        old_value = current[0] if current is not None else None
        delta = round4(new_value - old_value) if old_value is not None else None

        audit = {
            "timestamp": now.isoformat(),
            "oldValue": old_value,
            "newValue": new_value,
            "delta": delta,
        }
        await self._store.set(
            METER_TOTAL_KEY, json.dumps({"value": new_value, "timestamp": to_millis(now)})
        )
        length = await self._store.rpush(METER_UPDATES_LIST, json.dumps(audit))
        logger.info("Meter total updated: %s -> %s (delta %s)", old_value, new_value, delta)

        return {
            **audit,
            "description": "Updated meterTotal and updated statistics.",
            "meterUpdates": length,
        }

    async def _read_current(self, tz) -> tuple[float, datetime | None] | None:
        """Stored total as ``(value, timestamp)``.

        Current writes store ``{"value", "timestamp"}``; older ones a bare number.
        """
        raw = await self._store.get(METER_TOTAL_KEY)
        if raw is None:
            return None
        stored = load_json(raw, METER_TOTAL_KEY)
        if isinstance(stored, dict):
            stamped = stored.get("timestamp")
            return (
                _to_float(stored.get("value"), METER_TOTAL_KEY),
                parse_timestamp(stamped, tz) if stamped is not None else None,
            )
        return _to_float(stored, METER_TOTAL_KEY), None


def _to_float(value: Any, what: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:
        raise UpstreamFailureError(f"Stored {what} is not a number: {value!r}") from exc
    if not math.isfinite(result):
        raise UpstreamFailureError(f"Stored {what} is not a finite number: {value!r}")
    return result
