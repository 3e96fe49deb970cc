"""Total/average/max/min over bucket sequences."""

from __future__ import annotations

from typing import Any, Sequence

from powermeter.errors import EmptyAggregateError
from powermeter.services.records import numeric_field
from powermeter.services.rollups import SECONDS_PER_STORED_UNIT
from powermeter.services.units import round4


def summarize(records: Sequence[dict[str, Any]]) -> dict[str, Any]:
    if not records:
        raise EmptyAggregateError("Cannot summarize an empty list of records")

    values = [numeric_field(record, "kwh") for record in records]
    total = round4(sum(values))
    return {
        "total": total,
        "average": round4(total / len(values)),
        "max": max(values),
        "min": min(values),
        "list": list(records),
    }


def summarize_seconds(records: Sequence[dict[str, Any]]) -> dict[str, dict[str, float | int]]:
    """kWh and watt aggregates over 10-second records.

    kWh figures other than the total are per second, hence the division by
    the stored unit. Watt figures are truncated to integers.
    """
    if not records:
        raise EmptyAggregateError("Cannot summarize an empty list of second records")

    kwh = [numeric_field(record, "kwh") for record in records]
    watts = [numeric_field(record, "watt") for record in records]
    total = round4(sum(kwh))
    return {
        "kwh": {
            "total": total,
            "average": round4(total / len(kwh) / SECONDS_PER_STORED_UNIT),
            "max": round4(max(kwh) / SECONDS_PER_STORED_UNIT),
            "min": round4(min(kwh) / SECONDS_PER_STORED_UNIT),
        },
        "watts": {
            "average": int(sum(watts) / len(watts)),
            "max": int(max(watts)),
            "min": int(min(watts)),
        },
    }
