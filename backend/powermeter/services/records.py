"""Bucket record decoding with one-shot migration of legacy field names.

Older ingestion versions wrote every sub-period breakdown as ``perMinute``,
whatever the resolution. The current format names it after the sub-period
(``perHour`` on day records, ``perDay`` on week and month records). Records
are tagged with their format when read and legacy ones are renamed once,
here, so callers only ever see the current shape.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

from powermeter.errors import UpstreamFailureError

logger = logging.getLogger(__name__)


class Resolution(str, Enum):
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


class RecordFormat(str, Enum):
    CURRENT = "current"
    LEGACY = "legacy"


SUB_UNIT_FIELDS: dict[Resolution, str] = {
    Resolution.HOURS: "perMinute",
    Resolution.DAYS: "perHour",
    Resolution.WEEKS: "perDay",
    Resolution.MONTHS: "perDay",
}

BREAKDOWN_FIELDS = ("perSecond", "perMinute", "perHour", "perDay")


def _legacy_field(record: dict[str, Any], resolution: Resolution) -> str | None:
    expected = SUB_UNIT_FIELDS.get(resolution)
    if expected is None or expected in record:
        return None
    for name in BREAKDOWN_FIELDS:
        if name != expected and name in record:
            return name
    return None


def record_format(record: dict[str, Any], resolution: Resolution) -> RecordFormat:
    if _legacy_field(record, resolution) is None:
        return RecordFormat.CURRENT
    return RecordFormat.LEGACY


def migrate_record(record: dict[str, Any], resolution: Resolution) -> dict[str, Any]:
    """Rename a legacy breakdown field to the one ``resolution`` expects."""
    legacy = _legacy_field(record, resolution)
    if legacy is None:
        return record
    expected = SUB_UNIT_FIELDS[resolution]
    record[expected] = record.pop(legacy)
    logger.debug("Migrated legacy %s record: %s -> %s", resolution.value, legacy, expected)
    return record


def load_json(raw: str | bytes, what: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise UpstreamFailureError(f"Malformed JSON stored for {what}") from exc


def decode_record(raw: str | bytes, resolution: Resolution) -> dict[str, Any]:
    record = load_json(raw, f"{resolution.value} record")
    if not isinstance(record, dict):
        raise UpstreamFailureError(
            f"Expected an object in the {resolution.value} list, got {type(record).__name__}"
        )
    return migrate_record(record, resolution)


def numeric_field(record: dict[str, Any], name: str) -> float:
    value = record.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UpstreamFailureError(f"Record is missing a numeric {name!r}: {record!r}")
    return value
