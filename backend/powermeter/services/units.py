"""Pulse/kWh/watt conversions. 10 000 sensor pulses make one kWh."""

from __future__ import annotations

from typing import Iterable

from powermeter.errors import InvalidArgumentError

PULSES_PER_KWH = 10_000
JOULES_PER_KWH = 3_600_000


def round4(value: float) -> float:
    return round(value, 4)


def pulses_to_kwh(raw: float) -> float:
    return round4(raw / PULSES_PER_KWH)


def pulses_list_to_kwh(values: Iterable[float]) -> list[float]:
    return [pulses_to_kwh(v) for v in values]


def kwh_to_watt(kwh: float, interval_seconds: float) -> int:
    """Average power in watts for ``kwh`` consumed over ``interval_seconds``."""
    if interval_seconds <= 0:
        raise InvalidArgumentError(
            f"Interval must be a positive number of seconds, got {interval_seconds}"
        )
    return int(kwh * JOULES_PER_KWH / interval_seconds)
