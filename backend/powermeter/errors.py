"""Typed failures raised by the rollup engine.

Each error carries the HTTP status the routing layer answers with. Services
raise these and never substitute a default value for a failed lookup.
"""

from __future__ import annotations


class PowerMeterError(Exception):
    """Base class for all engine failures."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": type(self).__name__, "message": self.message}


class InvalidArgumentError(PowerMeterError):
    """Unsupported keyword, non-numeric value or malformed date component."""

    status_code = 400


class OutOfRangeError(PowerMeterError):
    """Year, month or day outside the supported bounds, or in the future."""

    status_code = 400


class NotFoundError(PowerMeterError):
    """Nothing stored for the requested date or key."""

    status_code = 404


class EmptyAggregateError(PowerMeterError):
    """A summary was requested over zero records."""

    status_code = 404


class UpstreamFailureError(PowerMeterError):
    """The backing store failed or returned malformed data."""

    status_code = 503


class QueryNotImplementedError(PowerMeterError):
    """A recognised query type that has no implementation yet."""

    status_code = 501
