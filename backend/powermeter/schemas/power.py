"""Power meter request/response schemas."""

from pydantic import BaseModel


class MeterTotalUpdate(BaseModel):
    """New absolute meter register reading."""
    value: float


class MeterTotalOut(BaseModel):
    """Current meter total."""
    description: str
    value: float
    timestamp: int
    time: str
    delta: float | None = None


class MeterAuditOut(BaseModel):
    """Result of a meter total update: one audit log entry."""
    timestamp: str
    oldValue: float | None = None
    newValue: float
    delta: float | None = None
    description: str
    meterUpdates: int


class WattsOut(BaseModel):
    """Average power over an interval."""
    description: str
    watt: int
    max: int
    min: int
    time: str | None = None
    interval: int


class WattsPoint(BaseModel):
    time: str | None = None
    watt: int
    perSecond: list[float] = []


class WattsSeries(BaseModel):
    """Average watts per minute over the last hour."""
    description: str
    container: str = "Array"
    items: list[WattsPoint]


class ErrorOut(BaseModel):
    error: str
    message: str
