"""Health schemas."""

from pydantic import BaseModel


class ProcessVitals(BaseModel):
    """Resource usage of the API process."""
    cpu_percent: float
    memory_rss_mb: float
    memory_percent: float
    uptime_seconds: float


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    service: str = "powermeter"
    process: ProcessVitals | None = None
