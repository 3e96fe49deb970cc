"""Health check: process vitals for the API server."""

import time

import psutil
from fastapi import APIRouter

from powermeter import __version__
from powermeter.schemas.system import HealthResponse, ProcessVitals

router = APIRouter()

_process = psutil.Process()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness plus CPU and memory of this process."""
    with _process.oneshot():
        mem = _process.memory_info()
        vitals = ProcessVitals(
            cpu_percent=_process.cpu_percent(interval=None),
            memory_rss_mb=round(mem.rss / 1024 / 1024, 1),
            memory_percent=round(_process.memory_percent(), 2),
            uptime_seconds=round(time.time() - _process.create_time(), 1),
        )
    return HealthResponse(version=__version__, process=vitals)


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
