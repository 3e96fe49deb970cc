"""API route registration."""

from fastapi import APIRouter

from powermeter.api.routes import health, power

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(power.router, tags=["power"])
