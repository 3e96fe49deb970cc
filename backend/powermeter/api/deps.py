"""FastAPI dependency injection: store and service construction per request."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from powermeter.database import get_db
from powermeter.services import (
    DateLookupService,
    KwhService,
    MeterService,
    OrderedStore,
    SqlOrderedStore,
    WattsService,
)


async def get_store(db: AsyncSession = Depends(get_db)) -> OrderedStore:
    return SqlOrderedStore(db)


async def get_kwh_service(store: OrderedStore = Depends(get_store)) -> KwhService:
    return KwhService(store)


async def get_date_lookup_service(
    store: OrderedStore = Depends(get_store),
) -> DateLookupService:
    return DateLookupService(store)


async def get_meter_service(store: OrderedStore = Depends(get_store)) -> MeterService:
    return MeterService(store)


async def get_watts_service(store: OrderedStore = Depends(get_store)) -> WattsService:
    return WattsService(store)
