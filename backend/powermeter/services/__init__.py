"""Rollup engine services.

Every service takes its ``OrderedStore`` at construction; nothing reaches a
store through module state.
"""

from powermeter.services.date_lookup import DateLookupService
from powermeter.services.kwh_service import KwhService
from powermeter.services.meter_service import MeterService
from powermeter.services.store import OrderedStore, SqlOrderedStore
from powermeter.services.watts_service import WattsService

__all__ = [
    "DateLookupService",
    "KwhService",
    "MeterService",
    "OrderedStore",
    "SqlOrderedStore",
    "WattsService",
]
