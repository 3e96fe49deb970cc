"""SQLAlchemy ORM models for PowerMeter."""

from powermeter.models.base import Base
from powermeter.models.store import StoreHashField, StoreKey, StoreListItem

__all__ = [
    "Base",
    "StoreKey",
    "StoreListItem",
    "StoreHashField",
]
