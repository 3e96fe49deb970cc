"""Backing tables for the ordered store: scalar keys, lists, hashes."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from powermeter.models.base import Base


class StoreKey(Base):
    """Scalar key/value pair (meterTotal, meterTotalDelta, ...)."""
    __tablename__ = "store_keys"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )


class StoreListItem(Base):
    """One element of a named append-only list. Order is the autoincrement id."""
    __tablename__ = "store_list_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    list_name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class StoreHashField(Base):
    """Two-level hash entry: key (outer) -> field (inner) -> value."""
    __tablename__ = "store_hash_fields"
    __table_args__ = (
        UniqueConstraint("key", "field", name="uq_store_hash_field"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    field: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
