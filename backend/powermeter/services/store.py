"""Persistent ordered store: scalar keys, append-only lists, two-level hashes.

The engine only talks to the ``OrderedStore`` protocol. ``SqlOrderedStore``
implements it on top of an async SQLAlchemy session; every call is an await
point and a failed call surfaces as ``UpstreamFailureError`` without retry.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from powermeter.errors import InvalidArgumentError, UpstreamFailureError
from powermeter.models.store import StoreHashField, StoreKey, StoreListItem

logger = logging.getLogger(__name__)


class OrderedStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def rpush(self, name: str, value: str) -> int: ...

    async def range_from_end(self, name: str, count: int) -> list[str]: ...

    async def range_all(self, name: str) -> list[str]: ...

    async def length(self, name: str) -> int: ...

    async def hget(self, key: str, field: str) -> str | None: ...

    async def hset(self, key: str, field: str, value: str) -> None: ...


class SqlOrderedStore:
    """OrderedStore backed by the store_* tables."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def _execute(self, stmt: Any, what: str):
        try:
            return await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("Store %s failed: %s", what, exc)
            raise UpstreamFailureError(f"Backing store {what} failed") from exc

    async def _commit(self, what: str) -> None:
        try:
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Store %s commit failed: %s", what, exc)
            raise UpstreamFailureError(f"Backing store {what} failed") from exc

    async def get(self, key: str) -> str | None:
        result = await self._execute(
            select(StoreKey.value).where(StoreKey.key == key), f"get {key}"
        )
        return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        result = await self._execute(
            select(StoreKey).where(StoreKey.key == key), f"set {key}"
        )
        row = result.scalar_one_or_none()
        if row:
            row.value = value
        else:
            self._db.add(StoreKey(key=key, value=value))
        await self._commit(f"set {key}")

    async def rpush(self, name: str, value: str) -> int:
        """Append to the tail of a list; returns the new list length."""
        self._db.add(StoreListItem(list_name=name, value=value))
        await self._commit(f"rpush {name}")
        return await self.length(name)

    async def range_from_end(self, name: str, count: int) -> list[str]:
        """Last ``count`` elements of a list, oldest first."""
        if count < 1:
            raise InvalidArgumentError(f"Range count must be positive, got {count}")
        result = await self._execute(
            select(StoreListItem.value)
            .where(StoreListItem.list_name == name)
            .order_by(StoreListItem.id.desc())
            .limit(count),
            f"range {name}",
        )
        values = list(result.scalars().all())
        values.reverse()
        return values

    async def range_all(self, name: str) -> list[str]:
        result = await self._execute(
            select(StoreListItem.value)
            .where(StoreListItem.list_name == name)
            .order_by(StoreListItem.id),
            f"range {name}",
        )
        return list(result.scalars().all())

    async def length(self, name: str) -> int:
        result = await self._execute(
            select(func.count()).select_from(StoreListItem).where(StoreListItem.list_name == name),
            f"length {name}",
        )
        return result.scalar() or 0

    async def hget(self, key: str, field: str) -> str | None:
        result = await self._execute(
            select(StoreHashField.value).where(
                StoreHashField.key == key,
                StoreHashField.field == field,
            ),
            f"hget {key}/{field}",
        )
        return result.scalar_one_or_none()

    async def hset(self, key: str, field: str, value: str) -> None:
        result = await self._execute(
            select(StoreHashField).where(
                StoreHashField.key == key,
                StoreHashField.field == field,
            ),
            f"hset {key}/{field}",
        )
        row = result.scalar_one_or_none()
        if row:
            row.value = value
        else:
            self._db.add(StoreHashField(key=key, field=field, value=value))
        await self._commit(f"hset {key}/{field}")
