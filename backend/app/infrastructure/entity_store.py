"""Entity Store — keyed, single-record atomic operations over the ORM tables.

Invariants:
    - Every mutation commits on its own: no operation spans more than one commit
    - Reads bypass the session identity map (populate_existing): they always reflect the
      database, never a stale in-session copy
    - Deletes are idempotent: deleting a missing record returns False, never raises
    - insert_unique never produces a duplicate: a unique violation from a concurrent
      writer resolves to the row that won
    - SQLAlchemyError is rolled back and raised as StoreUnavailableError

Design Decisions:
    - Generic over the model class rather than one repository per table: every table
      shares the same room-scoped access pattern (room_id + secondary key)
    - patch() mutates the loaded row and commits; a row deleted underneath surfaces as
      ResourceNotFoundError (StaleDataError), not as an infrastructure failure
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, NoReturn, TypeVar

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import ResourceNotFoundError, StoreUnavailableError
from app.db.base import Base

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Base)


class EntityStore:
    """Room-scoped CRUD over any mapped model."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fail(self, operation: str, error: SQLAlchemyError) -> NoReturn:
        await self.db.rollback()
        logger.error(f"Store {operation} failed: {error}")
        raise StoreUnavailableError(type(error).__name__, operation) from error

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncGenerator[None, None]:
        try:
            yield
        except SQLAlchemyError as e:
            await self._fail(operation, e)

    # ─── Reads ───────────────────────────────────────────────────

    async def get(self, model: type[M], record_id) -> M | None:
        async with self._guard("get"):
            result = await self.db.execute(
                select(model)
                .where(model.id == record_id)
                .execution_options(populate_existing=True),
            )
            return result.scalar_one_or_none()

    async def find_one(self, model: type[M], room_id, **keys) -> M | None:
        """Unique lookup by (room_id, secondary key...)."""
        async with self._guard("find"):
            query = select(model).where(model.room_id == room_id)
            for column, value in keys.items():
                query = query.where(getattr(model, column) == value)
            result = await self.db.execute(
                query.execution_options(populate_existing=True),
            )
            return result.scalars().first()

    async def list_by_room(
        self, model: type[M], room_id, order_by=None, **filters,
    ) -> list[M]:
        async with self._guard("list"):
            query = select(model).where(model.room_id == room_id)
            for column, value in filters.items():
                query = query.where(getattr(model, column) == value)
            if order_by is not None:
                query = query.order_by(order_by)
            result = await self.db.execute(
                query.execution_options(populate_existing=True),
            )
            return list(result.scalars().all())

    async def list_where(
        self, model: type[M], *criteria, limit: int | None = None,
    ) -> list[M]:
        """Arbitrary criteria, e.g. a range scan on an indexed timestamp."""
        async with self._guard("list"):
            query = select(model).where(*criteria)
            if limit is not None:
                query = query.limit(limit)
            result = await self.db.execute(
                query.execution_options(populate_existing=True),
            )
            return list(result.scalars().all())

    # ─── Mutations ───────────────────────────────────────────────

    async def insert(self, record: M) -> M:
        async with self._guard("insert"):
            self.db.add(record)
            await self.db.commit()
            return record

    async def insert_unique(self, record: M, **keys) -> tuple[M, bool]:
        """Check-then-insert on (room_id, **keys). Returns (record, created)."""
        model, room_id = type(record), record.room_id
        existing = await self.find_one(model, room_id, **keys)
        if existing is not None:
            return existing, False
        try:
            self.db.add(record)
            await self.db.commit()
            return record, True
        except IntegrityError:
            # Lost the race to a concurrent writer
            await self.db.rollback()
        except SQLAlchemyError as e:
            await self._fail("insert", e)
        winner = await self.find_one(model, room_id, **keys)
        if winner is None:
            raise StoreUnavailableError("unique insert not resolved", "insert")
        return winner, False

    async def patch(self, record: M, **changes: Any) -> M:
        model_name, record_id = type(record).__name__, str(record.id)
        try:
            for column, value in changes.items():
                setattr(record, column, value)
            await self.db.commit()
            return record
        except StaleDataError:
            # Row deleted underneath
            await self.db.rollback()
            raise ResourceNotFoundError(model_name, record_id) from None
        except SQLAlchemyError as e:
            await self._fail("patch", e)

    async def update_where(self, model: type[M], *criteria, **values: Any) -> int:
        """Conditional bulk UPDATE. Returns the number of rows changed."""
        async with self._guard("update"):
            result = await self.db.execute(
                update(model)
                .where(*criteria)
                .values(**values)
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
            return result.rowcount

    async def delete(self, record: Base) -> bool:
        return await self.delete_by_id(type(record), record.id)

    async def delete_by_id(self, model: type[M], record_id) -> bool:
        return await self.delete_where(model, model.id == record_id) > 0

    async def delete_where(self, model: type[M], *criteria) -> int:
        """Idempotent bulk delete. Returns the number of rows removed."""
        async with self._guard("delete"):
            result = await self.db.execute(
                delete(model)
                .where(*criteria)
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
            return result.rowcount
