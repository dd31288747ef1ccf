"""Room Store Sessions — the API process's engine and the sessions routes, the room
stream and the maintenance scheduler run on.

Invariants:
    - A session that raises is rolled back and closed before the error leaves it
    - SQLAlchemy errors leaving a session surface as StoreUnavailableError (503), tagged
      with the store step that failed; typed domain errors pass through untouched
    - Postgres engines get pool sizing and recycling; sqlite (local runs, tests) does not

Design Decisions:
    - One module-level db_manager set in the lifespan: the room stream and the scheduler
      outlive a request, so they open sessions here instead of through get_db
    - expire_on_commit=False: room snapshots are serialized after the commit that made them
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from app.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors.
STORE_FAILURES: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Room data constraint violated", "commit"),
    (OperationalError, "Room store unreachable", "execute"),
    (DBAPIError, "Room store driver error", "query"),
    (SQLAlchemyError, "Room store operation failed", "session"),
)


def to_store_error(error: SQLAlchemyError) -> StoreUnavailableError:
    for error_type, message, operation in STORE_FAILURES:
        if isinstance(error, error_type):
            return StoreUnavailableError(message, operation)
    return StoreUnavailableError(str(error), "session")


class DatabaseSessionManager:
    """Owns the async engine; hands out sessions that never leak a half-done write."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            store_error = to_store_error(e)
            logger.error(
                f"Room store session failed: {e}",
                extra={"operation": store_error.operation, "error_code": store_error.code},
            )
            raise store_error from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """True when a trivial query round-trips (readiness)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except StoreUnavailableError as e:
            logger.error(f"Room store health check failed: {e.message}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
