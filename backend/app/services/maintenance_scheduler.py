"""Maintenance Scheduler — in-process periodic run of every cleanup sweep.

Invariants:
    - One asyncio task per scheduler; start() is a no-op when already running
    - Each run uses a fresh DB session and runs the inactive-room, orphan and
      presence sweeps in that order
    - A failing sweep is logged and never kills the loop or the later sweeps
    - stop() cancels the task and waits for it

Design Decisions:
    - asyncio task in the FastAPI lifespan instead of an external cron: single process,
      no extra infrastructure; disable with MAINTENANCE_ENABLED=false when a platform
      scheduler runs `python -m app.run_maintenance` instead
"""

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PlanningPokerError
from app.infrastructure.clock import Clock, server_now_ms
from app.services.maintenance import MaintenanceService

logger = logging.getLogger(__name__)

SessionProvider = Callable[[], AbstractAsyncContextManager[AsyncSession]]


async def run_all_sweeps(
    db: AsyncSession,
    inactive_days: int,
    presence_stale_seconds: int,
    clock: Clock = server_now_ms,
) -> dict:
    """Run every sweep once. Returns per-sweep counts (or the error code of a failed one)."""
    service = MaintenanceService(db, clock)
    summary: dict = {}
    sweeps = (
        ("inactive_rooms", lambda: service.remove_inactive_rooms(inactive_days)),
        ("orphans", service.cleanup_orphaned_data),
        ("presence", lambda: service.cleanup_inactive_presence(presence_stale_seconds)),
    )
    for name, sweep in sweeps:
        try:
            outcome = await sweep()
            summary[name] = outcome if isinstance(outcome, dict) else outcome.counts()
        except PlanningPokerError as e:
            logger.error(
                f"Maintenance sweep '{name}' failed: {e.message}",
                extra={"operation": name, "error_code": e.code},
            )
            summary[name] = {"error": e.code}
        except Exception:
            logger.exception(
                f"Maintenance sweep '{name}' crashed",
                extra={"operation": name, "error_code": "INTERNAL_ERROR"},
            )
            summary[name] = {"error": "INTERNAL_ERROR"}
    return summary


class MaintenanceScheduler:
    """Runs all sweeps every `interval_seconds` on the event loop."""

    def __init__(
        self,
        session_provider: SessionProvider,
        interval_seconds: float,
        inactive_days: int,
        presence_stale_seconds: int,
        clock: Clock = server_now_ms,
    ):
        self.session_provider = session_provider
        self.interval_seconds = interval_seconds
        self.inactive_days = inactive_days
        self.presence_stale_seconds = presence_stale_seconds
        self.clock = clock
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="maintenance-scheduler")
        logger.info(f"Maintenance scheduler started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Maintenance scheduler stopped")

    async def run_once(self) -> dict:
        async with self.session_provider() as db:
            return await run_all_sweeps(
                db, self.inactive_days, self.presence_stale_seconds, self.clock,
            )

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                summary = await self.run_once()
                logger.info("Maintenance run finished", extra={"counts": summary})
            except Exception:
                logger.exception("Maintenance run crashed")
