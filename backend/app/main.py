"""Planning Canvas API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PlanningPokerError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and maintenance scheduler started/stopped by the lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py to keep this module's imports small
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import app.infrastructure.database as database
from app.api.error_handlers import register_error_handlers
from app.api.routes import (
    health, rooms, room_stream, users, votes, canvas, timers, maintenance,
)
from app.config import get_settings
from app.infrastructure.observability import setup_logging
from app.services.maintenance_scheduler import MaintenanceScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    scheduler = None
    if settings.maintenance_enabled:
        scheduler = MaintenanceScheduler(
            lambda: database.db_manager.session(),
            interval_seconds=settings.maintenance_interval_seconds,
            inactive_days=settings.inactive_room_days,
            presence_stale_seconds=settings.presence_stale_seconds,
        )
        scheduler.start()
    logger.info("Planning Canvas API started")
    yield
    if scheduler is not None:
        await scheduler.stop()
    await database.db_manager.dispose()
    logger.info("Planning Canvas API shutting down")


app = FastAPI(
    title="Planning Canvas API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(rooms.router)
app.include_router(room_stream.router)
app.include_router(users.router)
app.include_router(votes.router)
app.include_router(canvas.router)
app.include_router(timers.router)
app.include_router(maintenance.router)

register_error_handlers(app)
