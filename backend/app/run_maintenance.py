"""Standalone maintenance run — every sweep once, for an external scheduler.

Usage: python -m app.run_maintenance

Invariants:
    - Uses its own engine (db/session.py); never touches the API's db_manager
    - Exit code 1 when any sweep reported an error, 0 otherwise
"""

import asyncio
import logging
import sys

from app.config import get_settings
from app.db.session import create_session_factory
from app.infrastructure.observability import setup_logging
from app.services.maintenance_scheduler import run_all_sweeps

logger = logging.getLogger(__name__)


async def main() -> int:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    session_factory = create_session_factory(settings.database_url)
    async with session_factory() as db:
        engine = db.bind
        summary = await run_all_sweeps(
            db, settings.inactive_room_days, settings.presence_stale_seconds,
        )
    await engine.dispose()
    logger.info("Maintenance run finished", extra={"counts": summary})
    failed = any("error" in counts for counts in summary.values())
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
