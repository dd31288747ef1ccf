"""Maintenance Routes — on-demand runs of the cleanup sweeps.

Invariants:
    - Intended for operators and schedulers, not end-user traffic
    - A sweep with failed steps answers 500 PARTIAL_COMPLETION carrying the counts achieved
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_clock
from app.config import get_settings
from app.infrastructure.clock import Clock
from app.infrastructure.database import get_db
from app.services.maintenance import MaintenanceService

router = APIRouter(prefix="/api/v1/maintenance", tags=["maintenance"])


@router.post("/inactive-rooms")
async def remove_inactive_rooms(
    inactive_days: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    days = inactive_days or get_settings().inactive_room_days
    result = await MaintenanceService(db, clock).remove_inactive_rooms(days)
    return {"inactive_days": days, "deleted": result.counts()}


@router.post("/orphans")
async def cleanup_orphaned_data(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    result = await MaintenanceService(db, clock).cleanup_orphaned_data()
    return {"deleted": result.counts()}


@router.post("/presence")
async def cleanup_inactive_presence(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    stale_seconds = get_settings().presence_stale_seconds
    return await MaintenanceService(db, clock).cleanup_inactive_presence(stale_seconds)
