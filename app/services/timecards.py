"""Timecards: clock in/out, workflow events, hours and approval."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.models import TimecardEntry
from app.models.base import as_utc, utcnow
from app.models.timecard import EVENT_TYPES
from app.services.auth import AuthContext
from app.services.errors import (
    AlreadyApproved, AlreadyClockedIn, NotClockedIn, RecordNotFound, StepValidationError,
)

logger = logging.getLogger(__name__)


def hours_between(start: datetime, end: datetime) -> float:
    return round((as_utc(end) - as_utc(start)).total_seconds() / 3600, 2)


def overtime_hours(total_hours: float | None, threshold: float = 8.0) -> float:
    """Hours beyond the daily threshold."""
    if not total_hours:
        return 0.0
    return round(max(0.0, total_hours - threshold), 2)


async def record_event(
    db: AsyncSession,
    user_id: str,
    event_type: str,
    job_id: str | None = None,
    occurred_at: datetime | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
    accuracy: float | None = None,
    notes: str = "",
) -> TimecardEntry:
    if event_type not in EVENT_TYPES:
        raise StepValidationError(f"Unknown timecard event: {event_type}")
    return await crud.create_timecard_entry(
        db,
        user_id=user_id,
        job_order_id=job_id,
        event_type=event_type,
        occurred_at=as_utc(occurred_at) if occurred_at else utcnow(),
        latitude=latitude,
        longitude=longitude,
        accuracy=accuracy,
        notes=notes,
    )


async def get_open_clock_in(db: AsyncSession, user_id: str) -> TimecardEntry | None:
    last = await crud.get_last_clock_event(db, user_id)
    if last and last.event_type == "clock_in":
        return last
    return None


async def clock_in(
    db: AsyncSession,
    identity: AuthContext,
    latitude: float | None = None,
    longitude: float | None = None,
    accuracy: float | None = None,
) -> TimecardEntry:
    open_entry = await get_open_clock_in(db, identity.user_id)
    if open_entry:
        raise AlreadyClockedIn(
            f"You are already clocked in since {as_utc(open_entry.occurred_at).isoformat()}. "
            "Please clock out first."
        )
    entry = await record_event(
        db, identity.user_id, "clock_in",
        latitude=latitude, longitude=longitude, accuracy=accuracy,
    )
    logger.info("User %s clocked in", identity.user_id)
    return entry


async def clock_out(
    db: AsyncSession,
    identity: AuthContext,
    latitude: float | None = None,
    longitude: float | None = None,
    accuracy: float | None = None,
) -> TimecardEntry:
    open_entry = await get_open_clock_in(db, identity.user_id)
    if not open_entry:
        raise NotClockedIn("No active clock-in found. You must clock in before you can clock out.")

    now = utcnow()
    entry = await crud.create_timecard_entry(
        db,
        user_id=identity.user_id,
        event_type="clock_out",
        occurred_at=now,
        latitude=latitude,
        longitude=longitude,
        accuracy=accuracy,
        total_hours=hours_between(open_entry.occurred_at, now),
        clock_in_entry_id=open_entry.id,
    )
    logger.info("User %s clocked out after %.2fh", identity.user_id, entry.total_hours)
    return entry


async def current_status(db: AsyncSession, identity: AuthContext) -> dict:
    open_entry = await get_open_clock_in(db, identity.user_id)
    if not open_entry:
        return {"clocked_in": False, "clock_in_time": None, "hours_so_far": 0.0}
    return {
        "clocked_in": True,
        "clock_in_time": as_utc(open_entry.occurred_at),
        "hours_so_far": hours_between(open_entry.occurred_at, utcnow()),
    }


async def history(
    db: AsyncSession,
    user_id: str,
    since: datetime | None = None,
    until: datetime | None = None,
    overtime_threshold: float = 8.0,
) -> dict:
    entries = await crud.list_timecard_entries(db, user_id=user_id, since=since, until=until)
    shifts = [e for e in entries if e.event_type == "clock_out" and e.total_hours is not None]
    total = round(sum(e.total_hours for e in shifts), 2)
    overtime = round(sum(overtime_hours(e.total_hours, overtime_threshold) for e in shifts), 2)
    return {
        "entries": entries,
        "total_hours": total,
        "regular_hours": round(total - overtime, 2),
        "overtime_hours": overtime,
    }


async def approve(db: AsyncSession, entry_id: str, identity: AuthContext) -> TimecardEntry:
    """One-way approval flag flip."""
    entry = await crud.get_timecard_entry(db, entry_id)
    if not entry:
        raise RecordNotFound("Timecard not found")
    if entry.is_approved:
        raise AlreadyApproved("Timecard is already approved")
    return await crud.update_timecard_entry(
        db, entry, is_approved=True, approved_by=identity.user_id, approved_at=utcnow(),
    )


async def update_entry(
    db: AsyncSession,
    entry_id: str,
    occurred_at: datetime | None = None,
    notes: str | None = None,
) -> TimecardEntry:
    """Admin correction of an entry; keeps clock_out total_hours in step."""
    entry = await crud.get_timecard_entry(db, entry_id)
    if not entry:
        raise RecordNotFound("Timecard not found")

    if occurred_at is not None:
        occurred_at = as_utc(occurred_at)
    entry = await crud.update_timecard_entry(db, entry, occurred_at=occurred_at, notes=notes)

    if entry.event_type == "clock_out" and entry.clock_in_entry_id:
        clock_in_entry = await crud.get_timecard_entry(db, entry.clock_in_entry_id)
        if clock_in_entry:
            entry = await crud.update_timecard_entry(
                db, entry, total_hours=hours_between(clock_in_entry.occurred_at, entry.occurred_at)
            )
    elif entry.event_type == "clock_in":
        paired = await crud.get_clock_out_for(db, entry.id)
        if paired:
            await crud.update_timecard_entry(
                db, paired, total_hours=hours_between(entry.occurred_at, paired.occurred_at)
            )
    return entry
