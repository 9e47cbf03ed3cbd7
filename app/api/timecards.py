"""Timecard API: clock in/out, current status, history."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.db.engine import get_db
from app.dependencies import get_settings_dep, http_error, require_auth
from app.schemas import ClockBody, TimecardHistory, TimecardRead
from app.services import timecards
from app.services.auth import AuthContext
from app.services.errors import FieldOpsError

router = APIRouter(prefix="/api/timecard", tags=["timecard"])


@router.post("/clock-in", response_model=TimecardRead, status_code=201)
async def clock_in(
    body: ClockBody | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    body = body or ClockBody()
    try:
        return await timecards.clock_in(
            db, auth, latitude=body.latitude, longitude=body.longitude, accuracy=body.accuracy
        )
    except FieldOpsError as e:
        raise http_error(e)


@router.post("/clock-out", response_model=TimecardRead)
async def clock_out(
    body: ClockBody | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    body = body or ClockBody()
    try:
        return await timecards.clock_out(
            db, auth, latitude=body.latitude, longitude=body.longitude, accuracy=body.accuracy
        )
    except FieldOpsError as e:
        raise http_error(e)


@router.get("/current")
async def current(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await timecards.current_status(db, auth)


@router.get("/history", response_model=TimecardHistory)
async def history(
    since: datetime | None = None,
    until: datetime | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    return await timecards.history(
        db, auth.user_id, since=since, until=until,
        overtime_threshold=settings.timecard.overtime_threshold_hours,
    )
