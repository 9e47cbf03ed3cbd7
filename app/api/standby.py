"""Standby API: start and stop idle-time logs on a job."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.db import crud
from app.db.engine import get_db
from app.dependencies import get_notifier, get_settings_dep, http_error, load_job, require_auth
from app.models import StandbyLog
from app.schemas import StandbyRead, StandbyStart, StandbyStop
from app.services import standby
from app.services.auth import AuthContext
from app.services.errors import FieldOpsError
from app.services.sms import SmsNotifier

router = APIRouter(prefix="/api/standby", tags=["standby"])


def _read(log: StandbyLog, settings: Settings) -> StandbyRead:
    out = StandbyRead.model_validate(log)
    if log.duration_hours is not None:
        out.charge = standby.standby_charge(
            log.duration_hours,
            settings.standby.hourly_rate,
            settings.standby.minimum_billable_hours,
        )
    return out


@router.post("", response_model=StandbyRead, status_code=201)
async def start_standby(
    body: StandbyStart,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
    notifier: SmsNotifier = Depends(get_notifier),
):
    job = await load_job(db, body.job_id, auth)
    try:
        log = await standby.start_standby(
            db, job, auth, body.reason,
            started_at=body.started_at,
            notifier=notifier,
            config=settings.standby,
            company_name=settings.sms.company_name,
        )
    except FieldOpsError as e:
        raise http_error(e)
    return _read(log, settings)


@router.put("", response_model=StandbyRead)
async def stop_standby(
    body: StandbyStop,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    try:
        log = await standby.stop_standby(db, body.log_id, auth, ended_at=body.ended_at)
    except FieldOpsError as e:
        raise http_error(e)
    return _read(log, settings)


@router.get("", response_model=list[StandbyRead])
async def list_standby(
    job_id: str | None = Query(None, alias="jobId"),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    operator_id = None if auth.is_admin else auth.user_id
    logs = await crud.list_standby_logs(db, job_id=job_id, operator_id=operator_id)
    return [_read(log, settings) for log in logs]
