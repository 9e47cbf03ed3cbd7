"""Operator job orders: own job list, status transitions, arrival."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.db.engine import get_db
from app.dependencies import conflict_response, http_error, load_job, require_auth
from app.schemas import JobOrderRead, JobStatusHistoryRead, LocationBody, StatusUpdate
from app.services import job_status, timecards
from app.services.auth import AuthContext
from app.services.errors import ActiveJobConflict, FieldOpsError

router = APIRouter(prefix="/api/job-orders", tags=["job_orders"])


@router.get("", response_model=list[JobOrderRead])
async def list_my_jobs(
    status: str | None = None,
    scheduled_date: date | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    assigned_to = None if auth.is_admin else auth.user_id
    return await crud.list_job_orders(
        db, status=status, assigned_to=assigned_to, scheduled_date=scheduled_date
    )


@router.get("/active")
async def get_active_job(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    job = await job_status.find_active_job(db, auth.user_id)
    return {"active_job": JobOrderRead.model_validate(job) if job else None}


@router.get("/{job_id}", response_model=JobOrderRead)
async def get_job(
    job_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await load_job(db, job_id, auth)


@router.post("/{job_id}/status")
async def update_status(
    job_id: str,
    body: StatusUpdate,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    job = await load_job(db, job_id, auth)
    try:
        job = await job_status.set_status(
            db, job, body.status, auth, latitude=body.latitude, longitude=body.longitude
        )
    except ActiveJobConflict as e:
        return conflict_response(e)
    except FieldOpsError as e:
        raise http_error(e)
    return {"ok": True, "job": JobOrderRead.model_validate(job)}


@router.post("/{job_id}/arrive")
async def arrive_on_site(
    job_id: str,
    body: LocationBody | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Operator reached the site: job goes in_progress and an arrival is logged."""
    body = body or LocationBody()
    job = await load_job(db, job_id, auth)
    try:
        job = await job_status.set_status(
            db, job, "in_progress", auth, latitude=body.latitude, longitude=body.longitude
        )
        await timecards.record_event(
            db, job_status.job_owner(job, auth), "arrived", job_id=job.id,
            latitude=body.latitude, longitude=body.longitude,
        )
    except ActiveJobConflict as e:
        return conflict_response(e)
    except FieldOpsError as e:
        raise http_error(e)
    return {"ok": True, "job": JobOrderRead.model_validate(job)}


@router.get("/{job_id}/history", response_model=list[JobStatusHistoryRead])
async def get_status_history(
    job_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Status changes for the job, newest first."""
    job = await load_job(db, job_id, auth)
    return await crud.list_status_history(db, job.id)
