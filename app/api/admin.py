"""Admin API: users, job dispatch, workflow edits, timecard approval."""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.db.engine import get_db
from app.dependencies import conflict_response, http_error, require_admin
from app.models.auth_models import ROLES
from app.schemas import (
    AdminWorkflowUpdate, JobOrderCreate, JobOrderRead, JobOrderUpdate,
    TimecardRead, TimecardUpdate, UserCreate, UserRead, WorkflowProgressRead,
)
from app.services import job_status, timecards, workflow
from app.services.auth import AuthContext, hash_password
from app.services.errors import ActiveJobConflict, FieldOpsError

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ── Users ─────────────────────────────────────────────────

@router.post("/users", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if body.role not in ROLES:
        return JSONResponse(status_code=400, content={"detail": "Invalid role"})
    if await crud.get_user_by_email(db, body.email.strip().lower()):
        return JSONResponse(status_code=409, content={"detail": "User with this email already exists"})
    return await crud.create_user(
        db, body.email, hash_password(body.password),
        role=body.role, display_name=body.display_name, phone=body.phone,
    )


@router.get("/operators/active")
async def list_active_operators(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Operators with the job they are currently in route to or working on."""
    operators = await crud.list_operators(db)
    out = []
    for op in operators:
        job = await job_status.find_active_job(db, op.id)
        out.append({
            "id": op.id,
            "display_name": op.display_name,
            "email": op.email,
            "phone": op.phone,
            "active_job": {
                "id": job.id,
                "job_number": job.job_number,
                "location": job.location or job.address,
                "status": job.status,
            } if job else None,
        })
    return out


# ── Job orders ────────────────────────────────────────────

async def _check_operator(db: AsyncSession, user_id: str | None) -> None:
    if user_id and not await crud.get_user(db, user_id):
        raise HTTPException(400, "Assigned operator not found")


@router.post("/job-orders", response_model=JobOrderRead, status_code=201)
async def create_job_order(
    body: JobOrderCreate,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if await crud.get_job_order_by_number(db, body.job_number):
        raise HTTPException(409, f"Job number {body.job_number} already exists")
    await _check_operator(db, body.assigned_to)
    return await crud.create_job_order(db, **body.model_dump())


@router.get("/job-orders", response_model=list[JobOrderRead])
async def list_job_orders(
    status: str | None = None,
    assigned_to: str | None = Query(None, alias="assignedTo"),
    scheduled_date: date | None = None,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_job_orders(
        db, status=status, assigned_to=assigned_to, scheduled_date=scheduled_date
    )


@router.get("/job-orders/{job_id}")
async def get_job_order(
    job_id: str,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    job = await crud.get_job_order(db, job_id)
    if not job:
        raise HTTPException(404, "Job order not found")
    progress = await workflow.load_progress(db, job.id, auth)
    return {
        "job": JobOrderRead.model_validate(job),
        "workflow": workflow.summarize(progress),
    }


@router.put("/job-orders/{job_id}", response_model=JobOrderRead)
async def update_job_order(
    job_id: str,
    body: JobOrderUpdate,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    job = await crud.get_job_order(db, job_id)
    if not job:
        raise HTTPException(404, "Job order not found")
    updates = body.model_dump(exclude_unset=True)
    try:
        if "assigned_to" in updates:
            assignee = updates.pop("assigned_to")
            await _check_operator(db, assignee)
            job = await job_status.reassign(db, job, assignee, auth)
    except ActiveJobConflict as e:
        return conflict_response(e)
    except FieldOpsError as e:
        raise http_error(e)
    return await crud.update_job_order(db, job, **updates)


@router.delete("/job-orders/{job_id}")
async def cancel_job_order(
    job_id: str,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    job = await crud.get_job_order(db, job_id)
    if not job:
        raise HTTPException(404, "Job order not found")
    try:
        job = await job_status.set_status(db, job, "cancelled", auth)
    except FieldOpsError as e:
        raise http_error(e)
    return {"ok": True, "id": job.id, "status": job.status}


@router.put("/job-workflow/{job_id}", response_model=WorkflowProgressRead)
async def edit_job_workflow(
    job_id: str,
    body: AdminWorkflowUpdate,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    job = await crud.get_job_order(db, job_id)
    if not job:
        raise HTTPException(404, "Job order not found")
    try:
        return await workflow.admin_set_flags(
            db, job.id, body.flags, body.current_step, identity=auth
        )
    except FieldOpsError as e:
        raise http_error(e)


@router.post("/sync-job-statuses")
async def sync_job_statuses(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await job_status.sync_job_statuses(db)


# ── Timecards ─────────────────────────────────────────────

@router.get("/timecards", response_model=list[TimecardRead])
async def list_timecards(
    user_id: str | None = Query(None, alias="userId"),
    approved: bool | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_timecard_entries(
        db, user_id=user_id, since=since, until=until, approved=approved
    )


@router.post("/timecards/{entry_id}/approve", response_model=TimecardRead)
async def approve_timecard(
    entry_id: str,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await timecards.approve(db, entry_id, auth)
    except FieldOpsError as e:
        raise http_error(e)


@router.put("/timecards/{entry_id}", response_model=TimecardRead)
async def update_timecard(
    entry_id: str,
    body: TimecardUpdate,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await timecards.update_entry(
            db, entry_id, occurred_at=body.occurred_at, notes=body.notes
        )
    except FieldOpsError as e:
        raise http_error(e)
