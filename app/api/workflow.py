"""Workflow progress API: read, record a step, landing redirect, summary."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import get_db
from app.dependencies import http_error, load_job, require_auth
from app.schemas import StepResult, WorkflowProgressRead, WorkflowUpdate
from app.services import workflow
from app.services.auth import AuthContext
from app.services.errors import FieldOpsError

router = APIRouter(prefix="/api/workflow", tags=["workflow"])


def _result(progress) -> StepResult:
    return StepResult(
        progress=WorkflowProgressRead.model_validate(progress),
        next_step=workflow.next_step(progress).value,
    )


@router.get("", response_model=StepResult)
async def get_workflow(
    job_id: str = Query(alias="jobId"),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Progress for a job; the row is created on first read."""
    job = await load_job(db, job_id, auth)
    progress = await workflow.ensure_progress(db, job.id, auth)
    return _result(progress)


@router.post("", response_model=StepResult)
async def record_workflow_step(
    body: WorkflowUpdate,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    job = await load_job(db, body.job_id, auth)
    extra = {"sms_sent": body.sms_sent} if body.sms_sent is not None else None
    try:
        progress = await workflow.record_step(
            db, job.id, body.completed_step, body.current_step, extra,
            identity=auth, expected_version=body.expected_version,
        )
    except FieldOpsError as e:
        raise http_error(e)
    return _result(progress)


@router.get("/{job_id}/landing")
async def get_landing_step(
    job_id: str,
    step: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """Where an operator opening ``step`` should end up. Never redirects backwards."""
    job = await load_job(db, job_id, auth)
    progress = await workflow.load_progress(db, job.id, auth)
    try:
        requested = workflow.parse_step(step)
    except FieldOpsError as e:
        raise http_error(e)
    landing = workflow.landing_step(progress, requested)
    return {
        "requested": requested.value,
        "landing_step": landing.value,
        "redirect": landing is not requested,
    }


@router.get("/{job_id}/summary")
async def get_workflow_summary(
    job_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    job = await load_job(db, job_id, auth)
    progress = await workflow.load_progress(db, job.id, auth)
    return {"job_id": job.id, "job_number": job.job_number, **workflow.summarize(progress)}
