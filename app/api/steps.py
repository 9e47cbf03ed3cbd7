"""Per-step submit endpoints of the operator workflow."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.db import crud
from app.db.engine import get_db
from app.dependencies import (
    conflict_response, get_notifier, get_settings_dep, http_error, load_job, require_auth,
)
from app.schemas import (
    CompleteJobSubmit, CustomerSignatureSubmit, EquipmentChecklistSubmit,
    JobHazardAnalysisSubmit, PicturesSubmit, RouteConfirmationResult,
    RouteConfirmationSubmit, SilicaFormSubmit, StepResult,
    WorkflowProgressRead, WorkPerformedSubmit,
)
from app.services import steps
from app.services.auth import AuthContext
from app.services.errors import ActiveJobConflict, FieldOpsError
from app.services.route_confirmation import confirm_route
from app.services.sms import SmsNotifier

router = APIRouter(prefix="/api/job-orders/{job_id}/workflow", tags=["workflow_steps"])


def _result(outcome: steps.StepOutcome) -> StepResult:
    return StepResult(
        progress=WorkflowProgressRead.model_validate(outcome.progress),
        next_step=outcome.next_step.value,
        details=outcome.details,
    )


@router.get("/submissions")
async def list_submissions(
    job_id: str,
    step: str | None = None,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    job = await load_job(db, job_id, auth)
    subs = await crud.list_step_submissions(db, job.id, step)
    return [
        {
            "id": s.id,
            "step": s.step,
            "submitted_by": s.submitted_by,
            "payload": s.payload,
            "created_at": s.created_at.isoformat(),
        }
        for s in subs
    ]


@router.post("/equipment-checklist", response_model=StepResult)
async def submit_equipment_checklist(
    job_id: str,
    body: EquipmentChecklistSubmit,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    job = await load_job(db, job_id, auth)
    try:
        outcome = await steps.submit_equipment_checklist(
            db, job, auth, body.items, body.notes,
            check_standby=settings.workflow.block_on_open_standby,
        )
    except FieldOpsError as e:
        raise http_error(e)
    return _result(outcome)


@router.post("/confirm-route")
async def submit_route_confirmation(
    job_id: str,
    body: RouteConfirmationSubmit,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
    notifier: SmsNotifier = Depends(get_notifier),
):
    job = await load_job(db, job_id, auth)
    try:
        result = await confirm_route(
            db, job, auth,
            captured_time=body.captured_time,
            confirmed_time=body.confirmed_time,
            notifier=notifier,
            window_minutes=settings.workflow.notify_window_minutes,
            company_name=settings.sms.company_name,
            latitude=body.latitude,
            longitude=body.longitude,
            check_standby=settings.workflow.block_on_open_standby,
        )
    except ActiveJobConflict as e:
        return conflict_response(e)
    except FieldOpsError as e:
        raise http_error(e)

    message = ""
    if result.notify_warning:
        message = (
            f"Departure time was changed by {result.time_difference_minutes} minutes, "
            "so the customer was not notified. Call them with an updated ETA."
        )
    return RouteConfirmationResult(
        job_id=result.job.id,
        status=result.job.status,
        sms_sent=result.sms_sent,
        notify_warning=result.notify_warning,
        time_difference_minutes=result.time_difference_minutes,
        next_step=result.next_step.value,
        message=message,
    )


@router.post("/job-hazard-analysis", response_model=StepResult)
async def submit_job_hazard_analysis(
    job_id: str,
    body: JobHazardAnalysisSubmit,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    job = await load_job(db, job_id, auth)
    try:
        outcome = await steps.submit_job_hazard_analysis(
            db, job, auth,
            hazards=[h.model_dump() for h in body.hazards],
            ppe=body.ppe,
            acknowledged=body.acknowledged,
            check_standby=settings.workflow.block_on_open_standby,
        )
    except FieldOpsError as e:
        raise http_error(e)
    return _result(outcome)


@router.post("/silica-exposure", response_model=StepResult)
async def submit_silica_form(
    job_id: str,
    body: SilicaFormSubmit,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    job = await load_job(db, job_id, auth)
    try:
        outcome = await steps.submit_silica_form(
            db, job, auth,
            tasks=body.tasks,
            engineering_controls=body.engineering_controls,
            exposure_hours=body.exposure_hours,
            respirator=body.respirator,
            competent_person=body.competent_person,
            check_standby=settings.workflow.block_on_open_standby,
        )
    except FieldOpsError as e:
        raise http_error(e)
    return _result(outcome)


@router.post("/work-performed", response_model=StepResult)
async def submit_work_performed(
    job_id: str,
    body: WorkPerformedSubmit,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    job = await load_job(db, job_id, auth)
    try:
        outcome = await steps.submit_work_performed(
            db, job, auth,
            items=[i.model_dump() for i in body.items],
            check_standby=settings.workflow.block_on_open_standby,
        )
    except FieldOpsError as e:
        raise http_error(e)
    return _result(outcome)


@router.post("/pictures", response_model=StepResult)
async def submit_pictures(
    job_id: str,
    body: PicturesSubmit,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    job = await load_job(db, job_id, auth)
    try:
        outcome = await steps.submit_pictures(
            db, job, auth, body.photos,
            check_standby=settings.workflow.block_on_open_standby,
        )
    except FieldOpsError as e:
        raise http_error(e)
    return _result(outcome)


@router.post("/customer-signature", response_model=StepResult)
async def submit_customer_signature(
    job_id: str,
    body: CustomerSignatureSubmit,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    job = await load_job(db, job_id, auth)
    try:
        outcome = await steps.submit_customer_signature(
            db, job, auth,
            signer_name=body.signer_name,
            signature=body.signature,
            rating=body.rating,
            comments=body.comments,
            check_standby=settings.workflow.block_on_open_standby,
        )
    except FieldOpsError as e:
        raise http_error(e)
    return _result(outcome)


@router.post("/complete-job", response_model=StepResult)
async def complete_job(
    job_id: str,
    body: CompleteJobSubmit,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    job = await load_job(db, job_id, auth)
    try:
        outcome = await steps.complete_job(
            db, job, auth,
            hours_worked=body.hours_worked,
            customer_rating=body.customer_rating,
            latitude=body.latitude,
            longitude=body.longitude,
            check_standby=settings.workflow.block_on_open_standby,
        )
    except FieldOpsError as e:
        raise http_error(e)
    return _result(outcome)
