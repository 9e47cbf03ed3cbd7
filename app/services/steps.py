"""Per-step submit rules for the operator workflow.

Each submission follows the same shape: check assignment, validate the
form, refuse while standby is open, persist the form and any domain rows,
then record the step. Validation failures never touch the database.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.models import JobOrder, WorkflowProgress
from app.models.work_item import CORE_WORK_TYPES, SAW_WORK_TYPES, WORK_TYPES
from app.services import job_status, workflow
from app.services.auth import AuthContext
from app.services.errors import StepValidationError
from app.services.standby import ensure_no_open_standby
from app.services.workflow import WorkflowStep

logger = logging.getLogger(__name__)

SILICA_RESPIRATOR_THRESHOLD_HOURS = 4.0
DEFAULT_HOURS_WORKED = 8.0


@dataclass
class StepOutcome:
    progress: WorkflowProgress
    next_step: WorkflowStep
    details: dict[str, Any] = field(default_factory=dict)


async def _finish(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    step: WorkflowStep,
    payload: dict,
    check_standby: bool,
) -> WorkflowProgress:
    if check_standby:
        await ensure_no_open_standby(db, job, identity)
    await crud.create_step_submission(db, job.id, step.value, identity.user_id, payload)
    return await workflow.record_step(db, job.id, step, identity=identity)


def _outcome(progress: WorkflowProgress, **details) -> StepOutcome:
    return StepOutcome(progress=progress, next_step=workflow.next_step(progress), details=details)


# ── Equipment checklist ──────────────────────────────────

async def submit_equipment_checklist(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    items: dict[str, bool],
    notes: str = "",
    check_standby: bool = True,
) -> StepOutcome:
    job_status.check_assignment(job, identity)
    checked = sorted(name for name, ok in items.items() if ok)
    if not checked:
        raise StepValidationError("Check at least one piece of equipment before leaving the shop")

    progress = await _finish(
        db, job, identity, WorkflowStep.EQUIPMENT_CHECKLIST,
        {"items": checked, "notes": notes}, check_standby,
    )
    return _outcome(progress, checked_count=len(checked))


# ── Job hazard analysis ──────────────────────────────────

async def submit_job_hazard_analysis(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    hazards: list[dict],
    ppe: list[str] | None = None,
    acknowledged: bool = False,
    check_standby: bool = True,
) -> StepOutcome:
    job_status.check_assignment(job, identity)
    if not hazards:
        raise StepValidationError("Identify at least one hazard")
    for i, h in enumerate(hazards, 1):
        if not (h.get("hazard") or "").strip():
            raise StepValidationError(f"Hazard {i} needs a description")
        if not (h.get("controls") or "").strip():
            raise StepValidationError(f"Hazard '{h['hazard']}' needs a control measure")
    if not acknowledged:
        raise StepValidationError("The operator must acknowledge the hazard analysis")

    progress = await _finish(
        db, job, identity, WorkflowStep.JOB_HAZARD_ANALYSIS,
        {"hazards": hazards, "ppe": ppe or [], "acknowledged": True}, check_standby,
    )
    return _outcome(progress)


# ── Silica exposure control plan ─────────────────────────

async def submit_silica_form(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    tasks: list[str],
    engineering_controls: list[str],
    exposure_hours: float = 0.0,
    respirator: str = "",
    competent_person: str = "",
    check_standby: bool = True,
) -> StepOutcome:
    job_status.check_assignment(job, identity)
    if not tasks:
        raise StepValidationError("Select at least one silica-generating task")
    if not engineering_controls:
        raise StepValidationError("Select at least one engineering control (water, vacuum, ...)")
    if exposure_hours < 0:
        raise StepValidationError("Exposure hours cannot be negative")
    if exposure_hours > SILICA_RESPIRATOR_THRESHOLD_HOURS and not respirator.strip():
        raise StepValidationError(
            "A respirator is required when exposure exceeds 4 hours per shift"
        )

    payload = {
        "tasks": tasks,
        "engineering_controls": engineering_controls,
        "exposure_hours": exposure_hours,
        "respirator": respirator.strip(),
        "competent_person": competent_person.strip(),
    }
    progress = await _finish(db, job, identity, WorkflowStep.SILICA_FORM, payload, check_standby)
    return _outcome(progress)


# ── Work performed ───────────────────────────────────────

def validate_work_item(item: dict) -> dict:
    work_type = item.get("work_type")
    if work_type not in WORK_TYPES:
        raise StepValidationError(f"Unknown work type: {work_type}")

    if work_type in CORE_WORK_TYPES:
        if not item.get("core_size") or not item.get("core_depth_inches"):
            raise StepValidationError("Please specify both bit size and depth for the hole")
        if not item.get("core_quantity") or item["core_quantity"] <= 0:
            raise StepValidationError("Core quantity must be greater than 0")
    elif work_type in SAW_WORK_TYPES:
        if not item.get("linear_feet_cut") or not item.get("cut_depth_inches"):
            raise StepValidationError("Please specify both linear feet and cut depth")
        if item["linear_feet_cut"] <= 0 or item["cut_depth_inches"] <= 0:
            raise StepValidationError("Linear feet and cut depth must be greater than 0")

    allowed = (
        "work_type", "linear_feet_cut", "cut_depth_inches",
        "core_quantity", "core_size", "core_depth_inches", "notes",
    )
    return {k: item[k] for k in allowed if item.get(k) is not None}


async def submit_work_performed(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    items: list[dict],
    check_standby: bool = True,
) -> StepOutcome:
    job_status.check_assignment(job, identity)
    if not items:
        raise StepValidationError("Please select at least one work item")
    cleaned = [validate_work_item(item) for item in items]

    if check_standby:
        await ensure_no_open_standby(db, job, identity)
    rows = await crud.replace_work_items(db, job.id, cleaned)
    progress = await workflow.record_step(db, job.id, WorkflowStep.WORK_PERFORMED, identity=identity)
    return _outcome(progress, item_count=len(rows))


# ── Pictures ─────────────────────────────────────────────

async def submit_pictures(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    photos: list[str],
    check_standby: bool = True,
) -> StepOutcome:
    job_status.check_assignment(job, identity)
    photos = [p for p in photos if p and p.strip()]
    if not photos:
        raise StepValidationError("Submit at least one picture of the completed work")

    progress = await _finish(
        db, job, identity, WorkflowStep.PICTURES, {"photos": photos}, check_standby,
    )
    return _outcome(progress, photo_count=len(photos))


# ── Customer signature ───────────────────────────────────

async def submit_customer_signature(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    signer_name: str,
    signature: str,
    rating: int | None = None,
    comments: str = "",
    check_standby: bool = True,
) -> StepOutcome:
    job_status.check_assignment(job, identity)
    if not signer_name.strip():
        raise StepValidationError("Please enter the name of the person signing")
    if not signature.strip():
        raise StepValidationError("A customer signature is required")
    if rating is not None and not 1 <= rating <= 5:
        raise StepValidationError("Rating must be between 1 and 5")

    payload = {
        "signer_name": signer_name.strip(),
        "signature": signature,
        "rating": rating,
        "comments": comments,
    }
    progress = await _finish(
        db, job, identity, WorkflowStep.CUSTOMER_SIGNATURE, payload, check_standby,
    )
    return _outcome(progress)


# ── Complete job ─────────────────────────────────────────

def production_summary(work_items: list, hours_worked: float) -> dict:
    """Linear feet, primary work type and productivity for a finished job."""
    total_lf = sum(w.linear_feet_cut or 0.0 for w in work_items)
    counts = Counter(w.work_type for w in work_items if w.work_type)
    primary = counts.most_common(1)[0][0] if counts else None
    return {
        "total_linear_feet": round(total_lf, 2),
        "primary_work_type": primary,
        "hours_worked": hours_worked,
        "productivity_rate": round(total_lf / hours_worked, 2) if hours_worked > 0 else 0.0,
    }


async def complete_job(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    hours_worked: float | None = None,
    customer_rating: int | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
    check_standby: bool = True,
) -> StepOutcome:
    job_status.check_assignment(job, identity)
    if hours_worked is not None and hours_worked <= 0:
        raise StepValidationError("Please enter valid hours worked (greater than 0)")
    if customer_rating is not None and not 1 <= customer_rating <= 5:
        raise StepValidationError("Rating must be between 1 and 5")
    if check_standby:
        await ensure_no_open_standby(db, job, identity)

    job = await job_status.set_status(
        db, job, "completed", identity, latitude=latitude, longitude=longitude
    )
    hours = hours_worked or job.production_hours or 0.0
    if hours <= 0:
        hours = DEFAULT_HOURS_WORKED

    summary = production_summary(await crud.list_work_items(db, job.id), hours)
    summary["customer_rating"] = customer_rating
    await crud.create_step_submission(
        db, job.id, WorkflowStep.COMPLETE_JOB.value, identity.user_id, summary
    )
    progress = await workflow.record_step(db, job.id, WorkflowStep.COMPLETE_JOB, identity=identity)
    logger.info(
        "Job %s completed: %.1f LF in %.2fh", job.job_number,
        summary["total_linear_feet"], summary["hours_worked"],
    )
    return _outcome(progress, **summary)
