"""Operator workflow: step sequencing and progress reads/writes.

The sequencer is a pure function of the progress flags. Reads are
non-fatal for callers that only need to decide what to show; writes set
flags to true and never reset them (admin edits excepted).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.models import WorkflowProgress
from app.models.base import utcnow
from app.services.auth import AuthContext
from app.services.errors import StaleProgressError, StepValidationError

logger = logging.getLogger(__name__)


class WorkflowStep(str, Enum):
    EQUIPMENT_CHECKLIST = "equipment_checklist"
    IN_ROUTE = "in_route"
    JOB_HAZARD_ANALYSIS = "job_hazard_analysis"
    SILICA_FORM = "silica_form"
    WORK_PERFORMED = "work_performed"
    PICTURES = "pictures"
    CUSTOMER_SIGNATURE = "customer_signature"
    COMPLETE_JOB = "complete_job"
    COMPLETE = "complete"  # terminal marker, not a step


@dataclass(frozen=True)
class StepDef:
    step: WorkflowStep
    label: str
    flag: str
    route: str


WORKFLOW_STEPS: tuple[StepDef, ...] = (
    StepDef(WorkflowStep.EQUIPMENT_CHECKLIST, "Equipment Checklist", "equipment_checklist_completed", "equipment-checklist"),
    StepDef(WorkflowStep.IN_ROUTE, "In Route", "in_route_completed", "confirm-route"),
    StepDef(WorkflowStep.JOB_HAZARD_ANALYSIS, "Job Hazard Analysis", "jha_completed", "job-hazard-analysis"),
    StepDef(WorkflowStep.SILICA_FORM, "Silica Exposure Form", "silica_form_completed", "silica-exposure"),
    StepDef(WorkflowStep.WORK_PERFORMED, "Work Performed", "work_performed_completed", "work-performed"),
    StepDef(WorkflowStep.PICTURES, "Submit Pictures", "pictures_submitted", "pictures"),
    StepDef(WorkflowStep.CUSTOMER_SIGNATURE, "Customer Signature", "customer_signature_received", "customer-signature"),
    StepDef(WorkflowStep.COMPLETE_JOB, "Complete Job", "job_completed", "complete-job"),
)

_BY_STEP = {d.step: d for d in WORKFLOW_STEPS}
_ORDER = [d.step for d in WORKFLOW_STEPS]

# Flags a client may set alongside a step; sms_sent is not a step flag.
PROGRESS_FLAGS: tuple[str, ...] = tuple(d.flag for d in WORKFLOW_STEPS) + ("sms_sent",)

_STEP_ALIASES = {
    "completed": WorkflowStep.COMPLETE,
    "job_complete": WorkflowStep.COMPLETE,
    "silica_exposure": WorkflowStep.SILICA_FORM,
}


def parse_step(value: str | WorkflowStep) -> WorkflowStep:
    if isinstance(value, WorkflowStep):
        return value
    if value in _STEP_ALIASES:
        return _STEP_ALIASES[value]
    try:
        return WorkflowStep(value)
    except ValueError:
        raise StepValidationError(f"Unknown workflow step: {value}") from None


def _flag(progress: Any, name: str) -> bool:
    if progress is None:
        return False
    if isinstance(progress, Mapping):
        return bool(progress.get(name))
    return bool(getattr(progress, name, False))


def is_step_done(progress: Any, step: str | WorkflowStep) -> bool:
    step = parse_step(step)
    if step is WorkflowStep.COMPLETE:
        return next_step(progress) is WorkflowStep.COMPLETE
    return _flag(progress, _BY_STEP[step].flag)


def next_step(progress: Any) -> WorkflowStep:
    """First step whose flag is not set; COMPLETE when every step is done.

    ``progress`` may be None (no row yet), an ORM row or a mapping of flags.
    """
    for d in WORKFLOW_STEPS:
        if not _flag(progress, d.flag):
            return d.step
    return WorkflowStep.COMPLETE


def landing_step(progress: Any, requested: str | WorkflowStep) -> WorkflowStep:
    """Step to show when an operator opens ``requested``.

    Only redirects forward: if the requested step is already done, the
    first unfinished step after it is returned.
    """
    requested = parse_step(requested)
    if requested is WorkflowStep.COMPLETE or not is_step_done(progress, requested):
        return requested
    for step in _ORDER[_ORDER.index(requested) + 1:]:
        if not _flag(progress, _BY_STEP[step].flag):
            return step
    return WorkflowStep.COMPLETE


def summarize(progress: Any) -> dict:
    """Per-step completion for the admin job board."""
    steps = [
        {
            "key": d.step.value,
            "label": d.label,
            "completed": _flag(progress, d.flag),
            "route": d.route,
        }
        for d in WORKFLOW_STEPS
    ]
    completed = sum(1 for s in steps if s["completed"])
    current = next_step(progress)
    return {
        "steps": steps,
        "completed_count": completed,
        "total_steps": len(steps),
        "percent_complete": round(completed / len(steps) * 100),
        "current_step": None if current is WorkflowStep.COMPLETE else current.value,
        "sms_sent": _flag(progress, "sms_sent"),
    }


# ── Reader ───────────────────────────────────────────────

async def get_progress(
    db: AsyncSession, job_id: str, identity: AuthContext | None = None
) -> WorkflowProgress | None:
    return await crud.get_workflow_progress(db, job_id)


async def load_progress(
    db: AsyncSession, job_id: str, identity: AuthContext | None = None
) -> WorkflowProgress | None:
    """Like get_progress, but a failed read is logged and treated as no progress."""
    try:
        return await get_progress(db, job_id, identity)
    except SQLAlchemyError:
        logger.exception("Failed to read workflow progress for job %s", job_id)
        await db.rollback()
        return None


async def ensure_progress(
    db: AsyncSession, job_id: str, identity: AuthContext | None = None
) -> WorkflowProgress:
    """Return the job's progress row, creating an all-false one on first use."""
    progress = await crud.get_workflow_progress(db, job_id)
    if progress:
        return progress
    try:
        return await crud.create_workflow_progress(
            db, job_id, operator_id=identity.user_id if identity else None
        )
    except IntegrityError:
        # Another request created it first
        await db.rollback()
        return await crud.get_workflow_progress(db, job_id)


# ── Writer ───────────────────────────────────────────────

async def _apply(
    db: AsyncSession,
    progress: WorkflowProgress,
    values: dict,
    expected_version: int | None,
) -> WorkflowProgress:
    stmt = update(WorkflowProgress).where(WorkflowProgress.id == progress.id)
    if expected_version is not None:
        stmt = stmt.where(WorkflowProgress.version == expected_version)
    stmt = stmt.values(
        **values, version=WorkflowProgress.version + 1, updated_at=utcnow()
    ).execution_options(synchronize_session=False)

    result = await db.execute(stmt)
    if result.rowcount == 0:
        await db.rollback()
        raise StaleProgressError(
            "Workflow progress was updated elsewhere. Reload and try again."
        )
    await db.commit()
    await db.refresh(progress)
    return progress


async def record_step(
    db: AsyncSession,
    job_id: str,
    completed_step: str | WorkflowStep | None = None,
    current_step: str | WorkflowStep | None = None,
    extra_flags: dict[str, bool] | None = None,
    *,
    identity: AuthContext | None = None,
    expected_version: int | None = None,
) -> WorkflowProgress:
    """Mark ``completed_step`` done and advance ``current_step``.

    Idempotent: flags are only ever set to true. ``current_step`` defaults
    to the sequencer's next step after applying the change.
    """
    progress = await ensure_progress(db, job_id, identity)

    values: dict[str, Any] = {}
    if completed_step is not None:
        step = parse_step(completed_step)
        if step is WorkflowStep.COMPLETE:
            raise StepValidationError("'complete' is not a submittable step")
        values[_BY_STEP[step].flag] = True

    for name, value in (extra_flags or {}).items():
        if name not in PROGRESS_FLAGS:
            raise StepValidationError(f"Unknown workflow flag: {name}")
        if value:
            values[name] = True

    snapshot = {f: _flag(progress, f) for f in PROGRESS_FLAGS}
    snapshot.update(values)
    target = parse_step(current_step) if current_step else next_step(snapshot)
    values["current_step"] = target.value

    progress = await _apply(db, progress, values, expected_version)
    logger.info(
        "Workflow job=%s step=%s current=%s by=%s",
        job_id,
        parse_step(completed_step).value if completed_step else None,
        progress.current_step,
        identity.user_id if identity else None,
    )
    return progress


async def admin_set_flags(
    db: AsyncSession,
    job_id: str,
    flags: dict[str, bool],
    current_step: str | WorkflowStep | None = None,
    identity: AuthContext | None = None,
) -> WorkflowProgress:
    """Direct edit of progress flags; unlike record_step this may reset them."""
    progress = await ensure_progress(db, job_id, identity)
    values: dict[str, Any] = {}
    for name, value in flags.items():
        if name not in PROGRESS_FLAGS:
            raise StepValidationError(f"Unknown workflow flag: {name}")
        values[name] = bool(value)

    snapshot = {f: _flag(progress, f) for f in PROGRESS_FLAGS}
    snapshot.update(values)
    target = parse_step(current_step) if current_step else next_step(snapshot)
    values["current_step"] = target.value

    progress = await _apply(db, progress, values, None)
    logger.warning(
        "Admin %s edited workflow for job %s: %s",
        identity.user_id if identity else "?", job_id, values,
    )
    return progress
