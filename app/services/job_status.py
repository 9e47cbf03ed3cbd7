"""Job status transitions with the one-active-job-per-operator guard."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.models import JobOrder, JobStatusHistory
from app.models.base import as_utc, utcnow
from app.models.job_order import ACTIVE_STATUSES, JOB_STATUSES, TERMINAL_STATUSES
from app.services.auth import AuthContext
from app.services.errors import ActiveJobConflict, InvalidStatusTransition, NotAssignedError

logger = logging.getLogger(__name__)


def _hours_between(start: datetime | None, end: datetime | None) -> float | None:
    if not start or not end:
        return None
    return round((as_utc(end) - as_utc(start)).total_seconds() / 3600, 2)


def check_assignment(job: JobOrder, identity: AuthContext) -> None:
    """Operators may only act on jobs assigned to them; admins on any job."""
    if not identity.is_admin and job.assigned_to != identity.user_id:
        raise NotAssignedError("You can only update jobs assigned to you")


def job_owner(job: JobOrder, identity: AuthContext) -> str:
    """User whose timecard and standby a job action belongs to.

    The assigned operator, even when an admin acts on their behalf.
    """
    return job.assigned_to or identity.user_id


async def find_active_job(
    db: AsyncSession, operator_id: str, exclude_job_id: str | None = None
) -> JobOrder | None:
    jobs = await crud.list_active_jobs_for_operator(db, operator_id, exclude_job_id)
    return jobs[0] if jobs else None


async def set_status(
    db: AsyncSession,
    job: JobOrder,
    new_status: str,
    identity: AuthContext,
    latitude: float | None = None,
    longitude: float | None = None,
) -> JobOrder:
    """Move ``job`` to ``new_status``, stamping first-entry timestamps.

    Raises ActiveJobConflict when the assigned operator already has a
    different job in route or in progress. The check is a plain read
    before the write; there is no lock.
    """
    if new_status not in JOB_STATUSES:
        raise InvalidStatusTransition(
            f"Invalid status. Must be one of: {', '.join(JOB_STATUSES)}"
        )
    check_assignment(job, identity)

    if job.status in TERMINAL_STATUSES and new_status != job.status:
        raise InvalidStatusTransition(f"Job is already {job.status}")

    if new_status in ACTIVE_STATUSES and job.assigned_to:
        active = await find_active_job(db, job.assigned_to, exclude_job_id=job.id)
        if active:
            logger.info(
                "Refused %s -> %s for job %s: operator %s active on %s",
                job.status, new_status, job.job_number, job.assigned_to, active.job_number,
            )
            raise ActiveJobConflict(active)

    now = utcnow()
    updates: dict = {"status": new_status}
    if new_status == "in_route" and not job.route_started_at:
        updates.update(
            route_started_at=now,
            route_start_latitude=latitude,
            route_start_longitude=longitude,
        )
    if new_status == "in_progress" and not job.work_started_at:
        updates.update(
            work_started_at=now,
            work_start_latitude=latitude,
            work_start_longitude=longitude,
        )
    if new_status == "completed" and not job.work_completed_at:
        updates.update(
            work_completed_at=now,
            work_end_latitude=latitude,
            work_end_longitude=longitude,
        )
        started = updates.get("work_started_at") or job.work_started_at
        routed = updates.get("route_started_at") or job.route_started_at
        updates.update(
            drive_hours=_hours_between(routed, started),
            production_hours=_hours_between(started, now),
            total_hours=_hours_between(routed or started, now),
        )

    previous = job.status
    job = await crud.update_job_order(db, job, **updates)
    if previous != new_status:
        await crud.create_status_history(
            db,
            job_order_id=job.id,
            from_status=previous,
            to_status=new_status,
            changed_by=identity.user_id,
            latitude=latitude,
            longitude=longitude,
        )
    logger.info("Job %s status -> %s by %s", job.job_number, new_status, identity.user_id)
    return job


async def reassign(
    db: AsyncSession, job: JobOrder, operator_id: str | None, identity: AuthContext
) -> JobOrder:
    """Hand ``job`` to another operator, or unassign it with None.

    A job in route or in progress keeps the one-active-job rule: it cannot
    go to an operator who is already active elsewhere, nor be left without
    an operator.
    """
    if operator_id == job.assigned_to:
        return job
    if job.status in ACTIVE_STATUSES:
        if not operator_id:
            raise InvalidStatusTransition(f"Cannot unassign a job that is {job.status}")
        active = await find_active_job(db, operator_id, exclude_job_id=job.id)
        if active:
            logger.info(
                "Refused reassigning job %s to %s: active on %s",
                job.job_number, operator_id, active.job_number,
            )
            raise ActiveJobConflict(active)

    previous = job.assigned_to
    job = await crud.set_job_assignee(db, job, operator_id)
    logger.info(
        "Job %s reassigned %s -> %s by %s", job.job_number, previous, operator_id, identity.user_id
    )
    return job


def derive_status(job: JobOrder, progress=None) -> str:
    """Status implied by the job's timestamps and workflow flags."""
    if job.status == "cancelled":
        return "cancelled"
    if job.work_completed_at or (progress is not None and progress.job_completed):
        return "completed"
    if job.work_started_at:
        return "in_progress"
    if job.route_started_at:
        return "in_route"
    return "scheduled"


async def sync_job_statuses(db: AsyncSession) -> dict:
    """Reconcile every job's stored status with derive_status."""
    jobs = await crud.list_job_orders(db)
    report = {"checked": len(jobs), "updated": 0, "changes": []}
    for job in jobs:
        progress = await crud.get_workflow_progress(db, job.id)
        expected = derive_status(job, progress)
        if expected != job.status:
            report["changes"].append(
                {"job_number": job.job_number, "from": job.status, "to": expected}
            )
            db.add(JobStatusHistory(
                job_order_id=job.id, from_status=job.status, to_status=expected, note="sync",
            ))
            job.status = expected
            report["updated"] += 1
    await db.commit()
    if report["updated"]:
        logger.info("Synced %d of %d job statuses", report["updated"], report["checked"])
    return report
