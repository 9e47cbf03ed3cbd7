"""Standby tracking: open/close idle intervals and compute the charge."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import StandbyConfig
from app.db import crud
from app.models import JobOrder, StandbyLog
from app.models.base import as_utc, utcnow
from app.services.auth import AuthContext
from app.services.job_status import job_owner
from app.services.errors import (
    OpenStandbyExists, RecordNotFound, StandbyActiveError, StepValidationError,
)
from app.services.sms import SmsNotifier, standby_message

logger = logging.getLogger(__name__)


def standby_charge(hours: float, hourly_rate: float = 189.00, minimum_hours: float = 1.0) -> float:
    """Billable amount: at least ``minimum_hours`` at ``hourly_rate``, rounded to cents."""
    billable = max(hours, minimum_hours)
    return round(billable * hourly_rate, 2)


async def get_open_standby(db: AsyncSession, operator_id: str, job_id: str) -> StandbyLog | None:
    return await crud.get_open_standby_log(db, operator_id, job_id)


async def start_standby(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    reason: str,
    started_at: datetime | None = None,
    notifier: SmsNotifier | None = None,
    config: StandbyConfig | None = None,
    company_name: str = "",
) -> StandbyLog:
    if not reason or not reason.strip():
        raise StepValidationError("A standby reason is required")

    operator_id = job_owner(job, identity)
    existing = await get_open_standby(db, operator_id, job.id)
    if existing:
        raise OpenStandbyExists("A standby log is already open for this job")

    log = await crud.create_standby_log(
        db,
        job_order_id=job.id,
        operator_id=operator_id,
        reason=reason.strip(),
        started_at=as_utc(started_at) if started_at else utcnow(),
        status="active",
    )
    logger.info("Standby started on job %s by %s: %s", job.job_number, identity.user_id, log.reason)

    if notifier and job.contact_phone:
        config = config or StandbyConfig()
        result = await notifier.send(
            job.contact_phone,
            standby_message(
                identity.display_name or "Your operator",
                log.reason,
                config.hourly_rate,
                job.job_number,
                company_name,
            ),
        )
        if not result.success:
            logger.warning("Standby notice for job %s not delivered: %s", job.job_number, result.error)
    return log


async def stop_standby(
    db: AsyncSession,
    log_id: str,
    identity: AuthContext,
    ended_at: datetime | None = None,
) -> StandbyLog:
    log = await crud.get_standby_log(db, log_id)
    if not log or (log.operator_id != identity.user_id and not identity.is_admin):
        raise RecordNotFound("Standby log not found")
    if log.ended_at is not None:
        return log

    end = as_utc(ended_at or utcnow())
    start = as_utc(log.started_at)
    if end < start:
        raise StepValidationError("Standby cannot end before it started")

    duration = (end - start).total_seconds() / 3600
    log = await crud.update_standby_log(
        db, log, ended_at=end, duration_hours=round(duration, 4), status="completed",
    )
    logger.info("Standby %s closed after %.2fh", log.id, duration)
    return log


async def ensure_no_open_standby(db: AsyncSession, job: JobOrder, identity: AuthContext) -> None:
    """Workflow steps are blocked while the assigned operator has standby open on the job."""
    log = await get_open_standby(db, job_owner(job, identity), job.id)
    if log:
        raise StandbyActiveError(
            "Standby is in progress for this job. Stop standby before continuing."
        )
