"""In-route step: confirm departure time and notify the on-site contact.

The contact is only texted when the confirmed time is within the notify
window of the time captured when the page opened; a larger edit means the
ETA would be stale, so the step completes without a message and the
caller shows a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import JobOrder, WorkflowProgress
from app.services import job_status, timecards, workflow
from app.services.auth import AuthContext
from app.services.errors import StepValidationError
from app.services.sms import SmsNotifier, in_route_message
from app.services.standby import ensure_no_open_standby

logger = logging.getLogger(__name__)


@dataclass
class RouteConfirmation:
    job: JobOrder
    progress: WorkflowProgress
    sms_sent: bool
    notify_warning: bool
    time_difference_minutes: int
    next_step: workflow.WorkflowStep


def parse_clock_time(value: str | time) -> time:
    """Parse an ``HH:MM`` wall-clock value."""
    if isinstance(value, time):
        return value
    try:
        hours, minutes = (int(part) for part in value.strip().split(":")[:2])
        return time(hours, minutes)
    except (AttributeError, ValueError):
        raise StepValidationError(f"Invalid time '{value}', expected HH:MM") from None


def time_difference_minutes(captured: str | time, confirmed: str | time) -> int:
    a = parse_clock_time(captured)
    b = parse_clock_time(confirmed)
    return abs((b.hour * 60 + b.minute) - (a.hour * 60 + a.minute))


def should_notify(captured: str | time, confirmed: str | time, window_minutes: int = 15) -> bool:
    return time_difference_minutes(captured, confirmed) <= window_minutes


async def confirm_route(
    db: AsyncSession,
    job: JobOrder,
    identity: AuthContext,
    captured_time: str | time,
    confirmed_time: str | time,
    notifier: SmsNotifier,
    window_minutes: int = 15,
    company_name: str = "",
    latitude: float | None = None,
    longitude: float | None = None,
    check_standby: bool = True,
) -> RouteConfirmation:
    """Put the job in route, log the event, text the contact if allowed, record the step.

    Side effects run before the progress write and are not undone if
    that write fails.
    """
    diff = time_difference_minutes(captured_time, confirmed_time)
    notify = diff <= window_minutes

    if check_standby:
        await ensure_no_open_standby(db, job, identity)

    job = await job_status.set_status(
        db, job, "in_route", identity, latitude=latitude, longitude=longitude
    )
    await timecards.record_event(
        db, job_status.job_owner(job, identity), "in_route", job_id=job.id,
        latitude=latitude, longitude=longitude,
        notes=f"Departure confirmed at {parse_clock_time(confirmed_time).strftime('%H:%M')}",
    )

    sms_sent = False
    if notify and job.contact_phone:
        result = await notifier.send(
            job.contact_phone,
            in_route_message(
                job.contact_name,
                identity.display_name or company_name,
                job.title,
                company_name,
            ),
        )
        sms_sent = result.success
        if not result.success:
            logger.warning("In-route SMS for job %s failed: %s", job.job_number, result.error)
    elif not notify:
        logger.info(
            "Departure time for job %s edited by %d min; contact not notified",
            job.job_number, diff,
        )

    progress = await workflow.record_step(
        db, job.id, workflow.WorkflowStep.IN_ROUTE,
        extra_flags={"sms_sent": sms_sent},
        identity=identity,
    )
    return RouteConfirmation(
        job=job,
        progress=progress,
        sms_sent=sms_sent,
        notify_warning=not notify,
        time_difference_minutes=diff,
        next_step=workflow.next_step(progress),
    )
