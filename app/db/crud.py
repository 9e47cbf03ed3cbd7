"""CRUD operations for the field operations models."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import (
    User, JobOrder, JobStatusHistory, WorkflowProgress, StepSubmission, WorkItem,
    TimecardEntry, StandbyLog, InventoryItem, InventoryTransaction,
)
from app.models.base import as_utc
from app.models.job_order import ACTIVE_STATUSES


# ── Users ─────────────────────────────────────────────────

async def create_user(
    db: AsyncSession, email: str, password_hash: str,
    role: str = "operator", display_name: str = "", phone: str = "",
) -> User:
    user = User(
        email=email.strip().lower(), password_hash=password_hash, role=role,
        display_name=display_name, phone=phone,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


async def list_operators(db: AsyncSession, active_only: bool = True) -> list[User]:
    stmt = select(User).where(User.role == "operator")
    if active_only:
        stmt = stmt.where(User.is_active == True)
    result = await db.execute(stmt.order_by(User.display_name))
    return list(result.scalars().all())


# ── JobOrder ──────────────────────────────────────────────

async def create_job_order(db: AsyncSession, **fields) -> JobOrder:
    job = JobOrder(**fields)
    db.add(job)
    await db.commit()
    await db.refresh(job)
    return job


async def get_job_order(db: AsyncSession, job_id: str) -> JobOrder | None:
    return await db.get(JobOrder, job_id)


async def get_job_order_by_number(db: AsyncSession, job_number: str) -> JobOrder | None:
    result = await db.execute(select(JobOrder).where(JobOrder.job_number == job_number))
    return result.scalars().first()


async def list_job_orders(
    db: AsyncSession,
    status: str | None = None,
    assigned_to: str | None = None,
    scheduled_date: date | None = None,
) -> list[JobOrder]:
    stmt = select(JobOrder)
    if status:
        stmt = stmt.where(JobOrder.status == status)
    if assigned_to:
        stmt = stmt.where(JobOrder.assigned_to == assigned_to)
    if scheduled_date:
        stmt = stmt.where(JobOrder.scheduled_date == scheduled_date)
    result = await db.execute(stmt.order_by(JobOrder.scheduled_date.desc(), JobOrder.job_number))
    return list(result.scalars().all())


async def list_active_jobs_for_operator(
    db: AsyncSession, operator_id: str, exclude_job_id: str | None = None
) -> list[JobOrder]:
    stmt = select(JobOrder).where(
        JobOrder.assigned_to == operator_id,
        JobOrder.status.in_(ACTIVE_STATUSES),
    )
    if exclude_job_id:
        stmt = stmt.where(JobOrder.id != exclude_job_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_job_order(db: AsyncSession, job: JobOrder, **kwargs) -> JobOrder:
    for k, v in kwargs.items():
        if v is not None:
            setattr(job, k, v)
    await db.commit()
    await db.refresh(job)
    return job


async def set_job_assignee(db: AsyncSession, job: JobOrder, operator_id: str | None) -> JobOrder:
    """Unlike update_job_order, None here means unassign."""
    job.assigned_to = operator_id
    await db.commit()
    await db.refresh(job)
    return job


# ── JobStatusHistory ─────────────────────────────────────

async def create_status_history(db: AsyncSession, **fields) -> JobStatusHistory:
    row = JobStatusHistory(**fields)
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


async def list_status_history(db: AsyncSession, job_id: str) -> list[JobStatusHistory]:
    result = await db.execute(
        select(JobStatusHistory)
        .where(JobStatusHistory.job_order_id == job_id)
        .order_by(JobStatusHistory.created_at.desc())
    )
    return list(result.scalars().all())


# ── WorkflowProgress ─────────────────────────────────────

async def get_workflow_progress(db: AsyncSession, job_id: str) -> WorkflowProgress | None:
    result = await db.execute(
        select(WorkflowProgress).where(WorkflowProgress.job_order_id == job_id)
    )
    return result.scalars().first()


async def create_workflow_progress(
    db: AsyncSession, job_id: str, operator_id: str | None = None
) -> WorkflowProgress:
    progress = WorkflowProgress(job_order_id=job_id, operator_id=operator_id)
    db.add(progress)
    await db.commit()
    await db.refresh(progress)
    return progress


# ── StepSubmission ───────────────────────────────────────

async def create_step_submission(
    db: AsyncSession, job_id: str, step: str, submitted_by: str, payload: dict
) -> StepSubmission:
    sub = StepSubmission(job_order_id=job_id, step=step, submitted_by=submitted_by, payload=payload)
    db.add(sub)
    await db.commit()
    await db.refresh(sub)
    return sub


async def list_step_submissions(
    db: AsyncSession, job_id: str, step: str | None = None
) -> list[StepSubmission]:
    stmt = select(StepSubmission).where(StepSubmission.job_order_id == job_id)
    if step:
        stmt = stmt.where(StepSubmission.step == step)
    result = await db.execute(stmt.order_by(StepSubmission.created_at))
    return list(result.scalars().all())


# ── WorkItem ─────────────────────────────────────────────

async def replace_work_items(db: AsyncSession, job_id: str, items: list[dict]) -> list[WorkItem]:
    """Drop the job's existing work items and insert the given ones."""
    await db.execute(delete(WorkItem).where(WorkItem.job_order_id == job_id))
    rows = [WorkItem(job_order_id=job_id, **item) for item in items]
    db.add_all(rows)
    await db.commit()
    for row in rows:
        await db.refresh(row)
    return rows


async def list_work_items(db: AsyncSession, job_id: str) -> list[WorkItem]:
    result = await db.execute(
        select(WorkItem).where(WorkItem.job_order_id == job_id).order_by(WorkItem.created_at)
    )
    return list(result.scalars().all())


# ── TimecardEntry ────────────────────────────────────────

async def create_timecard_entry(db: AsyncSession, **fields) -> TimecardEntry:
    entry = TimecardEntry(**fields)
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


async def get_timecard_entry(db: AsyncSession, entry_id: str) -> TimecardEntry | None:
    return await db.get(TimecardEntry, entry_id)


async def get_last_clock_event(db: AsyncSession, user_id: str) -> TimecardEntry | None:
    """Most recent clock_in or clock_out for the user."""
    result = await db.execute(
        select(TimecardEntry)
        .where(
            TimecardEntry.user_id == user_id,
            TimecardEntry.event_type.in_(("clock_in", "clock_out")),
        )
        .order_by(TimecardEntry.occurred_at.desc(), TimecardEntry.id.desc())
        .limit(1)
    )
    return result.scalars().first()


async def get_clock_out_for(db: AsyncSession, clock_in_id: str) -> TimecardEntry | None:
    result = await db.execute(
        select(TimecardEntry).where(
            TimecardEntry.event_type == "clock_out",
            TimecardEntry.clock_in_entry_id == clock_in_id,
        )
    )
    return result.scalars().first()


async def list_timecard_entries(
    db: AsyncSession,
    user_id: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    approved: bool | None = None,
) -> list[TimecardEntry]:
    stmt = select(TimecardEntry)
    if user_id:
        stmt = stmt.where(TimecardEntry.user_id == user_id)
    if since:
        stmt = stmt.where(TimecardEntry.occurred_at >= as_utc(since))
    if until:
        stmt = stmt.where(TimecardEntry.occurred_at < as_utc(until))
    if approved is not None:
        stmt = stmt.where(TimecardEntry.is_approved == approved)
    result = await db.execute(stmt.order_by(TimecardEntry.occurred_at.desc()))
    return list(result.scalars().all())


async def update_timecard_entry(db: AsyncSession, entry: TimecardEntry, **kwargs) -> TimecardEntry:
    for k, v in kwargs.items():
        if v is not None:
            setattr(entry, k, v)
    await db.commit()
    await db.refresh(entry)
    return entry


# ── StandbyLog ───────────────────────────────────────────

async def create_standby_log(db: AsyncSession, **fields) -> StandbyLog:
    log = StandbyLog(**fields)
    db.add(log)
    await db.commit()
    await db.refresh(log)
    return log


async def get_standby_log(db: AsyncSession, log_id: str) -> StandbyLog | None:
    return await db.get(StandbyLog, log_id)


async def get_open_standby_log(db: AsyncSession, operator_id: str, job_id: str) -> StandbyLog | None:
    result = await db.execute(
        select(StandbyLog).where(
            StandbyLog.operator_id == operator_id,
            StandbyLog.job_order_id == job_id,
            StandbyLog.ended_at.is_(None),
        )
    )
    return result.scalars().first()


async def list_standby_logs(
    db: AsyncSession, job_id: str | None = None, operator_id: str | None = None
) -> list[StandbyLog]:
    stmt = select(StandbyLog)
    if job_id:
        stmt = stmt.where(StandbyLog.job_order_id == job_id)
    if operator_id:
        stmt = stmt.where(StandbyLog.operator_id == operator_id)
    result = await db.execute(stmt.order_by(StandbyLog.started_at.desc()))
    return list(result.scalars().all())


async def update_standby_log(db: AsyncSession, log: StandbyLog, **kwargs) -> StandbyLog:
    for k, v in kwargs.items():
        if v is not None:
            setattr(log, k, v)
    await db.commit()
    await db.refresh(log)
    return log


# ── Inventory ────────────────────────────────────────────

async def create_inventory_item(db: AsyncSession, **fields) -> InventoryItem:
    item = InventoryItem(**fields)
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def get_inventory_item(db: AsyncSession, item_id: str) -> InventoryItem | None:
    return await db.get(InventoryItem, item_id)


async def list_inventory_items(db: AsyncSession, category: str | None = None) -> list[InventoryItem]:
    stmt = select(InventoryItem)
    if category:
        stmt = stmt.where(InventoryItem.category == category)
    result = await db.execute(stmt.order_by(InventoryItem.category, InventoryItem.name))
    return list(result.scalars().all())


async def create_inventory_transaction(db: AsyncSession, **fields) -> InventoryTransaction:
    """Stage a stock movement; the caller commits it together with the item change."""
    txn = InventoryTransaction(**fields)
    db.add(txn)
    return txn


async def list_inventory_transactions(
    db: AsyncSession, item_id: str | None = None
) -> list[InventoryTransaction]:
    stmt = select(InventoryTransaction)
    if item_id:
        stmt = stmt.where(InventoryTransaction.item_id == item_id)
    result = await db.execute(stmt.order_by(InventoryTransaction.created_at.desc()))
    return list(result.scalars().all())
