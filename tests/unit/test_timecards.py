from datetime import datetime, timedelta, timezone

import pytest

from app.db import crud
from app.models.base import as_utc, utcnow
from app.services import timecards
from app.services.errors import (
    AlreadyApproved, AlreadyClockedIn, NotClockedIn, RecordNotFound, StepValidationError,
)


def test_overtime_hours():
    assert timecards.overtime_hours(7.5) == 0.0
    assert timecards.overtime_hours(10.25) == 2.25
    assert timecards.overtime_hours(None) == 0.0
    assert timecards.overtime_hours(11, threshold=10) == 1.0


async def test_clock_in_then_out(db, operator_ctx):
    entry = await timecards.clock_in(db, operator_ctx, latitude=37.7, longitude=-122.4, accuracy=12)
    assert entry.event_type == "clock_in"

    status = await timecards.current_status(db, operator_ctx)
    assert status["clocked_in"]

    out = await timecards.clock_out(db, operator_ctx)
    assert out.event_type == "clock_out"
    assert out.clock_in_entry_id == entry.id
    assert out.total_hours is not None and out.total_hours >= 0

    assert not (await timecards.current_status(db, operator_ctx))["clocked_in"]


async def test_double_clock_in_rejected(db, operator_ctx):
    await timecards.clock_in(db, operator_ctx)
    with pytest.raises(AlreadyClockedIn):
        await timecards.clock_in(db, operator_ctx)


async def test_clock_out_without_clock_in_rejected(db, operator_ctx):
    with pytest.raises(NotClockedIn):
        await timecards.clock_out(db, operator_ctx)


async def test_workflow_events_do_not_affect_clock_state(db, job, operator_ctx):
    await timecards.record_event(db, operator_ctx.user_id, "in_route", job_id=job.id)
    with pytest.raises(NotClockedIn):
        await timecards.clock_out(db, operator_ctx)


async def test_unknown_event_rejected(db, operator_ctx):
    with pytest.raises(StepValidationError):
        await timecards.record_event(db, operator_ctx.user_id, "lunch")


async def test_history_splits_overtime(db, operator_ctx):
    start = utcnow() - timedelta(hours=10)
    clock_in = await timecards.record_event(db, operator_ctx.user_id, "clock_in", occurred_at=start)
    await crud.create_timecard_entry(
        db, user_id=operator_ctx.user_id, event_type="clock_out",
        occurred_at=start + timedelta(hours=10), total_hours=10.0, clock_in_entry_id=clock_in.id,
    )

    report = await timecards.history(db, operator_ctx.user_id)
    assert len(report["entries"]) == 2
    assert report["total_hours"] == 10.0
    assert report["regular_hours"] == 8.0
    assert report["overtime_hours"] == 2.0


async def test_approval_is_one_way(db, operator_ctx, admin_ctx):
    entry = await timecards.clock_in(db, operator_ctx)

    approved = await timecards.approve(db, entry.id, admin_ctx)
    assert approved.is_approved
    assert approved.approved_by == admin_ctx.user_id
    assert approved.approved_at is not None

    with pytest.raises(AlreadyApproved):
        await timecards.approve(db, entry.id, admin_ctx)


async def test_approve_missing_entry(db, admin_ctx):
    with pytest.raises(RecordNotFound):
        await timecards.approve(db, "01NOPE", admin_ctx)


async def test_editing_clock_in_recomputes_paired_hours(db, operator_ctx):
    start = utcnow() - timedelta(hours=6)
    clock_in = await timecards.record_event(db, operator_ctx.user_id, "clock_in", occurred_at=start)
    clock_out = await crud.create_timecard_entry(
        db, user_id=operator_ctx.user_id, event_type="clock_out",
        occurred_at=start + timedelta(hours=6), total_hours=6.0, clock_in_entry_id=clock_in.id,
    )

    await timecards.update_entry(db, clock_in.id, occurred_at=start - timedelta(hours=1))
    refreshed = await crud.get_timecard_entry(db, clock_out.id)
    assert refreshed.total_hours == 7.0


async def test_offset_event_time_is_converted_to_utc(db, operator_ctx):
    pacific = timezone(timedelta(hours=-8))
    clock_in = await timecards.record_event(
        db, operator_ctx.user_id, "clock_in",
        occurred_at=datetime(2025, 3, 4, 6, 30, tzinfo=pacific),
    )
    stored = await crud.get_timecard_entry(db, clock_in.id)
    assert as_utc(stored.occurred_at) == datetime(2025, 3, 4, 14, 30, tzinfo=timezone.utc)

    clock_out = await crud.create_timecard_entry(
        db, user_id=operator_ctx.user_id, event_type="clock_out",
        occurred_at=datetime(2025, 3, 4, 22, 30, tzinfo=timezone.utc),
        total_hours=8.0, clock_in_entry_id=clock_in.id,
    )
    await timecards.update_entry(
        db, clock_out.id, occurred_at=datetime(2025, 3, 4, 15, 30, tzinfo=pacific),
    )
    refreshed = await crud.get_timecard_entry(db, clock_out.id)
    assert refreshed.total_hours == 9.0
