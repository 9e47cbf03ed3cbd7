from datetime import datetime, timedelta, timezone

import pytest

from app.config import StandbyConfig
from app.db import crud
from app.models.base import as_utc, utcnow
from app.services import standby
from app.services.errors import (
    OpenStandbyExists, RecordNotFound, StandbyActiveError, StepValidationError,
)


def test_standby_charge_minimum_one_hour():
    assert standby.standby_charge(0.25) == 189.00
    assert standby.standby_charge(1.0) == 189.00
    assert standby.standby_charge(2.5) == 472.50
    assert standby.standby_charge(1.3333) == 251.99
    assert standby.standby_charge(0.5, hourly_rate=200, minimum_hours=2) == 400.00


async def test_start_and_stop(db, job, operator_ctx):
    started = utcnow() - timedelta(minutes=90)
    log = await standby.start_standby(db, job, operator_ctx, "  Waiting on pump truck ", started_at=started)
    assert log.status == "active"
    assert log.reason == "Waiting on pump truck"

    log = await standby.stop_standby(db, log.id, operator_ctx)
    assert log.status == "completed"
    assert log.ended_at is not None
    assert log.duration_hours == pytest.approx(1.5, abs=0.01)


async def test_stop_is_idempotent(db, job, operator_ctx):
    log = await standby.start_standby(db, job, operator_ctx, "Rain")
    first = await standby.stop_standby(db, log.id, operator_ctx)
    again = await standby.stop_standby(db, log.id, operator_ctx)
    assert again.ended_at == first.ended_at


async def test_reason_required(db, job, operator_ctx):
    with pytest.raises(StepValidationError):
        await standby.start_standby(db, job, operator_ctx, "   ")


async def test_one_open_log_per_operator_and_job(db, job, operator_ctx):
    await standby.start_standby(db, job, operator_ctx, "Access blocked")
    with pytest.raises(OpenStandbyExists):
        await standby.start_standby(db, job, operator_ctx, "Still blocked")


async def test_end_before_start_rejected(db, job, operator_ctx):
    log = await standby.start_standby(db, job, operator_ctx, "Access blocked")
    with pytest.raises(StepValidationError):
        await standby.stop_standby(db, log.id, operator_ctx, ended_at=utcnow() - timedelta(hours=1))


async def test_other_operator_cannot_stop(db, job, operator_ctx, other_ctx, admin_ctx):
    log = await standby.start_standby(db, job, operator_ctx, "Access blocked")
    with pytest.raises(RecordNotFound):
        await standby.stop_standby(db, log.id, other_ctx)
    closed = await standby.stop_standby(db, log.id, admin_ctx)
    assert closed.status == "completed"


async def test_notice_sent_to_contact(db, job, operator_ctx, notifier):
    await standby.start_standby(
        db, job, operator_ctx, "Slab not poured",
        notifier=notifier, config=StandbyConfig(hourly_rate=189.0), company_name="Pontifex",
    )
    assert len(notifier.sent) == 1
    _, message = notifier.sent[0]
    assert "$189.00/hour" in message
    assert "J-1001" in message
    assert "Slab not poured" in message


async def test_ensure_no_open_standby(db, job, operator_ctx):
    await standby.ensure_no_open_standby(db, job, operator_ctx)
    log = await standby.start_standby(db, job, operator_ctx, "Rain")
    with pytest.raises(StandbyActiveError):
        await standby.ensure_no_open_standby(db, job, operator_ctx)
    await standby.stop_standby(db, log.id, operator_ctx)
    await standby.ensure_no_open_standby(db, job, operator_ctx)


async def test_offset_timestamps_are_stored_as_utc(db, job, operator_ctx):
    plus_five = timezone(timedelta(hours=5))
    log = await standby.start_standby(
        db, job, operator_ctx, "Crane on the slab",
        started_at=datetime(2025, 3, 4, 10, 0, tzinfo=plus_five),
    )
    closed = await standby.stop_standby(
        db, log.id, operator_ctx, ended_at=datetime(2025, 3, 4, 11, 0, tzinfo=plus_five),
    )
    assert closed.duration_hours == 1.0

    stored = await crud.get_standby_log(db, log.id)
    assert as_utc(stored.started_at) == datetime(2025, 3, 4, 5, 0, tzinfo=timezone.utc)


async def test_admin_started_standby_belongs_to_operator(db, job, operator, admin_ctx, operator_ctx):
    log = await standby.start_standby(db, job, admin_ctx, "GC called a hold")
    assert log.operator_id == operator.id
    with pytest.raises(StandbyActiveError):
        await standby.ensure_no_open_standby(db, job, operator_ctx)


async def test_gate_applies_to_admin_while_operator_on_standby(db, job, operator_ctx, admin_ctx):
    await standby.start_standby(db, job, operator_ctx, "Rain")
    with pytest.raises(StandbyActiveError):
        await standby.ensure_no_open_standby(db, job, admin_ctx)
