from datetime import timedelta

import pytest

from app.db import crud
from app.models.base import utcnow
from app.services import job_status, workflow
from app.services.errors import ActiveJobConflict, InvalidStatusTransition, NotAssignedError


async def test_first_route_start_stamps_timestamp_and_gps(db, job, operator_ctx):
    job = await job_status.set_status(db, job, "in_route", operator_ctx, latitude=37.8, longitude=-122.3)
    assert job.status == "in_route"
    assert job.route_started_at is not None
    assert job.route_start_latitude == 37.8

    first = job.route_started_at
    job = await job_status.set_status(db, job, "in_route", operator_ctx, latitude=1.0, longitude=1.0)
    assert job.route_started_at == first
    assert job.route_start_latitude == 37.8


async def test_second_active_job_for_same_operator_conflicts(db, job, job_factory, operator, operator_ctx):
    await job_status.set_status(db, job, "in_route", operator_ctx)
    second = await job_factory("J-1002", operator.id)

    with pytest.raises(ActiveJobConflict) as exc:
        await job_status.set_status(db, second, "in_route", operator_ctx)

    payload = exc.value.payload()
    assert payload["activeJob"]["job_number"] == "J-1001"
    assert payload["activeJob"]["status"] == "in_route"
    assert payload["activeJob"]["location"] == "Pier 9 Warehouse"

    second = await crud.get_job_order(db, second.id)
    assert second.status == "scheduled"


async def test_other_operator_is_not_blocked(db, job, job_factory, operator_ctx, other_operator, other_ctx):
    await job_status.set_status(db, job, "in_progress", operator_ctx)
    theirs = await job_factory("J-1003", other_operator.id)

    theirs = await job_status.set_status(db, theirs, "in_route", other_ctx)
    assert theirs.status == "in_route"


async def test_same_job_can_move_between_active_statuses(db, job, operator_ctx):
    await job_status.set_status(db, job, "in_route", operator_ctx)
    job = await job_status.set_status(db, job, "in_progress", operator_ctx)
    assert job.status == "in_progress"
    assert job.work_started_at is not None


async def test_operator_cannot_move_someone_elses_job(db, job, other_ctx):
    with pytest.raises(NotAssignedError):
        await job_status.set_status(db, job, "in_route", other_ctx)


async def test_unknown_status_rejected(db, job, operator_ctx):
    with pytest.raises(InvalidStatusTransition):
        await job_status.set_status(db, job, "on_break", operator_ctx)


async def test_terminal_status_cannot_be_left(db, job, operator_ctx, admin_ctx):
    await job_status.set_status(db, job, "completed", operator_ctx)
    with pytest.raises(InvalidStatusTransition):
        await job_status.set_status(db, job, "in_route", admin_ctx)


async def test_completion_computes_hours(db, job, operator_ctx):
    now = utcnow()
    await crud.update_job_order(
        db, job,
        status="in_progress",
        route_started_at=now - timedelta(hours=5),
        work_started_at=now - timedelta(hours=4),
    )
    job = await job_status.set_status(db, job, "completed", operator_ctx)

    assert job.drive_hours == pytest.approx(1.0, abs=0.01)
    assert job.production_hours == pytest.approx(4.0, abs=0.01)
    assert job.total_hours == pytest.approx(5.0, abs=0.01)


def test_derive_status():
    class J:
        status = "scheduled"
        route_started_at = None
        work_started_at = None
        work_completed_at = None

    job = J()
    assert job_status.derive_status(job) == "scheduled"
    job.route_started_at = utcnow()
    assert job_status.derive_status(job) == "in_route"
    job.work_started_at = utcnow()
    assert job_status.derive_status(job) == "in_progress"
    job.status = "cancelled"
    assert job_status.derive_status(job) == "cancelled"


async def test_sync_job_statuses_repairs_drift(db, job, job_factory, operator, operator_ctx):
    await crud.update_job_order(db, job, route_started_at=utcnow())
    done = await job_factory("J-1004", operator.id)
    await workflow.admin_set_flags(db, done.id, {"job_completed": True})

    report = await job_status.sync_job_statuses(db)

    assert report["checked"] == 2
    assert report["updated"] == 2
    assert (await crud.get_job_order(db, job.id)).status == "in_route"
    assert (await crud.get_job_order(db, done.id)).status == "completed"


async def test_status_changes_are_written_to_history(db, job, operator_ctx):
    await job_status.set_status(db, job, "in_route", operator_ctx, latitude=37.8, longitude=-122.3)
    await job_status.set_status(db, job, "in_route", operator_ctx)
    await job_status.set_status(db, job, "in_progress", operator_ctx)

    rows = await crud.list_status_history(db, job.id)
    assert [(r.from_status, r.to_status) for r in rows] == [
        ("in_route", "in_progress"),
        ("scheduled", "in_route"),
    ]
    assert rows[1].changed_by == operator_ctx.user_id
    assert rows[1].latitude == 37.8


async def test_refused_transition_leaves_no_history(db, job, job_factory, operator, operator_ctx):
    await job_status.set_status(db, job, "in_route", operator_ctx)
    second = await job_factory("J-1002", operator.id)
    with pytest.raises(ActiveJobConflict):
        await job_status.set_status(db, second, "in_route", operator_ctx)
    assert await crud.list_status_history(db, second.id) == []


async def test_sync_records_history_without_user(db, job):
    await crud.update_job_order(db, job, route_started_at=utcnow())
    await job_status.sync_job_statuses(db)

    rows = await crud.list_status_history(db, job.id)
    assert len(rows) == 1
    assert rows[0].to_status == "in_route"
    assert rows[0].changed_by is None
    assert rows[0].note == "sync"


async def test_reassign_active_job_to_busy_operator_conflicts(
    db, job, job_factory, operator_ctx, other_operator, other_ctx, admin_ctx,
):
    await job_status.set_status(db, job, "in_progress", operator_ctx)
    theirs = await job_factory("J-1005", other_operator.id)
    await job_status.set_status(db, theirs, "in_route", other_ctx)

    with pytest.raises(ActiveJobConflict) as exc:
        await job_status.reassign(db, theirs, operator_ctx.user_id, admin_ctx)
    assert exc.value.payload()["activeJob"]["job_number"] == "J-1001"

    assert (await crud.get_job_order(db, theirs.id)).assigned_to == other_operator.id
    active = await crud.list_active_jobs_for_operator(db, operator_ctx.user_id)
    assert [j.job_number for j in active] == ["J-1001"]


async def test_reassign_scheduled_job_to_busy_operator_is_allowed(
    db, job, job_factory, operator_ctx, other_operator, admin_ctx,
):
    await job_status.set_status(db, job, "in_progress", operator_ctx)
    later = await job_factory("J-1006", other_operator.id)

    later = await job_status.reassign(db, later, operator_ctx.user_id, admin_ctx)
    assert later.assigned_to == operator_ctx.user_id


async def test_reassign_none_unassigns(db, job, admin_ctx):
    job = await job_status.reassign(db, job, None, admin_ctx)
    assert job.assigned_to is None
    assert (await crud.get_job_order(db, job.id)).assigned_to is None


async def test_active_job_cannot_be_unassigned(db, job, operator_ctx, admin_ctx):
    await job_status.set_status(db, job, "in_route", operator_ctx)
    with pytest.raises(InvalidStatusTransition):
        await job_status.reassign(db, job, None, admin_ctx)
