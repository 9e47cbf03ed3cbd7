import pytest
from sqlalchemy.exc import OperationalError

from app.services import workflow
from app.services.errors import StaleProgressError, StepValidationError
from app.services.workflow import WorkflowStep


async def test_progress_created_on_first_use(db, job, operator_ctx):
    assert await workflow.get_progress(db, job.id, operator_ctx) is None

    progress = await workflow.ensure_progress(db, job.id, operator_ctx)
    assert progress.current_step == "equipment_checklist"
    assert progress.version == 1
    assert not progress.equipment_checklist_completed
    assert progress.operator_id == operator_ctx.user_id

    again = await workflow.ensure_progress(db, job.id, operator_ctx)
    assert again.id == progress.id


async def test_record_step_advances_current_step(db, job, operator_ctx):
    progress = await workflow.record_step(
        db, job.id, WorkflowStep.EQUIPMENT_CHECKLIST, identity=operator_ctx
    )
    assert progress.equipment_checklist_completed
    assert progress.current_step == "in_route"
    assert workflow.next_step(progress) is WorkflowStep.IN_ROUTE


async def test_record_step_is_idempotent(db, job, operator_ctx):
    first = await workflow.record_step(db, job.id, "equipment_checklist", identity=operator_ctx)
    flags = {f: getattr(first, f) for f in workflow.PROGRESS_FLAGS}
    current = first.current_step

    second = await workflow.record_step(db, job.id, "equipment_checklist", identity=operator_ctx)
    assert {f: getattr(second, f) for f in workflow.PROGRESS_FLAGS} == flags
    assert second.current_step == current


async def test_flags_are_never_reset_by_record_step(db, job, operator_ctx):
    await workflow.record_step(
        db, job.id, "in_route", extra_flags={"sms_sent": True}, identity=operator_ctx
    )
    progress = await workflow.record_step(
        db, job.id, "job_hazard_analysis", extra_flags={"sms_sent": False}, identity=operator_ctx
    )
    assert progress.sms_sent
    assert progress.in_route_completed


async def test_explicit_current_step_is_kept(db, job, operator_ctx):
    progress = await workflow.record_step(
        db, job.id, "equipment_checklist", current_step="silica_form", identity=operator_ctx
    )
    assert progress.current_step == "silica_form"


async def test_unknown_flag_rejected(db, job, operator_ctx):
    with pytest.raises(StepValidationError):
        await workflow.record_step(
            db, job.id, "in_route", extra_flags={"coffee": True}, identity=operator_ctx
        )


async def test_terminal_marker_is_not_submittable(db, job, operator_ctx):
    with pytest.raises(StepValidationError):
        await workflow.record_step(db, job.id, "complete", identity=operator_ctx)


async def test_stale_version_is_rejected(db, job, operator_ctx):
    progress = await workflow.ensure_progress(db, job.id, operator_ctx)
    seen = progress.version

    await workflow.record_step(
        db, job.id, "equipment_checklist", identity=operator_ctx, expected_version=seen
    )
    with pytest.raises(StaleProgressError):
        await workflow.record_step(
            db, job.id, "in_route", identity=operator_ctx, expected_version=seen
        )

    progress = await workflow.get_progress(db, job.id)
    assert not progress.in_route_completed
    assert progress.version == seen + 1


async def test_admin_can_reset_flags(db, job, admin_ctx, operator_ctx):
    await workflow.record_step(db, job.id, "equipment_checklist", identity=operator_ctx)
    await workflow.record_step(db, job.id, "in_route", identity=operator_ctx)

    progress = await workflow.admin_set_flags(
        db, job.id, {"in_route_completed": False}, identity=admin_ctx
    )
    assert progress.equipment_checklist_completed
    assert not progress.in_route_completed
    assert progress.current_step == "in_route"


async def test_load_progress_swallows_database_errors(db, job, monkeypatch):
    async def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(workflow.crud, "get_workflow_progress", broken)
    assert await workflow.load_progress(db, job.id) is None
