import pytest

from app.services.errors import StepValidationError
from app.services.workflow import (
    WORKFLOW_STEPS, WorkflowStep, is_step_done, landing_step, next_step, parse_step, summarize,
)

ALL_FLAGS = [d.flag for d in WORKFLOW_STEPS]


def _flags(*done):
    return {f: (f in done) for f in ALL_FLAGS}


def test_no_progress_starts_at_equipment_checklist():
    assert next_step(None) is WorkflowStep.EQUIPMENT_CHECKLIST
    assert next_step({}) is WorkflowStep.EQUIPMENT_CHECKLIST


def test_next_step_after_checklist_is_in_route():
    assert next_step(_flags("equipment_checklist_completed")) is WorkflowStep.IN_ROUTE


def test_next_step_is_first_unfinished_not_last_finished():
    # Signature done out of order; silica still outstanding
    progress = _flags(
        "equipment_checklist_completed", "in_route_completed", "jha_completed",
        "customer_signature_received",
    )
    assert next_step(progress) is WorkflowStep.SILICA_FORM


def test_all_flags_set_is_complete():
    assert next_step(_flags(*ALL_FLAGS)) is WorkflowStep.COMPLETE


def test_sms_sent_alone_does_not_complete_in_route():
    progress = _flags("equipment_checklist_completed")
    progress["sms_sent"] = True
    assert next_step(progress) is WorkflowStep.IN_ROUTE


def test_canonical_order():
    assert [d.step.value for d in WORKFLOW_STEPS] == [
        "equipment_checklist", "in_route", "job_hazard_analysis", "silica_form",
        "work_performed", "pictures", "customer_signature", "complete_job",
    ]


def test_landing_on_unfinished_step_stays():
    progress = _flags("equipment_checklist_completed")
    assert landing_step(progress, "silica_form") is WorkflowStep.SILICA_FORM


def test_landing_on_finished_step_redirects_forward():
    progress = _flags("equipment_checklist_completed", "in_route_completed")
    assert landing_step(progress, "equipment_checklist") is WorkflowStep.JOB_HAZARD_ANALYSIS


def test_landing_never_redirects_backwards():
    # Checklist is not done, but the operator opened a later finished step
    progress = _flags("silica_form_completed")
    assert landing_step(progress, "silica_form") is WorkflowStep.WORK_PERFORMED


def test_landing_when_everything_is_done():
    assert landing_step(_flags(*ALL_FLAGS), "pictures") is WorkflowStep.COMPLETE


def test_parse_step_aliases():
    assert parse_step("completed") is WorkflowStep.COMPLETE
    assert parse_step("silica_exposure") is WorkflowStep.SILICA_FORM
    with pytest.raises(StepValidationError):
        parse_step("coffee_break")


def test_is_step_done_reads_orm_like_objects():
    class Row:
        equipment_checklist_completed = True

    assert is_step_done(Row(), WorkflowStep.EQUIPMENT_CHECKLIST)
    assert not is_step_done(Row(), WorkflowStep.IN_ROUTE)


def test_summarize_counts_and_current_step():
    summary = summarize(_flags("equipment_checklist_completed", "in_route_completed"))
    assert summary["completed_count"] == 2
    assert summary["total_steps"] == 8
    assert summary["percent_complete"] == 25
    assert summary["current_step"] == "job_hazard_analysis"
    assert summarize(_flags(*ALL_FLAGS))["current_step"] is None
