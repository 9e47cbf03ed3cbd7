from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class WorkflowProgressRead(BaseModel):
    id: str
    job_order_id: str
    equipment_checklist_completed: bool
    in_route_completed: bool
    sms_sent: bool
    jha_completed: bool
    silica_form_completed: bool
    work_performed_completed: bool
    pictures_submitted: bool
    customer_signature_received: bool
    job_completed: bool
    current_step: str
    version: int
    updated_at: datetime

    model_config = {"from_attributes": True}


class WorkflowUpdate(BaseModel):
    """Body of POST /api/workflow. Accepts the camelCase keys the field app sends."""

    job_id: str = Field(alias="jobId")
    completed_step: str | None = Field(None, alias="completedStep")
    current_step: str | None = Field(None, alias="currentStep")
    sms_sent: bool | None = Field(None, alias="smsSent")
    expected_version: int | None = Field(None, alias="expectedVersion")

    model_config = {"populate_by_name": True}


class AdminWorkflowUpdate(BaseModel):
    flags: dict[str, bool] = {}
    current_step: str | None = None


class StepResult(BaseModel):
    progress: WorkflowProgressRead
    next_step: str
    details: dict = {}
