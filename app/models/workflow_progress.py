"""Workflow progress: per-job record of which operator steps are done."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Boolean, Integer, ForeignKey, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin, utcnow


class WorkflowProgress(Base, ULIDMixin):
    __tablename__ = "workflow_progress"

    job_order_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("job_orders.id"), unique=True, index=True
    )
    operator_id: Mapped[str | None] = mapped_column(String(26), ForeignKey("users.id"), nullable=True)

    equipment_checklist_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    in_route_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    sms_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    jha_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    silica_form_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    work_performed_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    pictures_submitted: Mapped[bool] = mapped_column(Boolean, default=False)
    customer_signature_received: Mapped[bool] = mapped_column(Boolean, default=False)
    job_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    current_step: Mapped[str] = mapped_column(String(40), default="equipment_checklist")
    # Bumped on every write; compare-and-swap guard for concurrent tabs
    version: Mapped[int] = mapped_column(Integer, default=1)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class StepSubmission(Base, ULIDMixin):
    """Form payload captured when an operator submits a workflow step."""

    __tablename__ = "step_submissions"

    job_order_id: Mapped[str] = mapped_column(String(26), ForeignKey("job_orders.id"), index=True)
    step: Mapped[str] = mapped_column(String(40))
    submitted_by: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"))
    payload: Mapped[dict] = mapped_column(JSON, default=dict)
