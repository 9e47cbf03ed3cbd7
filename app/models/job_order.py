"""Job order model: one dispatched unit of field work."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import String, Float, ForeignKey, Date, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin

JOB_STATUSES = ("scheduled", "in_route", "in_progress", "completed", "cancelled")
ACTIVE_STATUSES = ("in_route", "in_progress")
TERMINAL_STATUSES = ("completed", "cancelled")


class JobOrder(Base, ULIDMixin):
    __tablename__ = "job_orders"

    job_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    title: Mapped[str] = mapped_column(String(255), default="")
    customer_name: Mapped[str] = mapped_column(String(255), default="")
    location: Mapped[str] = mapped_column(String(255), default="")
    address: Mapped[str] = mapped_column(String(500), default="")
    contact_name: Mapped[str] = mapped_column(String(200), default="")
    contact_phone: Mapped[str] = mapped_column(String(50), default="")
    notes: Mapped[str] = mapped_column(Text, default="")
    assigned_to: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("users.id"), nullable=True, index=True
    )
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    arrival_time: Mapped[str] = mapped_column(String(5), default="")  # HH:MM
    status: Mapped[str] = mapped_column(String(20), default="scheduled", index=True)

    route_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    route_start_latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    route_start_longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    work_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    work_start_latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    work_start_longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    work_completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    work_end_latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    work_end_longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    drive_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    production_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
