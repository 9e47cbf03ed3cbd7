"""Timecard entries: clock events tied to a user and optionally a job."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Float, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin, utcnow

EVENT_TYPES = ("clock_in", "in_route", "arrived", "clock_out")


class TimecardEntry(Base, ULIDMixin):
    __tablename__ = "timecard_entries"

    user_id: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"), index=True)
    job_order_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("job_orders.id"), nullable=True
    )
    event_type: Mapped[str] = mapped_column(String(20))
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    accuracy: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str] = mapped_column(String(500), default="")
    # Only set on clock_out entries, from the paired clock_in
    total_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    clock_in_entry_id: Mapped[str | None] = mapped_column(String(26), nullable=True)

    is_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    approved_by: Mapped[str | None] = mapped_column(String(26), ForeignKey("users.id"), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
