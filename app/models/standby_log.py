"""Standby log: interval an operator is on-site but unable to work."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Float, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin, utcnow


class StandbyLog(Base, ULIDMixin):
    __tablename__ = "standby_logs"

    job_order_id: Mapped[str] = mapped_column(String(26), ForeignKey("job_orders.id"), index=True)
    operator_id: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"), index=True)
    reason: Mapped[str] = mapped_column(String(500), default="")
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active")  # active | completed
