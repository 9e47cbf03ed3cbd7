"""Job status history: one row per status change, for the audit trail."""

from __future__ import annotations

from sqlalchemy import String, Float, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin


class JobStatusHistory(Base, ULIDMixin):
    __tablename__ = "job_status_history"

    job_order_id: Mapped[str] = mapped_column(String(26), ForeignKey("job_orders.id"), index=True)
    from_status: Mapped[str] = mapped_column(String(20))
    to_status: Mapped[str] = mapped_column(String(20))
    # None for system changes (status sync)
    changed_by: Mapped[str | None] = mapped_column(String(26), ForeignKey("users.id"), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    note: Mapped[str] = mapped_column(String(255), default="")
