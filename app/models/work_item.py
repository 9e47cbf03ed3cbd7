"""Work-performed line items recorded against a job."""

from __future__ import annotations

from sqlalchemy import String, Float, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin

CORE_WORK_TYPES = ("core_drilling",)
SAW_WORK_TYPES = ("slab_sawing", "wall_sawing", "wire_sawing", "hand_sawing", "chain_sawing")
WORK_TYPES = CORE_WORK_TYPES + SAW_WORK_TYPES + ("demolition", "other")


class WorkItem(Base, ULIDMixin):
    __tablename__ = "work_items"

    job_order_id: Mapped[str] = mapped_column(String(26), ForeignKey("job_orders.id"), index=True)
    work_type: Mapped[str] = mapped_column(String(30))
    linear_feet_cut: Mapped[float | None] = mapped_column(Float, nullable=True)
    cut_depth_inches: Mapped[float | None] = mapped_column(Float, nullable=True)
    core_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    core_size: Mapped[str] = mapped_column(String(20), default="")
    core_depth_inches: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str] = mapped_column(String(500), default="")
