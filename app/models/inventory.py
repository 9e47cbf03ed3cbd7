"""Inventory items (blades, bits, tools) and their stock movements."""

from __future__ import annotations

from sqlalchemy import String, Float, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin


class InventoryItem(Base, ULIDMixin):
    __tablename__ = "inventory_items"

    name: Mapped[str] = mapped_column(String(200))
    category: Mapped[str] = mapped_column(String(50), default="")  # blade | bit | tool | consumable
    manufacturer: Mapped[str] = mapped_column(String(200), default="")
    model: Mapped[str] = mapped_column(String(200), default="")
    size: Mapped[str] = mapped_column(String(50), default="")
    quantity_in_stock: Mapped[int] = mapped_column(Integer, default=0)
    quantity_assigned: Mapped[int] = mapped_column(Integer, default=0)
    reorder_level: Mapped[int] = mapped_column(Integer, default=0)
    unit_price: Mapped[float] = mapped_column(Float, default=0.0)
    qr_payload: Mapped[str] = mapped_column(String(500), default="")

    @property
    def quantity_available(self) -> int:
        return self.quantity_in_stock - self.quantity_assigned


class InventoryTransaction(Base, ULIDMixin):
    __tablename__ = "inventory_transactions"

    item_id: Mapped[str] = mapped_column(String(26), ForeignKey("inventory_items.id"), index=True)
    action: Mapped[str] = mapped_column(String(20))  # add_stock | assign | return
    quantity: Mapped[int] = mapped_column(Integer)
    performed_by: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"))
    operator_id: Mapped[str | None] = mapped_column(String(26), ForeignKey("users.id"), nullable=True)
    job_order_id: Mapped[str | None] = mapped_column(String(26), ForeignKey("job_orders.id"), nullable=True)
    notes: Mapped[str] = mapped_column(String(500), default="")
