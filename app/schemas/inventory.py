from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class InventoryItemCreate(BaseModel):
    name: str
    category: str = ""
    manufacturer: str = ""
    model: str = ""
    size: str = ""
    quantity_in_stock: int = Field(0, ge=0)
    reorder_level: int = Field(0, ge=0)
    unit_price: float = Field(0.0, ge=0)
    qr_payload: str = ""


class InventoryItemRead(BaseModel):
    id: str
    name: str
    category: str
    manufacturer: str
    model: str
    size: str
    quantity_in_stock: int
    quantity_assigned: int
    quantity_available: int
    reorder_level: int
    unit_price: float
    qr_payload: str = ""

    model_config = {"from_attributes": True}


class StockMovement(BaseModel):
    quantity: int
    operator_id: str | None = None
    job_id: str | None = None
    notes: str = ""


class InventoryTransactionRead(BaseModel):
    id: str
    item_id: str
    action: str
    quantity: int
    performed_by: str
    operator_id: str | None = None
    job_order_id: str | None = None
    notes: str = ""
    created_at: datetime

    model_config = {"from_attributes": True}
