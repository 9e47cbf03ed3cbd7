from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ClockBody(BaseModel):
    latitude: float | None = None
    longitude: float | None = None
    accuracy: float | None = None


class TimecardRead(BaseModel):
    id: str
    user_id: str
    job_order_id: str | None = None
    event_type: str
    occurred_at: datetime
    latitude: float | None = None
    longitude: float | None = None
    accuracy: float | None = None
    notes: str = ""
    total_hours: float | None = None
    is_approved: bool
    approved_by: str | None = None
    approved_at: datetime | None = None

    model_config = {"from_attributes": True}


class TimecardUpdate(BaseModel):
    occurred_at: datetime | None = None
    notes: str | None = None


class TimecardHistory(BaseModel):
    entries: list[TimecardRead]
    total_hours: float
    regular_hours: float
    overtime_hours: float
