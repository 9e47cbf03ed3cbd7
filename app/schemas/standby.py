from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class StandbyStart(BaseModel):
    job_id: str
    reason: str
    started_at: datetime | None = None


class StandbyStop(BaseModel):
    log_id: str
    ended_at: datetime | None = None


class StandbyRead(BaseModel):
    id: str
    job_order_id: str
    operator_id: str
    reason: str
    started_at: datetime
    ended_at: datetime | None = None
    duration_hours: float | None = None
    status: str
    charge: float | None = None

    model_config = {"from_attributes": True}
