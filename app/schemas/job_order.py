from __future__ import annotations

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, Field


class JobOrderCreate(BaseModel):
    job_number: str
    title: str = ""
    # Older clients send "customer"; storage only knows customer_name
    customer_name: str = Field("", validation_alias=AliasChoices("customer_name", "customer"))
    location: str = ""
    address: str = ""
    contact_name: str = ""
    contact_phone: str = ""
    notes: str = ""
    assigned_to: str | None = None
    scheduled_date: date | None = None
    arrival_time: str = Field("", pattern=r"^$|^([01]\d|2[0-3]):[0-5]\d$")


class JobOrderUpdate(BaseModel):
    title: str | None = None
    customer_name: str | None = Field(None, validation_alias=AliasChoices("customer_name", "customer"))
    location: str | None = None
    address: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    notes: str | None = None
    # An explicit null unassigns the job
    assigned_to: str | None = None
    scheduled_date: date | None = None
    arrival_time: str | None = Field(None, pattern=r"^$|^([01]\d|2[0-3]):[0-5]\d$")


class JobOrderRead(BaseModel):
    id: str
    job_number: str
    title: str
    customer_name: str
    location: str
    address: str
    contact_name: str
    contact_phone: str
    notes: str
    assigned_to: str | None = None
    scheduled_date: date | None = None
    arrival_time: str = ""
    status: str
    route_started_at: datetime | None = None
    work_started_at: datetime | None = None
    work_completed_at: datetime | None = None
    drive_hours: float | None = None
    production_hours: float | None = None
    total_hours: float | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class StatusUpdate(BaseModel):
    status: str
    latitude: float | None = None
    longitude: float | None = None


class LocationBody(BaseModel):
    latitude: float | None = None
    longitude: float | None = None


class JobStatusHistoryRead(BaseModel):
    id: str
    job_order_id: str
    from_status: str
    to_status: str
    changed_by: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    note: str = ""
    created_at: datetime

    model_config = {"from_attributes": True}
