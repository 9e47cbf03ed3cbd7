"""Request bodies for the per-step workflow endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class EquipmentChecklistSubmit(BaseModel):
    items: dict[str, bool]
    notes: str = ""


class RouteConfirmationSubmit(BaseModel):
    # HH:MM captured when the page opened, and the (possibly edited) departure time
    captured_time: str
    confirmed_time: str
    latitude: float | None = None
    longitude: float | None = None


class HazardEntry(BaseModel):
    hazard: str
    controls: str = ""


class JobHazardAnalysisSubmit(BaseModel):
    hazards: list[HazardEntry]
    ppe: list[str] = []
    acknowledged: bool = False


class SilicaFormSubmit(BaseModel):
    tasks: list[str]
    engineering_controls: list[str]
    exposure_hours: float = 0.0
    respirator: str = ""
    competent_person: str = ""


class WorkItemEntry(BaseModel):
    work_type: str
    linear_feet_cut: float | None = None
    cut_depth_inches: float | None = None
    core_quantity: int | None = None
    core_size: str | None = None
    core_depth_inches: float | None = None
    notes: str | None = None


class WorkPerformedSubmit(BaseModel):
    items: list[WorkItemEntry]


class PicturesSubmit(BaseModel):
    photos: list[str]


class CustomerSignatureSubmit(BaseModel):
    signer_name: str
    signature: str
    rating: int | None = None
    comments: str = ""


class CompleteJobSubmit(BaseModel):
    hours_worked: float | None = None
    customer_rating: int | None = None
    latitude: float | None = None
    longitude: float | None = None


class RouteConfirmationResult(BaseModel):
    job_id: str
    status: str
    sms_sent: bool
    notify_warning: bool
    time_difference_minutes: int
    next_step: str
    message: str = Field("", description="Shown to the operator when the contact was not notified")
