"""Pydantic request/response schemas."""

from app.schemas.auth import LoginRequest, UserCreate, UserRead
from app.schemas.job_order import (
    JobOrderCreate, JobOrderUpdate, JobOrderRead, StatusUpdate, LocationBody,
    JobStatusHistoryRead,
)
from app.schemas.workflow import (
    WorkflowProgressRead, WorkflowUpdate, AdminWorkflowUpdate, StepResult,
)
from app.schemas.steps import (
    EquipmentChecklistSubmit, RouteConfirmationSubmit, RouteConfirmationResult,
    HazardEntry, JobHazardAnalysisSubmit, SilicaFormSubmit,
    WorkItemEntry, WorkPerformedSubmit, PicturesSubmit,
    CustomerSignatureSubmit, CompleteJobSubmit,
)
from app.schemas.timecard import ClockBody, TimecardRead, TimecardUpdate, TimecardHistory
from app.schemas.standby import StandbyStart, StandbyStop, StandbyRead
from app.schemas.inventory import (
    InventoryItemCreate, InventoryItemRead, StockMovement, InventoryTransactionRead,
)

__all__ = [
    "LoginRequest", "UserCreate", "UserRead",
    "JobOrderCreate", "JobOrderUpdate", "JobOrderRead", "StatusUpdate", "LocationBody",
    "JobStatusHistoryRead",
    "WorkflowProgressRead", "WorkflowUpdate", "AdminWorkflowUpdate", "StepResult",
    "EquipmentChecklistSubmit", "RouteConfirmationSubmit", "RouteConfirmationResult",
    "HazardEntry", "JobHazardAnalysisSubmit", "SilicaFormSubmit",
    "WorkItemEntry", "WorkPerformedSubmit", "PicturesSubmit",
    "CustomerSignatureSubmit", "CompleteJobSubmit",
    "ClockBody", "TimecardRead", "TimecardUpdate", "TimecardHistory",
    "StandbyStart", "StandbyStop", "StandbyRead",
    "InventoryItemCreate", "InventoryItemRead", "StockMovement", "InventoryTransactionRead",
]
