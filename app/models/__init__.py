"""SQLAlchemy ORM models.

All tables share one declarative Base and live in a single database.
"""

from app.models.base import Base
from app.models.auth_models import User, UserSession
from app.models.job_order import JobOrder
from app.models.status_history import JobStatusHistory
from app.models.workflow_progress import WorkflowProgress, StepSubmission
from app.models.work_item import WorkItem
from app.models.timecard import TimecardEntry
from app.models.standby_log import StandbyLog
from app.models.inventory import InventoryItem, InventoryTransaction

__all__ = [
    "Base", "User", "UserSession",
    "JobOrder", "JobStatusHistory", "WorkflowProgress", "StepSubmission", "WorkItem",
    "TimecardEntry", "StandbyLog",
    "InventoryItem", "InventoryTransaction",
]
