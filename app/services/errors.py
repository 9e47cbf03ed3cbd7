"""Domain exceptions raised by the service layer.

Routers translate these into HTTP responses; each carries the status code
it maps to.
"""

from __future__ import annotations

from typing import Any


class FieldOpsError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StepValidationError(FieldOpsError):
    status_code = 400


class InvalidStatusTransition(FieldOpsError):
    status_code = 400


class NotAssignedError(FieldOpsError):
    status_code = 403


class ActiveJobConflict(FieldOpsError):
    """The operator already has another job in route or in progress."""

    status_code = 409

    def __init__(self, active_job: Any):
        super().__init__(
            f"You already have an active job (#{active_job.job_number}). "
            "Complete it before starting another."
        )
        self.active_job = active_job

    def payload(self) -> dict:
        job = self.active_job
        return {
            "error": self.message,
            "activeJob": {
                "id": job.id,
                "job_number": job.job_number,
                "location": job.location or job.address,
                "status": job.status,
            },
        }


class StaleProgressError(FieldOpsError):
    status_code = 409


class StandbyActiveError(FieldOpsError):
    status_code = 409


class OpenStandbyExists(FieldOpsError):
    status_code = 409


class AlreadyClockedIn(FieldOpsError):
    status_code = 409


class NotClockedIn(FieldOpsError):
    status_code = 400


class AlreadyApproved(FieldOpsError):
    status_code = 409


class InsufficientStock(FieldOpsError):
    status_code = 409


class RecordNotFound(FieldOpsError):
    status_code = 404
