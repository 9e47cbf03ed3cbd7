"""FastAPI dependency providers for auth, DB sessions, notifier and roles."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.db import crud
from app.db.engine import get_db
from app.models import JobOrder
from app.services.auth import AuthContext, get_current_user
from app.services.errors import ActiveJobConflict, FieldOpsError
from app.services.sms import SmsNotifier


@lru_cache
def get_settings_dep() -> Settings:
    return get_settings()


@lru_cache
def get_notifier() -> SmsNotifier:
    return SmsNotifier(get_settings_dep().sms)


async def require_auth(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Require a valid bearer session. Returns AuthContext."""
    return await get_current_user(request, db)


def require_role(*allowed_roles: str):
    """Factory: returns a dependency that enforces role membership."""
    async def _check(auth: AuthContext = Depends(require_auth)) -> AuthContext:
        if auth.role not in allowed_roles:
            raise HTTPException(403, "Admin access required")
        return auth
    return _check


require_admin = require_role("admin")


async def load_job(db: AsyncSession, job_id: str, auth: AuthContext) -> JobOrder:
    """Fetch a job the caller may see; operators only see their own."""
    job = await crud.get_job_order(db, job_id)
    if not job:
        raise HTTPException(404, "Job order not found")
    if not auth.is_admin and job.assigned_to != auth.user_id:
        raise HTTPException(403, "This job is not assigned to you")
    return job


def http_error(exc: FieldOpsError) -> HTTPException:
    return HTTPException(exc.status_code, exc.message)


def conflict_response(exc: ActiveJobConflict) -> JSONResponse:
    """409 body that names the job blocking the transition."""
    return JSONResponse(status_code=exc.status_code, content=exc.payload())
