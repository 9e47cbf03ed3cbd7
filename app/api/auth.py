"""Auth API: login, logout, current user."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.db.engine import get_db
from app.dependencies import require_auth
from app.schemas import LoginRequest
from app.services.auth import (
    AuthContext, verify_password, SESSION_COOKIE_NAME, SESSION_MAX_AGE_DAYS,
    create_session, remove_session, token_from_request,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    user = await crud.get_user_by_email(db, body.email.strip().lower())
    if not user or not user.is_active or not verify_password(body.password, user.password_hash):
        return JSONResponse(status_code=401, content={"detail": "Invalid credentials"})

    ip = request.client.host if request.client else ""
    token = await create_session(user, db, ip_address=ip)

    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()

    response = JSONResponse(content={
        "ok": True,
        "token": token,
        "user_id": user.id,
        "role": user.role,
        "display_name": user.display_name,
    })
    response.set_cookie(
        SESSION_COOKIE_NAME, token,
        httponly=True, samesite="lax",
        max_age=86400 * SESSION_MAX_AGE_DAYS,
    )
    return response


@router.post("/logout")
async def logout(
    request: Request,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    token = token_from_request(request)
    if token:
        await remove_session(token, db)
    response = JSONResponse(content={"ok": True})
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


@router.get("/me")
async def get_me(auth: AuthContext = Depends(require_auth)):
    return {
        "user_id": auth.user_id,
        "email": auth.email,
        "display_name": auth.display_name,
        "role": auth.role,
    }
