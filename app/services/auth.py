"""Authentication service: DB-backed bearer sessions, bcrypt passwords."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta

import bcrypt
from fastapi import Request, HTTPException
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.models.auth_models import User, UserSession

SESSION_COOKIE_NAME = "session_token"

_settings = get_settings()
SESSION_MAX_AGE_DAYS = _settings.auth.session_max_age_days


@dataclass
class AuthContext:
    user_id: str
    role: str  # 'admin' | 'operator'
    email: str
    display_name: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def _hash_token(token: str) -> str:
    """SHA-256 hash of a session token for DB storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def context_for(user: User) -> AuthContext:
    return AuthContext(
        user_id=user.id,
        role=user.role,
        email=user.email,
        display_name=user.display_name,
    )


async def create_session(user: User, db: AsyncSession, ip_address: str = "") -> str:
    """Create a DB-backed session. Returns the raw token (not the hash)."""
    token = secrets.token_urlsafe(48)
    expires_at = datetime.now(timezone.utc) + timedelta(days=SESSION_MAX_AGE_DAYS)

    session = UserSession(
        user_id=user.id,
        token_hash=_hash_token(token),
        expires_at=expires_at,
        ip_address=ip_address,
    )
    db.add(session)
    await db.commit()
    return token


async def validate_session(token: str, db: AsyncSession) -> User | None:
    """Look up session by token hash, return User if valid."""
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == _hash_token(token),
            UserSession.expires_at > datetime.now(timezone.utc),
        )
    )
    session = result.scalars().first()
    if not session:
        return None

    user = await db.get(User, session.user_id)
    if not user or not user.is_active:
        return None
    return user


async def remove_session(token: str, db: AsyncSession) -> None:
    await db.execute(delete(UserSession).where(UserSession.token_hash == _hash_token(token)))
    await db.commit()


def token_from_request(request: Request) -> str | None:
    """Bearer token from the Authorization header, falling back to the session cookie."""
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        if token:
            return token
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_current_user(request: Request, db: AsyncSession) -> AuthContext:
    """Validate the request's token and return AuthContext or raise 401."""
    token = token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized. Please log in.")

    user = await validate_session(token, db)
    if not user:
        raise HTTPException(status_code=401, detail="Session expired")

    return context_for(user)
