"""Shared fixtures: in-memory database, seeded users and jobs, fake SMS."""

from __future__ import annotations

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.db import crud
from app.models import Base
from app.services.auth import context_for, hash_password
from app.services.sms import SmsResult


class RecordingNotifier:
    """Stands in for SmsNotifier; keeps every message instead of calling Twilio."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: list[tuple[str, str]] = []

    @property
    def configured(self) -> bool:
        return True

    async def send(self, to: str, message: str) -> SmsResult:
        self.sent.append((to, message))
        if not self.succeed:
            return SmsResult(success=False, error="Carrier rejected message")
        return SmsResult(success=True, message_id=f"SM{len(self.sent):04d}")


@pytest_asyncio.fixture
async def db_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(db_factory):
    async with db_factory() as session:
        yield session


@pytest_asyncio.fixture
async def admin(db):
    return await crud.create_user(
        db, "dispatch@pontifex.test", hash_password("adminpass123"),
        role="admin", display_name="Dispatch",
    )


@pytest_asyncio.fixture
async def operator(db):
    return await crud.create_user(
        db, "mike@pontifex.test", hash_password("operator123"),
        role="operator", display_name="Mike Rivera", phone="555-010-2000",
    )


@pytest_asyncio.fixture
async def other_operator(db):
    return await crud.create_user(
        db, "sam@pontifex.test", hash_password("operator456"),
        role="operator", display_name="Sam Chen",
    )


@pytest.fixture
def admin_ctx(admin):
    return context_for(admin)


@pytest.fixture
def operator_ctx(operator):
    return context_for(operator)


@pytest.fixture
def other_ctx(other_operator):
    return context_for(other_operator)


@pytest.fixture
def job_factory(db):
    async def _make(job_number: str, assigned_to: str | None, **fields):
        defaults = {
            "title": "Slab cut for trench drain",
            "customer_name": "Harbor Construction",
            "location": "Pier 9 Warehouse",
            "address": "900 Harbor Way",
            "contact_name": "Dana",
            "contact_phone": "(555) 123-4567",
            "scheduled_date": date(2026, 10, 19),
            "arrival_time": "07:30",
        }
        defaults.update(fields)
        return await crud.create_job_order(
            db, job_number=job_number, assigned_to=assigned_to, **defaults
        )
    return _make


@pytest_asyncio.fixture
async def job(job_factory, operator):
    return await job_factory("J-1001", operator.id)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return RecordingNotifier(succeed=False)
