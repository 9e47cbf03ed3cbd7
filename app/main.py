"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.router import api_router
from app.config import get_settings
from app.db.engine import create_all, engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await create_all()
    logger.info("Field dispatch API started (sms configured: %s)", bool(settings.sms.account_sid))
    yield
    await engine.dispose()


app = FastAPI(
    title="Field Dispatch",
    description="Job dispatch and operator workflow for concrete cutting crews.",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(api_router)


@app.get("/health")
async def health():
    return {"ok": True}
