"""
orderdesk.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probes (`/healthz`, `/ping`).
- Provide readiness probe (`/readyz`) with DB connectivity validation.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.api.deps import db_session

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ping")
async def ping() -> dict[str, Any]:
    return {"ok": True, "message": "pong"}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    # Readiness: verify critical dependency (DB) is reachable.
    await session.execute(text("SELECT 1"))
    return {"status": "ready"}
