"""
orderdesk.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and DB sessions.
- Build per-request services from app.state infrastructure.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orderdesk.auth.deps import identity_from_app
from orderdesk.auth.identity import IdentityProvider
from orderdesk.services.orders import OrderLedger
from orderdesk.services.users import UserDirectory
from orderdesk.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app is built around one Settings instance (see `create_app`).
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def user_directory(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    identity: IdentityProvider = Depends(identity_from_app),
) -> UserDirectory:
    return UserDirectory(session=session, settings=settings, identity=identity)


def order_ledger(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> OrderLedger:
    return OrderLedger(session=session, settings=settings)
