"""
orderdesk.services.membership

Tenant membership guard.

Responsibilities:
- Validate business identifiers coming from clients.
- Decide whether a principal may act within a business (membership exists).

Missing user rows and missing memberships are indistinguishable to callers:
both are `Forbidden`. Storage failures are `InternalError`, never `Forbidden`.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.auth.models import Principal
from orderdesk.db.repositories.businesses import BusinessRepo
from orderdesk.errors import Forbidden, ValidationError
from orderdesk.observability.logging import get_logger
from orderdesk.services.storage import storage_call
from orderdesk.settings import Settings


def parse_business_id(raw: str | uuid.UUID | None) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    value = (raw or "").strip()
    if not value:
        raise ValidationError("business_id is required")
    try:
        return uuid.UUID(value)
    except ValueError as e:
        raise ValidationError("business_id must be a valid UUID") from e


class MembershipGuard:
    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._businesses = BusinessRepo(session)
        self._settings = settings
        self._log = (log or get_logger(__name__)).bind(component="businessuser")

    async def assert_member(self, principal: Principal, business_id: uuid.UUID) -> None:
        # No caching: membership may change between requests.
        async with storage_call(
            op="assert_member",
            timeout=self._settings.db_timeout_seconds,
            log=self._log,
            business_id=str(business_id),
            subject=principal.subject,
        ):
            member = await self._businesses.is_member(
                business_id=business_id, firebase_id=principal.subject
            )

        if not member:
            self._log.info(
                "membership_denied",
                op="assert_member",
                business_id=str(business_id),
                subject=principal.subject,
            )
            raise Forbidden()
