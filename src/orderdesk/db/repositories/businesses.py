"""
orderdesk.db.repositories.businesses

Repository for `Business` and `BusinessUser` (membership) entities.

Responsibilities:
- Answer the membership predicate for (business, external subject).
- List businesses reachable by a user through membership.

Businesses and memberships are administered outside this service; it only reads them.
"""

from __future__ import annotations

import uuid

from sqlalchemy import desc, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.db.models import Business, BusinessUser, User


class BusinessRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def is_member(self, *, business_id: uuid.UUID, firebase_id: str) -> bool:
        # One EXISTS over the join; a missing user row simply yields False.
        stmt = select(
            exists().where(
                BusinessUser.business_id == business_id,
                BusinessUser.user_id == User.id,
                User.firebase_id == firebase_id,
            )
        )
        return bool(await self._session.scalar(stmt))

    async def list_for_user(self, user_id: uuid.UUID) -> list[Business]:
        # Newest business first.
        stmt = (
            select(Business)
            .join(BusinessUser, BusinessUser.business_id == Business.id)
            .where(BusinessUser.user_id == user_id)
            .order_by(desc(Business.created_at))
        )
        return list((await self._session.execute(stmt)).scalars().all())


# --- Module Notes -----------------------------------------------------------
# `is_member` runs on every protected request; it is covered by the business_user
# primary key (business_id, user_id) and the unique index on user.firebase_id.
