"""
orderdesk.db.repositories.orders

Repository for `Order` entities.

Responsibilities:
- Insert an order and return the persisted row from the same statement.
- List a creator's orders within one business, newest first.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import desc, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.db.models import Order, User


def _user_id_for(firebase_id: str):
    return select(User.id).where(User.firebase_id == firebase_id).scalar_subquery()


class OrderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        business_id: uuid.UUID,
        creator_firebase_id: str,
        amount: Decimal,
        currency: str,
        description: str | None,
        customer_email: str | None,
    ) -> Order:
        # created_by is resolved inside the INSERT; RETURNING hands back id/timestamps/status.
        stmt = (
            insert(Order)
            .values(
                business_id=business_id,
                created_by=_user_id_for(creator_firebase_id),
                amount=amount,
                currency=currency,
                description=description,
                customer_email=customer_email,
            )
            .returning(Order)
        )
        return (await self._session.scalars(stmt)).one()

    async def list_for_creator(
        self, *, business_id: uuid.UUID, creator_firebase_id: str
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(
                Order.business_id == business_id,
                Order.created_by == _user_id_for(creator_firebase_id),
            )
            .order_by(desc(Order.created_at))
        )
        return list((await self._session.execute(stmt)).scalars().all())


# --- Module Notes -----------------------------------------------------------
# Listing is scoped to the caller's own orders, not every order of the business.
