"""
orderdesk.services.orders

Order ledger service.

Responsibilities:
- Normalize and validate order input (deterministic order of checks, no I/O).
- Enforce business membership before any order read or write.
- Create orders with read-your-write semantics and list the caller's orders.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.auth.models import Principal
from orderdesk.db.models import Order
from orderdesk.db.repositories.orders import OrderRepo
from orderdesk.errors import ValidationError
from orderdesk.observability.logging import get_logger
from orderdesk.services.membership import MembershipGuard, parse_business_id
from orderdesk.services.storage import storage_call
from orderdesk.settings import Settings

_CENT = Decimal("0.01")
# Numeric(12, 2) upper bound.
_MAX_AMOUNT = Decimal("9999999999.99")


@dataclass(frozen=True, slots=True)
class OrderDraft:
    """Order fields as sent by the client, before normalization."""

    amount: Decimal | None = None
    business_id: str | None = None
    currency: str | None = None
    description: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class NewOrder:
    amount: Decimal
    business_id: uuid.UUID
    currency: str
    description: str | None
    customer_email: str | None


def _blank_to_none(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


def normalize_and_validate(draft: OrderDraft) -> NewOrder:
    # Check order is part of the contract: amount, then business_id, then currency.
    raw = draft.amount or Decimal(0)
    if raw.is_nan():
        raise ValidationError("amount must be > 0")
    # Only in-range values are rounded; quantizing an unbounded one overflows the context.
    amount = raw.quantize(_CENT, rounding=ROUND_HALF_EVEN) if abs(raw) <= _MAX_AMOUNT else raw
    if amount <= 0:
        raise ValidationError("amount must be > 0")
    if not (draft.business_id or "").strip():
        raise ValidationError("business_id is required")
    currency = (draft.currency or "").strip().upper()
    if len(currency) != 3:
        raise ValidationError("currency must be a 3-letter code")

    business_id = parse_business_id(draft.business_id)
    if amount > _MAX_AMOUNT:
        raise ValidationError("amount is too large")

    return NewOrder(
        amount=amount,
        business_id=business_id,
        currency=currency,
        description=_blank_to_none(draft.description),
        customer_email=_blank_to_none(draft.email),
    )


class OrderLedger:
    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._orders = OrderRepo(session)
        self._log = (log or get_logger(__name__)).bind(component="orders")
        self._guard = MembershipGuard(session=session, settings=settings, log=self._log)

    async def create(self, principal: Principal, draft: OrderDraft) -> Order:
        new = normalize_and_validate(draft)
        await self._guard.assert_member(principal, new.business_id)

        async with storage_call(
            op="create_order",
            timeout=self._settings.db_timeout_seconds,
            log=self._log,
            business_id=str(new.business_id),
            subject=principal.subject,
        ):
            order = await self._orders.create(
                business_id=new.business_id,
                creator_firebase_id=principal.subject,
                amount=new.amount,
                currency=new.currency,
                description=new.description,
                customer_email=new.customer_email,
            )
            await self._session.commit()

        self._log.info(
            "order_created",
            op="create_order",
            order_id=str(order.id),
            business_id=str(new.business_id),
            subject=principal.subject,
        )
        return order

    async def list(self, principal: Principal, business_id: str | None) -> list[Order]:
        # No implicit "caller's only business" fallback.
        bid = parse_business_id(business_id)
        await self._guard.assert_member(principal, bid)

        async with storage_call(
            op="list_orders",
            timeout=self._settings.db_timeout_seconds,
            log=self._log,
            business_id=str(bid),
            subject=principal.subject,
        ):
            return await self._orders.list_for_creator(
                business_id=bid, creator_firebase_id=principal.subject
            )


# --- Module Notes -----------------------------------------------------------
# A membership revoked between the guard and the INSERT is not re-checked;
# the last successful check wins.
