"""
orderdesk.api.routers.orders

Order endpoints (authenticated).

Responsibilities:
- Create an order within a business the caller belongs to.
- List the caller's own orders within a business, newest first.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer

from orderdesk.api.deps import order_ledger
from orderdesk.auth.deps import get_principal
from orderdesk.auth.models import Principal
from orderdesk.services.orders import OrderDraft, OrderLedger

router = APIRouter(prefix="/api/orders", tags=["orders"])

# Amounts travel as JSON numbers, not strings.
JsonAmount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


# Stored timestamps are naive UTC; responses carry the offset explicitly.
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class OrderCreateRequest(BaseModel):
    amount: Decimal | None = None
    description: str | None = None
    email: str | None = None
    currency: str | None = None
    business_id: str | None = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: UtcDatetime
    updated_at: UtcDatetime
    business_id: uuid.UUID
    created_by: uuid.UUID
    status: str
    amount: JsonAmount
    currency: str
    description: str | None = None
    customer_email: str | None = None


@router.post("", response_model=OrderResponse, response_model_exclude_none=True)
async def create_order(
    body: OrderCreateRequest,
    principal: Principal = Depends(get_principal),
    ledger: OrderLedger = Depends(order_ledger),
) -> OrderResponse:
    draft = OrderDraft(
        amount=body.amount,
        business_id=body.business_id,
        currency=body.currency,
        description=body.description,
        email=body.email,
    )
    order = await ledger.create(principal, draft)
    return OrderResponse.model_validate(order)


@router.get("", response_model=list[OrderResponse], response_model_exclude_none=True)
async def list_orders(
    business_id: str | None = Query(default=None),
    principal: Principal = Depends(get_principal),
    ledger: OrderLedger = Depends(order_ledger),
) -> list[OrderResponse]:
    orders = await ledger.list(principal, business_id)
    return [OrderResponse.model_validate(o) for o in orders]
