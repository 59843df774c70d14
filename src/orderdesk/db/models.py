"""
orderdesk.db.models

Persistence schema.

Responsibilities:
- Define ORM models for the tenancy graph and the order ledger:
  - User: internal record keyed by the identity service subject id
  - Business: tenant, unit of data isolation
  - BusinessUser: membership join, the sole authorization predicate
  - Order: plain order record owned by a (business, creator) pair
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid as SAUuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orderdesk.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC; microsecond precision keeps created_at ordering stable on SQLite.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class OrderStatus(enum.StrEnum):
    # Only the initial state is reachable; transitions are not implemented.
    pending = "PENDING"


class User(Base):
    __tablename__ = "user"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Uniqueness here is what rejects concurrent duplicate registrations.
    firebase_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(256), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    memberships: Mapped[list[BusinessUser]] = relationship(back_populates="user")


class Business(Base):
    __tablename__ = "business"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)

    memberships: Mapped[list[BusinessUser]] = relationship(back_populates="business")


class BusinessUser(Base):
    __tablename__ = "business_user"

    business_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("business.id"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("user.id"), primary_key=True, index=True
    )

    business: Mapped[Business] = relationship(back_populates="memberships")
    user: Mapped[User] = relationship(back_populates="memberships")


class Order(Base):
    __tablename__ = "order"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    business_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("business.id"), nullable=False
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("user.id"), nullable=False
    )

    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=OrderStatus.pending.value
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2, asdecimal=True), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    # NULL means absent; blank strings are never stored.
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    customer_email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
        Index("ix_order_business_creator_created", "business_id", "created_by", "created_at"),
    )


# --- Module Notes -----------------------------------------------------------
# Table names mirror the existing Postgres schema ("user", "order" are quoted
# automatically by SQLAlchemy since they are reserved words).
