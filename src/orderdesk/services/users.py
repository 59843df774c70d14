"""
orderdesk.services.users

User directory service.

Responsibilities:
- Register users: provision the external identity first, then the internal row.
- Roll back the external identity when the internal insert fails (best effort).
- Resolve a principal's profile and the businesses it belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.auth.identity import IdentityProvider
from orderdesk.auth.models import CreatedIdentity, Principal
from orderdesk.db.models import Business, User
from orderdesk.db.repositories.businesses import BusinessRepo
from orderdesk.db.repositories.users import UserRepo
from orderdesk.errors import NotInitialized, ServiceError, ValidationError
from orderdesk.observability.logging import get_logger
from orderdesk.services.storage import storage_call
from orderdesk.settings import Settings


@dataclass(frozen=True, slots=True)
class Registration:
    user: User
    external_id: str


@dataclass(frozen=True, slots=True)
class Profile:
    user: User
    businesses: list[Business]


class UserDirectory:
    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        identity: IdentityProvider,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._identity = identity
        self._users = UserRepo(session)
        self._businesses = BusinessRepo(session)
        self._log = (log or get_logger(__name__)).bind(component="user")

    async def register(
        self,
        *,
        email: str | None,
        password: str | None,
        name: str | None,
        last_name: str | None,
    ) -> Registration:
        email, password, name, last_name = (
            (v or "").strip() for v in (email, password, name, last_name)
        )
        if not (email and password and name and last_name):
            raise ValidationError("email, password, name and last_name are required")

        # Identity first: the internal row is keyed by the external subject id.
        created = await self._identity.create_identity(email=email, password=password)

        try:
            user = await self._insert_user(created, name=name, last_name=last_name)
        except ServiceError:
            await self._compensate(created)
            raise

        self._log.info("user_registered", op="register", user_id=str(user.id), subject=created.subject)
        return Registration(user=user, external_id=created.subject)

    async def _insert_user(self, created: CreatedIdentity, *, name: str, last_name: str) -> User:
        async with storage_call(
            op="register",
            timeout=self._settings.db_timeout_seconds,
            log=self._log,
            subject=created.subject,
        ):
            try:
                user = await self._users.create(
                    firebase_id=created.subject, name=name, last_name=last_name
                )
                await self._session.commit()
            except IntegrityError as e:
                await self._session.rollback()
                self._log.info("user_conflict", op="register", subject=created.subject)
                raise ValidationError("user already registered") from e
        return user

    async def _compensate(self, created: CreatedIdentity) -> None:
        if not self._settings.register_compensation:
            self._log.warning("identity_orphaned", op="register", subject=created.subject)
            return
        try:
            await self._identity.delete_identity(created)
        except ServiceError as e:
            # The client still gets the insert failure; the orphan is left for operators.
            self._log.error(
                "identity_compensation_failed",
                op="register",
                subject=created.subject,
                err=e.message,
            )
        else:
            self._log.info("identity_compensated", op="register", subject=created.subject)

    async def get_profile(self, principal: Principal) -> Profile:
        async with storage_call(
            op="get_profile",
            timeout=self._settings.db_timeout_seconds,
            log=self._log,
            subject=principal.subject,
        ):
            user = await self._users.get_by_external_id(principal.subject)
            if user is None:
                # Authenticated with the identity service but never registered here.
                raise NotInitialized()
            businesses = await self._businesses.list_for_user(user.id)
        return Profile(user=user, businesses=businesses)
