"""
tests.conftest

Shared fixtures: an in-memory identity provider, a file-backed SQLite app
instance and an httpx client bound to it through ASGITransport.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from orderdesk.api.app import create_app
from orderdesk.auth.models import CreatedIdentity, Principal
from orderdesk.db.models import Business, BusinessUser
from orderdesk.db.repositories.users import UserRepo
from orderdesk.errors import InvalidCredential, MissingCredential, ValidationError
from orderdesk.settings import Settings


class FakeIdentityProvider:
    """In-memory stand-in for the identity service; tokens are `token-<subject>`."""

    def __init__(self) -> None:
        self._issued = 0
        self.accounts: dict[str, str] = {}  # email -> subject
        self.deleted: list[str] = []
        self.verify_calls = 0
        self.create_calls = 0

    def next_subject(self) -> str:
        # Subject the next create_identity call will hand out.
        return f"uid-{self._issued + 1}"

    @staticmethod
    def token_for(subject: str) -> str:
        return f"token-{subject}"

    async def verify(self, credential: str) -> Principal:
        self.verify_calls += 1
        if not credential:
            raise MissingCredential()
        if not credential.startswith("token-"):
            raise InvalidCredential()
        subject = credential.removeprefix("token-")
        email = next((e for e, s in self.accounts.items() if s == subject), None)
        return Principal(subject=subject, email=email, claims={"sub": subject})

    async def create_identity(self, *, email: str, password: str) -> CreatedIdentity:
        self.create_calls += 1
        if email in self.accounts:
            raise ValidationError("email already registered")
        subject = self.next_subject()
        self._issued += 1
        self.accounts[email] = subject
        return CreatedIdentity(subject=subject, email=email, id_token=self.token_for(subject))

    async def delete_identity(self, identity: CreatedIdentity) -> None:
        self.accounts.pop(identity.email, None)
        self.deleted.append(identity.subject)


def auth_header(subject: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {FakeIdentityProvider.token_for(subject)}"}


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(env="test", database_url=f"sqlite+aiosqlite:///{tmp_path / 'orderdesk.db'}")


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest_asyncio.fixture
async def app(settings: Settings, identity: FakeIdentityProvider) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings, identity=identity)
    # httpx ASGITransport does not run lifespan events; enter the handler directly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def seed_user(app: FastAPI, subject: str, *, name: str = "Ada", last_name: str = "Lovelace") -> uuid.UUID:
    async with app.state.sessionmaker() as session:
        user = await UserRepo(session).create(firebase_id=subject, name=name, last_name=last_name)
        await session.commit()
        return user.id


async def seed_business(app: FastAPI, name: str, *, members: tuple[uuid.UUID, ...] = ()) -> uuid.UUID:
    # Businesses are provisioned out of band; tests write them straight through the ORM.
    async with app.state.sessionmaker() as session:
        business = Business(name=name)
        session.add(business)
        await session.flush()
        session.add_all([BusinessUser(business_id=business.id, user_id=user_id) for user_id in members])
        await session.commit()
        return business.id


async def add_member(app: FastAPI, business_id: uuid.UUID, user_id: uuid.UUID) -> None:
    async with app.state.sessionmaker() as session:
        session.add(BusinessUser(business_id=business_id, user_id=user_id))
        await session.commit()
