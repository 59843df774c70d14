from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.db.models import User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, firebase_id: str, name: str | None, last_name: str | None) -> User:
        user = User(firebase_id=firebase_id, name=name, last_name=last_name)
        self._session.add(user)
        # Flush surfaces the unique violation on firebase_id before commit.
        await self._session.flush()
        return user

    async def get_by_external_id(self, firebase_id: str) -> User | None:
        stmt = select(User).where(User.firebase_id == firebase_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()
