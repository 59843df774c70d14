"""
orderdesk.api.routers.users

User endpoints.

Responsibilities:
- Register a user (public): provisions the external identity + internal row.
- Return the authenticated caller's profile and businesses.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from orderdesk.api.deps import user_directory
from orderdesk.auth.deps import get_principal
from orderdesk.auth.models import Principal
from orderdesk.services.users import UserDirectory

router = APIRouter(prefix="/api/user", tags=["user"])


class RegisterRequest(BaseModel):
    # Presence/blankness is checked by the service so the error message is uniform.
    email: str | None = None
    password: str | None = None
    name: str | None = None
    last_name: str | None = None


class RegisterResponse(BaseModel):
    id: uuid.UUID
    firebase_id: str
    name: str
    last_name: str


class BusinessRecord(BaseModel):
    id: uuid.UUID
    name: str


class UserProfileResponse(BaseModel):
    id: uuid.UUID
    name: str | None = None
    last_name: str | None = None
    businesses: list[BusinessRecord]


@router.post("", response_model=RegisterResponse)
async def register_user(
    body: RegisterRequest,
    users: UserDirectory = Depends(user_directory),
) -> RegisterResponse:
    reg = await users.register(
        email=body.email,
        password=body.password,
        name=body.name,
        last_name=body.last_name,
    )
    return RegisterResponse(
        id=reg.user.id,
        firebase_id=reg.external_id,
        name=reg.user.name or "",
        last_name=reg.user.last_name or "",
    )


@router.get("", response_model=UserProfileResponse, response_model_exclude_none=True)
async def get_user(
    principal: Principal = Depends(get_principal),
    users: UserDirectory = Depends(user_directory),
) -> UserProfileResponse:
    profile = await users.get_profile(principal)
    return UserProfileResponse(
        id=profile.user.id,
        name=profile.user.name,
        last_name=profile.user.last_name,
        businesses=[BusinessRecord(id=b.id, name=b.name) for b in profile.businesses],
    )
