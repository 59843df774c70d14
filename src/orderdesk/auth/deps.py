"""
orderdesk.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Extract the bearer credential from `Authorization: Bearer <token>`.
- Convert it into a verified `Principal` via the identity provider.
"""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from orderdesk.auth.identity import IdentityProvider
from orderdesk.auth.models import Principal
from orderdesk.errors import MissingCredential

_bearer = HTTPBearer(auto_error=False)


def identity_from_app(request: Request) -> IdentityProvider:
    # The provider is created on app startup in `orderdesk.api.app.create_app`.
    return request.app.state.identity  # type: ignore[attr-defined]


async def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    identity: IdentityProvider = Depends(identity_from_app),
) -> Principal:
    # Authn: a missing header or a non-Bearer scheme fails before any network call.
    if creds is None or not creds.credentials:
        raise MissingCredential()

    # Authn: signature/expiry are delegated to the identity service keys.
    return await identity.verify(creds.credentials)


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependency results per request, so a principal is verified at
# most once and then handed to routers/services as an explicit argument.
