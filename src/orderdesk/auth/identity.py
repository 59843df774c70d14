"""
orderdesk.auth.identity

Client boundary for the external identity service.

Responsibilities:
- Verify bearer credentials and build a `Principal` (verification is mandatory,
  profile enrichment is best-effort).
- Provision and delete external identities for user registration.
- Cache the service's public signing keys (never the tokens themselves).

The production implementation speaks the Firebase Auth REST surface
(Identity Toolkit + securetoken JWKS); tests swap in an in-memory provider that
satisfies the same `IdentityProvider` protocol.
"""

from __future__ import annotations

import time
from typing import Any, Protocol

import httpx
import structlog
from jwt import PyJWKSet
from jwt.exceptions import PyJWKSetError

from orderdesk.auth.models import CreatedIdentity, Principal
from orderdesk.auth.tokens import (
    TokenConfig,
    TokenValidationError,
    UnknownSigningKey,
    decode_and_validate,
    read_key_id,
)
from orderdesk.errors import (
    DependencyTimeout,
    IdentityServiceError,
    InternalError,
    InvalidCredential,
    MissingCredential,
    ValidationError,
)
from orderdesk.observability.logging import get_logger
from orderdesk.settings import Settings


class IdentityProvider(Protocol):
    async def verify(self, credential: str) -> Principal: ...

    async def create_identity(self, *, email: str, password: str) -> CreatedIdentity: ...

    async def delete_identity(self, identity: CreatedIdentity) -> None: ...


# Identity Toolkit error codes that are the caller's fault.
_CLIENT_ERRORS: dict[str, str] = {
    "EMAIL_EXISTS": "email already registered",
    "INVALID_EMAIL": "invalid email",
    "WEAK_PASSWORD": "password is too weak",
    "MISSING_PASSWORD": "password is required",
    "INVALID_PASSWORD": "invalid password",
}


class JwksCache:
    """
    Public signing keys of the identity service, refreshed after `ttl_seconds`
    or on demand when a token references an unknown key id.
    """

    def __init__(self, *, http: httpx.AsyncClient, url: str, ttl_seconds: int) -> None:
        self._http = http
        self._url = url
        self._ttl = ttl_seconds
        self._keys: PyJWKSet | None = None
        self._fetched_at = 0.0

    async def get(self, *, refresh: bool = False) -> PyJWKSet:
        fresh = time.monotonic() - self._fetched_at < self._ttl
        if self._keys is not None and fresh and not refresh:
            return self._keys

        try:
            r = await self._http.get(self._url)
            r.raise_for_status()
            keys = PyJWKSet.from_dict(r.json())
        except httpx.TimeoutException as e:
            raise DependencyTimeout(f"jwks fetch timed out: {e}") from e
        except (httpx.HTTPError, ValueError, PyJWKSetError) as e:
            raise IdentityServiceError(f"jwks fetch failed: {e}") from e

        self._keys = keys
        self._fetched_at = time.monotonic()
        return keys


class FirebaseIdentityProvider:
    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._settings = settings
        self._http = http
        self._log = (log or get_logger(__name__)).bind(component="identity")
        self._token_cfg = TokenConfig(
            issuer=settings.identity_issuer,
            audience=settings.identity_project_id,
        )
        self._keys = JwksCache(
            http=http,
            url=settings.identity_jwks_url,
            ttl_seconds=settings.identity_jwks_cache_seconds,
        )

    async def verify(self, credential: str) -> Principal:
        if not credential:
            raise MissingCredential()

        claims = await self._validate(credential)
        subject = str(claims["sub"])

        # Enrichment is best-effort; fall back to whatever the token itself carries.
        email, display_name = await self._lookup_profile(credential, subject=subject)
        return Principal(
            subject=subject,
            email=email or claims.get("email"),
            display_name=display_name or claims.get("name"),
            claims=claims,
        )

    async def _validate(self, credential: str) -> dict[str, Any]:
        try:
            # Unparseable tokens are rejected before any key fetch.
            read_key_id(credential)
            keys = await self._keys.get()
            try:
                return decode_and_validate(cfg=self._token_cfg, token=credential, keys=keys)
            except UnknownSigningKey:
                # Keys rotate; retry once against a fresh key set.
                keys = await self._keys.get(refresh=True)
                return decode_and_validate(cfg=self._token_cfg, token=credential, keys=keys)
        except TokenValidationError as e:
            self._log.info("token_rejected", op="verify", reason=str(e))
            raise InvalidCredential() from e

    async def _lookup_profile(self, credential: str, *, subject: str) -> tuple[str | None, str | None]:
        # Any failure here, timeouts and malformed bodies included, leaves the principal unenriched.
        try:
            body = await self._call("accounts:lookup", {"idToken": credential})
            record = body["users"][0]
            if not isinstance(record, dict):
                raise TypeError(f"unexpected user record: {type(record).__name__}")
        except (InternalError, ValidationError, KeyError, IndexError, TypeError) as e:
            self._log.warning("profile_lookup_failed", op="verify", subject=subject, err=str(e))
            return None, None
        return record.get("email") or None, record.get("displayName") or None

    async def create_identity(self, *, email: str, password: str) -> CreatedIdentity:
        body = await self._call(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        subject = body.get("localId")
        if not subject:
            raise IdentityServiceError("signUp response has no localId")
        self._log.info("identity_created", op="create_identity", subject=subject)
        return CreatedIdentity(subject=subject, email=email, id_token=body.get("idToken"))

    async def delete_identity(self, identity: CreatedIdentity) -> None:
        if not identity.id_token:
            raise IdentityServiceError("cannot delete identity without its id token")
        await self._call("accounts:delete", {"idToken": identity.id_token})
        self._log.info("identity_deleted", op="delete_identity", subject=identity.subject)

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._settings.identity_base_url.rstrip('/')}/{method}"
        try:
            r = await self._http.post(
                url,
                params={"key": self._settings.identity_api_key},
                json=payload,
            )
        except httpx.TimeoutException as e:
            raise DependencyTimeout(f"identity {method} timed out") from e
        except httpx.HTTPError as e:
            raise IdentityServiceError(f"identity {method} failed: {e}") from e

        if r.status_code >= 400:
            code = _error_code(r)
            if r.status_code < 500 and code in _CLIENT_ERRORS:
                raise ValidationError(_CLIENT_ERRORS[code])
            raise IdentityServiceError(f"identity {method} returned {r.status_code}: {code}")
        try:
            body = r.json()
        except ValueError as e:
            raise IdentityServiceError(f"identity {method} returned a non-JSON body") from e
        if not isinstance(body, dict):
            raise IdentityServiceError(f"identity {method} returned an unexpected body")
        return body


def _error_code(r: httpx.Response) -> str:
    # Identity Toolkit errors look like {"error": {"message": "WEAK_PASSWORD : Password should be ..."}}.
    try:
        message = str(r.json()["error"]["message"])
    except (ValueError, KeyError, TypeError):
        return "UNKNOWN"
    return message.split(" ", 1)[0].strip()


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    # One shared client per process; every call is bounded by the identity timeout.
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.identity_timeout_seconds))


# --- Module Notes -----------------------------------------------------------
# The provider is created once at startup (`api.app.create_app`) and read from
# app.state by `auth.deps.identity_from_app`.
