"""
tests.test_identity

Firebase-compatible identity client against a mocked HTTP transport.
"""

from __future__ import annotations

import json

import httpx
import pytest
from test_tokens import make_key, sign

from orderdesk.auth.identity import FirebaseIdentityProvider
from orderdesk.auth.models import CreatedIdentity
from orderdesk.errors import (
    DependencyTimeout,
    IdentityServiceError,
    InvalidCredential,
    MissingCredential,
    ValidationError,
)
from orderdesk.settings import Settings

SETTINGS = Settings(
    env="test",
    identity_project_id="proj",
    identity_api_key="k",
    identity_base_url="https://identity.test/v1",
    identity_jwks_url="https://keys.test/jwks",
)


class IdentityService:
    """Programmable fake of the REST endpoints the client talks to."""

    def __init__(self, jwks: list[dict]) -> None:
        self.jwks = jwks
        self.jwks_fetches = 0
        self.lookup_status = 200
        self.lookup_failure: str | None = None
        self.jwks_status = 200
        self.lookup_users = [{"localId": "uid-1", "email": "a@b.com", "displayName": "Ada L"}]
        self.signup_error: str | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.url.host == "keys.test":
            self.jwks_fetches += 1
            return httpx.Response(self.jwks_status, json={"keys": self.jwks})
        assert request.url.params["key"] == "k"
        body = json.loads(request.content or b"{}")
        if path.endswith("accounts:lookup"):
            if self.lookup_failure == "timeout":
                raise httpx.ReadTimeout("lookup too slow", request=request)
            if self.lookup_failure == "html":
                return httpx.Response(200, text="<html>oops</html>")
            if self.lookup_failure == "odd-record":
                return httpx.Response(200, json={"users": ["uid-1"]})
            if self.lookup_status != 200:
                return httpx.Response(self.lookup_status, json={"error": {"message": "BOOM"}})
            return httpx.Response(200, json={"users": self.lookup_users})
        if path.endswith("accounts:signUp"):
            if self.signup_error:
                return httpx.Response(400, json={"error": {"message": self.signup_error}})
            return httpx.Response(200, json={"localId": "uid-new", "idToken": "fresh", "email": body["email"]})
        if path.endswith("accounts:delete"):
            return httpx.Response(200, json={})
        return httpx.Response(404)


@pytest.fixture
def key():
    return make_key("k1")


@pytest.fixture
def service(key) -> IdentityService:
    _, jwk = key
    return IdentityService([jwk])


def provider_for(service: IdentityService) -> FirebaseIdentityProvider:
    http = httpx.AsyncClient(transport=httpx.MockTransport(service.handler))
    return FirebaseIdentityProvider(settings=SETTINGS, http=http)


def token(key, **overrides) -> str:
    private, _ = key
    claims = {"iss": "https://securetoken.google.com/proj", "aud": "proj"}
    claims.update(overrides)
    return sign(private, "k1", **claims)


@pytest.mark.asyncio
async def test_verify_enriches_principal(service: IdentityService, key) -> None:
    principal = await provider_for(service).verify(token(key))
    assert principal.subject == "uid-1"
    assert principal.email == "a@b.com"
    assert principal.display_name == "Ada L"
    assert principal.claims["aud"] == "proj"
    with pytest.raises(TypeError):
        principal.claims["sub"] = "someone-else"  # type: ignore[index]


@pytest.mark.asyncio
async def test_enrichment_failure_is_not_fatal(service: IdentityService, key) -> None:
    service.lookup_status = 503
    principal = await provider_for(service).verify(token(key, email=None))
    assert principal.subject == "uid-1"
    assert principal.email is None
    assert principal.display_name is None


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", ["timeout", "html", "odd-record"])
async def test_enrichment_timeout_or_bad_body_is_not_fatal(
    service: IdentityService, key, failure: str
) -> None:
    service.lookup_failure = failure
    principal = await provider_for(service).verify(token(key, email="claims@b.com", name="From Claims"))
    assert principal.subject == "uid-1"
    assert principal.email == "claims@b.com"
    assert principal.display_name == "From Claims"


@pytest.mark.asyncio
async def test_malformed_token_is_rejected_without_fetching_keys(service: IdentityService) -> None:
    service.jwks_status = 503
    with pytest.raises(InvalidCredential):
        await provider_for(service).verify("garbage")
    assert service.jwks_fetches == 0


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(service: IdentityService, key) -> None:
    provider = provider_for(service)
    with pytest.raises(InvalidCredential):
        await provider.verify(token(key, aud="someone-else"))
    with pytest.raises(InvalidCredential):
        await provider.verify("garbage")
    # Rejected credentials never reach the profile lookup.
    assert not [r for r in service.requests if r.url.path.endswith("accounts:lookup")]


@pytest.mark.asyncio
async def test_empty_credential_is_missing(service: IdentityService) -> None:
    with pytest.raises(MissingCredential):
        await provider_for(service).verify("")
    assert service.requests == []


@pytest.mark.asyncio
async def test_keys_are_cached_and_refreshed_on_rotation(service: IdentityService, key) -> None:
    provider = provider_for(service)
    await provider.verify(token(key))
    await provider.verify(token(key))
    assert service.jwks_fetches == 1

    rotated_private, rotated_jwk = make_key("k2")
    service.jwks = [rotated_jwk]
    rotated = sign(rotated_private, "k2", iss="https://securetoken.google.com/proj", aud="proj")
    principal = await provider.verify(rotated)
    assert principal.subject == "uid-1"
    assert service.jwks_fetches == 2


@pytest.mark.asyncio
async def test_create_identity(service: IdentityService) -> None:
    created = await provider_for(service).create_identity(email="a@b.com", password="secret1")
    assert created.subject == "uid-new"
    assert created.id_token == "fresh"


@pytest.mark.asyncio
@pytest.mark.parametrize("code", ["EMAIL_EXISTS", "WEAK_PASSWORD : Password should be at least 6 characters"])
async def test_create_identity_client_errors(service: IdentityService, code: str) -> None:
    service.signup_error = code
    with pytest.raises(ValidationError):
        await provider_for(service).create_identity(email="a@b.com", password="x")


@pytest.mark.asyncio
async def test_create_identity_unknown_error_is_internal(service: IdentityService) -> None:
    service.signup_error = "OPERATION_NOT_ALLOWED"
    with pytest.raises(IdentityServiceError):
        await provider_for(service).create_identity(email="a@b.com", password="secret1")


@pytest.mark.asyncio
async def test_delete_identity_uses_id_token(service: IdentityService) -> None:
    provider = provider_for(service)
    await provider.delete_identity(CreatedIdentity(subject="uid-new", email="a@b.com", id_token="fresh"))
    assert json.loads(service.requests[-1].content) == {"idToken": "fresh"}

    with pytest.raises(IdentityServiceError):
        await provider.delete_identity(CreatedIdentity(subject="uid-new", email="a@b.com"))


@pytest.mark.asyncio
async def test_timeouts_surface_as_dependency_timeout(key) -> None:
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(slow))
    provider = FirebaseIdentityProvider(settings=SETTINGS, http=http)
    with pytest.raises(DependencyTimeout):
        await provider.create_identity(email="a@b.com", password="secret1")
    with pytest.raises(DependencyTimeout):
        await provider.verify(token(key))
