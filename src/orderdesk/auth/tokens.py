"""
orderdesk.auth.tokens

Identity token validation helpers.

Responsibilities:
- Decode and validate RS256 ID tokens against a JWKS key set with strict claim
  requirements (iss/aud/exp/iat/sub).
- Surface "unknown signing key" separately so callers can refresh rotated keys.

Note:
- Token issuance belongs to the identity service; this module never signs tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jwt
from jwt import InvalidTokenError, PyJWKSet


@dataclass(frozen=True, slots=True)
class TokenConfig:
    # Issuer/audience are enforced during decoding.
    issuer: str
    audience: str
    algorithms: tuple[str, ...] = ("RS256",)
    leeway_seconds: int = 0


class TokenValidationError(Exception):
    pass


class UnknownSigningKey(TokenValidationError):
    pass


def read_key_id(token: str) -> str:
    """Key id from the unverified header; malformed tokens fail here without any I/O."""
    try:
        header = jwt.get_unverified_header(token)
    except InvalidTokenError as e:
        raise TokenValidationError(str(e)) from e

    kid = header.get("kid")
    if not kid:
        raise TokenValidationError("token header has no key id")
    return str(kid)


def decode_and_validate(*, cfg: TokenConfig, token: str, keys: PyJWKSet) -> dict[str, Any]:
    kid = read_key_id(token)
    try:
        signing_key = keys[kid]
    except KeyError as e:
        raise UnknownSigningKey(f"no signing key for kid {kid!r}") from e

    try:
        # jwt.decode enforces signature + registered claims (issuer/audience/exp, etc.).
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=list(cfg.algorithms),
            issuer=cfg.issuer,
            audience=cfg.audience,
            leeway=cfg.leeway_seconds,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
            },
        )
    except InvalidTokenError as e:
        raise TokenValidationError(str(e)) from e

    if not str(claims.get("sub", "")):
        raise TokenValidationError("token subject is empty")
    return claims


# --- Module Notes -----------------------------------------------------------
# Key sets are fetched and cached by `auth.identity.JwksCache`; keeping this
# module I/O-free makes it trivially unit-testable with locally generated keys.
