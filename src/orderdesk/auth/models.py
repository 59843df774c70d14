"""
orderdesk.auth.models

Auth domain models.

Responsibilities:
- Define the verified caller identity (`Principal`) passed into handlers and services.
- Define the result of provisioning a new external identity.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Identity asserted by the identity service for the current request.

    Lives for one request and is never persisted. `subject` is the external
    subject id and the join key to the internal user row.
    """

    subject: str
    email: str | None = None
    display_name: str | None = None
    claims: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not self.subject:
            raise ValueError("principal subject must be non-empty")
        if not isinstance(self.claims, MappingProxyType):
            # Read-only view so downstream code cannot mutate verified claims.
            object.__setattr__(self, "claims", MappingProxyType(dict(self.claims)))


@dataclass(frozen=True, slots=True)
class CreatedIdentity:
    subject: str
    email: str
    # Short-lived credential of the new account; only used to roll the account back.
    id_token: str | None = field(default=None, repr=False)


# --- Module Notes -----------------------------------------------------------
# Keep these models free of framework imports; they cross API, service and
# identity-client boundaries.
