"""
orderdesk.errors

Service-level error taxonomy.

Responsibilities:
- Give each failure class a stable HTTP status and a client-safe message.
- Keep internal details (storage/identity failures) out of the public message.

Services raise these; `orderdesk.api.errors` turns them into the
`{"error": "..."}` envelope.
"""

from __future__ import annotations

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class ServiceError(Exception):
    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = HTTP_400_BAD_REQUEST
    default_message = "bad request"


class MissingCredential(ServiceError):
    status_code = HTTP_401_UNAUTHORIZED
    default_message = "missing bearer"


class InvalidCredential(ServiceError):
    status_code = HTTP_401_UNAUTHORIZED
    default_message = "invalid token"


class Forbidden(ServiceError):
    # Deliberately one message for "no such business", "not a member" and "not registered".
    status_code = HTTP_403_FORBIDDEN
    default_message = "forbidden"


class NotInitialized(ServiceError):
    # Authenticated with the identity provider but never registered here.
    status_code = HTTP_404_NOT_FOUND
    default_message = "user not initialized"


class InternalError(ServiceError):
    """
    Storage or identity-service failure. `message` is what operators see in logs;
    clients always get `public_message`.
    """

    public_message = "internal server error"


class IdentityServiceError(InternalError):
    pass


class DependencyTimeout(InternalError):
    pass


# --- Module Notes -----------------------------------------------------------
# Only `InternalError` subclasses hide their message from clients; every other
# class is a terminal, client-caused outcome whose message is safe to return.
