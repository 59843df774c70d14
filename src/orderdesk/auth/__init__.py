"""
orderdesk.auth

Authentication package.

Responsibilities:
- Identity-token validation helpers (JWKS + claim checks).
- Identity service client (verify, provision, delete identities).
- FastAPI auth dependencies producing a typed `Principal`.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Authorization (business membership) lives in `orderdesk.services.membership`;
# this package only answers "who is calling".
