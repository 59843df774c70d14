"""
orderdesk.api

API package for the order service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, error envelope, request/response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: request parsing + auth + delegation to services.
