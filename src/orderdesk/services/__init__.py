"""
orderdesk.services

Service-layer package.

Responsibilities:
- Own validation, authorization and transaction boundaries.
- Convert storage/identity failures into the `orderdesk.errors` taxonomy.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services take the verified Principal as an explicit argument and never reach
# into request state.
