"""
orderdesk.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Request id propagation for consistent log enrichment.
"""

# Package marker.
