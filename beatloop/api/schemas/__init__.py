"""API schemas for responses."""

from beatloop.api.schemas.responses import ErrorResponse, HealthResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
]
