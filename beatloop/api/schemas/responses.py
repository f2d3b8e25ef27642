"""API response schemas."""

from beatloop.common.base_beatloop_model import BaseBeatloopModel


class ErrorResponse(BaseBeatloopModel):
    """Body returned when a render job fails."""

    detail: str


class HealthResponse(BaseBeatloopModel):
    """Body returned by the health check."""

    status: str
