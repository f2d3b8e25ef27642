"""Render job schemas."""

from beatloop.pipeline.schemas.render_request import RenderRequest
from beatloop.pipeline.schemas.render_result import RenderResult

__all__ = [
    "RenderRequest",
    "RenderResult",
]
