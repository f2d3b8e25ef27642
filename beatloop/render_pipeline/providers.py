"""Providers for render pipeline service."""

from functools import cache

from beatloop.config import get_render_config
from beatloop.render_pipeline.service import RenderPipelineService


@cache
def render_pipeline_service() -> RenderPipelineService:
    """Provide a cached instance of the RenderPipelineService."""
    return RenderPipelineService(ffmpeg_binary=get_render_config().ffmpeg_binary)
