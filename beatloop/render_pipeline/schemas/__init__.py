"""Render pipeline schemas."""

from beatloop.render_pipeline.schemas.artifacts import RenderArtifacts
from beatloop.render_pipeline.schemas.stage import EncoderStage

__all__ = [
    "EncoderStage",
    "RenderArtifacts",
]
