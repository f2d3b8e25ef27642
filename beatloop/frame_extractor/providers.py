"""Providers for frame extractor service."""

from functools import cache

from beatloop.frame_extractor.service import FrameExtractorService


@cache
def frame_extractor_service() -> FrameExtractorService:
    """Provide a cached instance of the FrameExtractorService."""
    return FrameExtractorService()
