"""Frame extractor schemas."""

from beatloop.frame_extractor.schemas.frame import Frame, FrameSet

__all__ = [
    "Frame",
    "FrameSet",
]
