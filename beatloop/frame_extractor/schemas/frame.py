"""Decoded animation frames."""

from pathlib import Path

from pydantic import Field, model_validator

from beatloop.common.base_beatloop_model import BaseBeatloopModel


class Frame(BaseBeatloopModel):
    """A single decoded still frame stored on disk."""

    index: int = Field(ge=0)
    path: Path


class FrameSet(BaseBeatloopModel):
    """All frames of an animation, in native playback order."""

    frames: list[Frame] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_order(self) -> "FrameSet":
        for position, frame in enumerate(self.frames):
            if frame.index != position:
                msg = f"Frame at position {position} has index {frame.index}"
                raise ValueError(msg)
        return self

    @property
    def frame_count(self) -> int:
        """Return the number of frames."""
        return len(self.frames)
