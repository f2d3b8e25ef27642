"""Edit-decision list schemas."""

from pydantic import Field

from beatloop.common.base_beatloop_model import BaseBeatloopModel

# The concat demuxer's lexer is given durations with a fixed precision
DURATION_DECIMALS = 4


class TimelineEntry(BaseBeatloopModel):
    """One frame shown for a fixed duration."""

    frame_ref: str = Field(min_length=1)
    duration_seconds: float = Field(gt=0)

    @property
    def formatted_duration(self) -> str:
        """Return the duration rounded for the encoder."""
        return f"{self.duration_seconds:.{DURATION_DECIMALS}f}"


class Timeline(BaseBeatloopModel):
    """Flat, ordered edit-decision list for the assemble stage."""

    entries: list[TimelineEntry]
    frame_count: int = Field(gt=0)
    beat_count: int = Field(gt=0)
    per_frame_duration: float = Field(gt=0)

    @property
    def entry_count(self) -> int:
        """Return the number of entries in the list."""
        return len(self.entries)

    def to_concat_script(self) -> str:
        """Serialize the timeline as an ffmpeg concat demuxer script.

        Each entry becomes a ``file`` line followed by a ``duration`` line.
        """
        lines: list[str] = []
        for entry in self.entries:
            lines.append(f"file {entry.frame_ref}\n")
            lines.append(f"duration {entry.formatted_duration}\n")
        return "".join(lines)
