"""TimelineBuilder service for stretching one animation cycle over one beat."""

import logging
import math
from pathlib import Path

from beatloop.common.exceptions import InvalidTimelineError
from beatloop.frame_extractor.schemas import FrameSet
from beatloop.timeline_builder.schemas import DURATION_DECIMALS, Timeline, TimelineEntry

logger = logging.getLogger(__name__)


def parse_seconds(raw: str | float | None, field_name: str) -> float:
    """Parse a caller-supplied duration in seconds.

    Raises:
        InvalidTimelineError: If the value is missing or not a number.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        msg = f"{field_name} is required"
        raise InvalidTimelineError(msg)
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        msg = f"{field_name} must be a number of seconds, got {raw!r}"
        raise InvalidTimelineError(msg) from e


class TimelineBuilderService:
    """Service for computing the frame timeline of a render."""

    def validate_parameters(self, time_per_beat: float, audio_duration: float) -> None:
        """Check that the beat parameters describe a usable timeline.

        Raises:
            InvalidTimelineError: If either value is not a finite positive
                number, or the beat is longer than the audio.
        """
        for name, value in (("timePerBeat", time_per_beat), ("audioDuration", audio_duration)):
            if not math.isfinite(value):
                msg = f"{name} must be a finite number, got {value}"
                raise InvalidTimelineError(msg)
            if value <= 0:
                msg = f"{name} must be positive, got {value}"
                raise InvalidTimelineError(msg)

        if time_per_beat > audio_duration:
            msg = (
                f"timePerBeat ({time_per_beat}s) must not exceed "
                f"audioDuration ({audio_duration}s)"
            )
            raise InvalidTimelineError(msg)

    def build(
        self,
        frame_set: FrameSet,
        time_per_beat: float,
        audio_duration: float,
        max_entries: int | None = None,
    ) -> Timeline:
        """Build the edit-decision list for a frame set.

        One full animation cycle occupies exactly one beat. The cycle is
        repeated until the audio is covered; the final cycle may overshoot
        the audio and is trimmed when muxing.

        Args:
            frame_set: Decoded frames in playback order.
            time_per_beat: Seconds one animation cycle must last.
            audio_duration: Seconds of audio to cover.
            max_entries: Upper bound on the number of entries, if any.

        Returns:
            The timeline with ``beat_count * frame_count`` entries.
        """
        frame_count = len(frame_set.frames)
        if frame_count == 0:
            msg = "Cannot build a timeline from an empty frame set"
            raise InvalidTimelineError(msg)

        self.validate_parameters(time_per_beat, audio_duration)

        per_frame_duration = time_per_beat / frame_count
        beat_count = math.ceil(audio_duration / time_per_beat)

        if round(per_frame_duration, DURATION_DECIMALS) == 0:
            msg = (
                f"Each of the {frame_count} frames would last {per_frame_duration:.2e}s, "
                f"which rounds to zero; use a longer timePerBeat"
            )
            raise InvalidTimelineError(msg)

        entry_count = beat_count * frame_count
        if max_entries is not None and entry_count > max_entries:
            msg = (
                f"Timeline would need {entry_count} entries "
                f"({beat_count} beats x {frame_count} frames), limit is {max_entries}"
            )
            raise InvalidTimelineError(msg)

        cycle = [
            TimelineEntry(frame_ref=frame.path.name, duration_seconds=per_frame_duration)
            for frame in frame_set.frames
        ]
        entries = [entry for _ in range(beat_count) for entry in cycle]

        logger.info(
            "Timeline built: %d frames x %d beats, %.4fs per frame",
            frame_count,
            beat_count,
            per_frame_duration,
        )

        return Timeline(
            entries=entries,
            frame_count=frame_count,
            beat_count=beat_count,
            per_frame_duration=per_frame_duration,
        )

    def write_concat_list(self, timeline: Timeline, output_path: Path) -> Path:
        """Write the timeline as a concat script next to the frame files.

        Frame references are relative, so the list must live in the same
        directory as the frames.
        """
        output_path.write_text(timeline.to_concat_script(), encoding="utf-8")
        return output_path
