"""Outcome of a finished render job."""

from pathlib import Path

from beatloop.common.base_beatloop_model import BaseBeatloopModel


class RenderResult(BaseBeatloopModel):
    """The final video and the timeline figures that produced it."""

    job_id: str
    final_path: Path
    frame_count: int
    beat_count: int
    entry_count: int
