"""Scratch directory layout of a render job."""

from pathlib import Path

from beatloop.common.base_beatloop_model import BaseBeatloopModel


class RenderArtifacts(BaseBeatloopModel):
    """Paths of every file a render job reads or writes.

    All paths live inside the job's own scratch directory.
    """

    scratch_dir: Path

    @property
    def audio_path(self) -> Path:
        return self.scratch_dir / "audio.mp3"

    @property
    def frames_dir(self) -> Path:
        # Frames sit next to the concat list so relative references resolve
        return self.scratch_dir

    @property
    def concat_list_path(self) -> Path:
        return self.scratch_dir / "filelist.txt"

    @property
    def video_path(self) -> Path:
        return self.scratch_dir / "video.mp4"

    @property
    def final_path(self) -> Path:
        return self.scratch_dir / "final.mp4"
