"""Shared fixtures: in-memory GIFs and a stand-in ffmpeg executable."""

import io
import stat
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from beatloop.config import RenderConfig
from beatloop.frame_extractor.schemas import Frame, FrameSet

FRAME_COLORS = [
    (255, 0, 0),
    (0, 255, 0),
    (0, 0, 255),
    (255, 255, 0),
    (255, 0, 255),
    (0, 255, 255),
]

FAKE_FFMPEG_TEMPLATE = """#!/bin/sh
echo "$@" >> "{log_path}"
for last; do :; done
case " $* " in
  *" -f concat "*) stage=1 ;;
  *) stage=2 ;;
esac
echo "fake ffmpeg stage $stage" >&2
if [ "$stage" = "{fail_stage}" ]; then
  echo "simulated failure" >&2
  exit 3
fi
printf 'fake-video' > "$last"
exit 0
"""

SLOW_FFMPEG_TEMPLATE = """#!/bin/sh
echo $$ > "{pid_path}"
exec sleep 30
"""


def make_gif_bytes(frame_count: int, size: tuple[int, int] = (8, 6)) -> bytes:
    """Build an animated GIF whose frames are solid, distinct colors."""
    frames = [Image.new("RGB", size, FRAME_COLORS[i % len(FRAME_COLORS)]) for i in range(frame_count)]
    buffer = io.BytesIO()
    frames[0].save(
        buffer,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=100,
        loop=0,
    )
    return buffer.getvalue()


def make_png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (10, 20, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def make_frame_set(frame_count: int, directory: Path = Path("/scratch")) -> FrameSet:
    """Frame set pointing at files that need not exist."""
    return FrameSet(
        frames=[Frame(index=i, path=directory / f"frame-{i:05d}.png") for i in range(frame_count)]
    )


def _write_script(path: Path, content: str) -> Path:
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def ffmpeg_log(tmp_path: Path) -> Path:
    """File the fake ffmpeg appends its argument vector to, one line per call."""
    return tmp_path / "ffmpeg_calls.log"


@pytest.fixture
def make_fake_ffmpeg(tmp_path: Path, ffmpeg_log: Path) -> Callable[..., Path]:
    """Factory for a fake ffmpeg that writes its output file and can fail a stage."""

    def _make(fail_stage: int | None = None) -> Path:
        content = FAKE_FFMPEG_TEMPLATE.format(
            log_path=ffmpeg_log,
            fail_stage=fail_stage if fail_stage is not None else "none",
        )
        return _write_script(tmp_path / "fake_ffmpeg.sh", content)

    return _make


@pytest.fixture
def slow_ffmpeg(tmp_path: Path) -> tuple[Path, Path]:
    """A fake ffmpeg that records its pid and never finishes on its own."""
    pid_path = tmp_path / "ffmpeg.pid"
    script = _write_script(
        tmp_path / "slow_ffmpeg.sh",
        SLOW_FFMPEG_TEMPLATE.format(pid_path=pid_path),
    )
    return script, pid_path


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    return tmp_path / "scratch"


@pytest.fixture
def make_config(scratch_root: Path) -> Callable[..., RenderConfig]:
    def _make(ffmpeg_binary: Path | str = "ffmpeg", **overrides: object) -> RenderConfig:
        return RenderConfig(
            ffmpeg_binary=str(ffmpeg_binary),
            scratch_root=scratch_root,
            **overrides,
        )

    return _make


def read_calls(ffmpeg_log: Path) -> list[str]:
    if not ffmpeg_log.exists():
        return []
    return ffmpeg_log.read_text().splitlines()


def scratch_entries(scratch_root: Path) -> list[Path]:
    if not scratch_root.exists():
        return []
    return list(scratch_root.iterdir())
