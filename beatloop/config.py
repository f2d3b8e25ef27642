"""Render service configuration."""

import os
import tempfile
from functools import cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field

from beatloop.common.base_beatloop_model import BaseBeatloopModel

# Load .env file from the project root
_project_dir = Path(__file__).parent.parent
load_dotenv(_project_dir / ".env")


class RenderConfig(BaseBeatloopModel):
    """Configuration for the render service."""

    ffmpeg_binary: str = "ffmpeg"
    scratch_root: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))

    # Per-file upload ceiling (50MB, matches the upload limit of the web client)
    max_upload_bytes: int = Field(default=50 * 1024 * 1024, gt=0)

    output_filename: str = "output.mp4"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Ceiling on beats x frames, keeps one request from building a huge list
    max_timeline_entries: int = Field(default=200_000, gt=0)

    # Thread pool used for GIF decoding
    decode_workers: int = Field(default=2, gt=0)

    # How often a running render checks whether the client went away
    disconnect_poll_seconds: float = Field(default=0.5, gt=0)


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ValueError(msg) from e


def _float_from_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        msg = f"{name} must be a number, got {raw!r}"
        raise ValueError(msg) from e


def load_render_config() -> RenderConfig:
    """Build render configuration from environment variables.

    Environment variables:
        BEATLOOP_FFMPEG_BINARY: ffmpeg executable (default: ffmpeg)
        BEATLOOP_SCRATCH_ROOT: Parent directory for per-job scratch dirs
        BEATLOOP_MAX_UPLOAD_BYTES: Per-file upload ceiling in bytes
        BEATLOOP_OUTPUT_FILENAME: Filename of the returned video
        BEATLOOP_CORS_ORIGINS: Comma separated allowed origins (default: *)
        BEATLOOP_MAX_TIMELINE_ENTRIES: Most entries one edit-decision list may hold
        BEATLOOP_DECODE_WORKERS: Threads available for GIF decoding
        BEATLOOP_DISCONNECT_POLL_SECONDS: Client disconnect polling interval
    """
    scratch_root = os.environ.get("BEATLOOP_SCRATCH_ROOT", "") or tempfile.gettempdir()
    origins = os.environ.get("BEATLOOP_CORS_ORIGINS", "*")

    return RenderConfig(
        ffmpeg_binary=os.environ.get("BEATLOOP_FFMPEG_BINARY", "") or "ffmpeg",
        scratch_root=Path(scratch_root).expanduser(),
        max_upload_bytes=_int_from_env("BEATLOOP_MAX_UPLOAD_BYTES", 50 * 1024 * 1024),
        output_filename=os.environ.get("BEATLOOP_OUTPUT_FILENAME", "") or "output.mp4",
        cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
        max_timeline_entries=_int_from_env("BEATLOOP_MAX_TIMELINE_ENTRIES", 200_000),
        decode_workers=_int_from_env("BEATLOOP_DECODE_WORKERS", 2),
        disconnect_poll_seconds=_float_from_env("BEATLOOP_DISCONNECT_POLL_SECONDS", 0.5),
    )


@cache
def get_render_config() -> RenderConfig:
    """Provide the process-wide render configuration."""
    return load_render_config()
