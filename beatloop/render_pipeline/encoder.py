"""ffmpeg argument shapes and subprocess execution."""

import asyncio
import logging
import re
from pathlib import Path

from beatloop.common.exceptions import EncodeError
from beatloop.render_pipeline.schemas import EncoderStage

logger = logging.getLogger(__name__)

# libx264 rejects odd dimensions, so round both down to even
EVEN_DIMENSIONS_FILTER = (
    "format=rgba,scale=trunc(iw/2)*2:trunc(ih/2)*2:flags=lanczos,format=yuv420p"
)


def build_assemble_args(concat_list_path: Path, output_path: Path) -> list[str]:
    """Arguments turning a concat script of frames into a silent H.264 video."""
    return [
        "-f", "concat",
        "-safe", "0",
        "-i", str(concat_list_path),
        "-vsync", "vfr",
        "-pix_fmt", "yuv420p",
        "-c:v", "libx264",
        "-movflags", "faststart",
        "-vf", EVEN_DIMENSIONS_FILTER,
        "-y", str(output_path),
    ]


def build_mux_args(video_path: Path, audio_path: Path, output_path: Path) -> list[str]:
    """Arguments muxing the silent video with the audio track.

    Video is copied, audio is transcoded to AAC and the output stops at the
    end of the shorter stream.
    """
    return [
        "-i", str(video_path),
        "-i", str(audio_path),
        "-c:v", "copy",
        "-c:a", "aac",
        "-shortest",
        "-y", str(output_path),
    ]


def _log_diagnostic(stage: EncoderStage, raw_line: bytes) -> None:
    line = raw_line.decode("utf-8", errors="replace").strip()
    if line:
        logger.debug("[ffmpeg stage=%d] %s", stage, line)


async def _relay_diagnostics(stream: asyncio.StreamReader, stage: EncoderStage) -> None:
    """Forward encoder stderr to the log until the stream closes.

    ffmpeg redraws its progress line with carriage returns, so both CR and
    LF end a line.
    """
    pending = b""
    while True:
        chunk = await stream.read(4096)
        if not chunk:
            break
        *lines, pending = re.split(rb"[\r\n]", pending + chunk)
        for raw_line in lines:
            _log_diagnostic(stage, raw_line)
    _log_diagnostic(stage, pending)


async def run_encoder(ffmpeg_binary: str, stage: EncoderStage, args: list[str]) -> None:
    """Run one encoder stage and wait for it to finish.

    The wait is a suspension point, so other jobs keep running. If the
    calling task is cancelled the subprocess is killed before the
    cancellation propagates.

    Raises:
        EncodeError: If the process cannot be started or exits non-zero.
    """
    logger.info("Encoder stage %d: %s %s", stage, ffmpeg_binary, " ".join(args))

    try:
        proc = await asyncio.create_subprocess_exec(
            ffmpeg_binary,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise EncodeError(int(stage), None, log_message=str(e)) from e

    try:
        await _relay_diagnostics(proc.stderr, stage)  # type: ignore[arg-type]
        returncode = await proc.wait()
    except asyncio.CancelledError:
        if proc.returncode is None:
            logger.warning("Encoder stage %d cancelled, killing pid %d", stage, proc.pid)
            proc.kill()
            await proc.wait()
        raise

    if returncode != 0:
        raise EncodeError(int(stage), returncode)

    logger.info("Encoder stage %d finished", stage)
