"""Render routes."""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from beatloop.api.file_response import RenderFileResponse
from beatloop.common.exceptions import DeliveryError
from beatloop.config import RenderConfig, get_render_config
from beatloop.pipeline.job_runner import JobRunner
from beatloop.pipeline.schemas import RenderRequest, RenderResult
from beatloop.render_pipeline.providers import render_pipeline_service
from beatloop.render_pipeline.service import RenderPipelineService
from beatloop.timeline_builder.service import parse_seconds

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_upload(upload: UploadFile | None, max_bytes: int) -> bytes | None:
    """Read an optional upload, enforcing the size ceiling."""
    if upload is None:
        return None

    contents = await upload.read(max_bytes + 1)
    await upload.close()
    if len(contents) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"{upload.filename or 'upload'} exceeds {max_bytes} bytes",
        )
    return contents


async def _run_until_disconnect(
    runner: JobRunner,
    http_request: Request,
    poll_seconds: float,
) -> RenderResult:
    """Run the job, cancelling it if the client goes away."""
    task = asyncio.create_task(runner.run())
    try:
        while not task.done():
            await asyncio.wait({task}, timeout=poll_seconds)
            if not task.done() and await http_request.is_disconnected():
                logger.warning("[job=%s] Client disconnected, cancelling render", runner.job_id)
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                msg = "client disconnected before the render finished"
                raise DeliveryError(msg)
    except asyncio.CancelledError:
        task.cancel()
        raise
    return task.result()


@router.post("/")
async def create_render(
    http_request: Request,
    gif: UploadFile | None = File(None),
    audio: UploadFile | None = File(None),
    time_per_beat: str | None = Form(None, alias="timePerBeat"),
    audio_duration: str | None = Form(None, alias="audioDuration"),
    config: RenderConfig = Depends(get_render_config),
    render_pipeline: RenderPipelineService = Depends(render_pipeline_service),
) -> RenderFileResponse:
    """Loop an animated GIF to the beat and mux it with the audio clip."""
    animation_bytes = await _read_upload(gif, config.max_upload_bytes)
    audio_bytes = await _read_upload(audio, config.max_upload_bytes)

    logger.info(
        "Render requested: gif=%s, audio=%s, timePerBeat=%s, audioDuration=%s",
        gif.filename if gif else None,
        audio.filename if audio else None,
        time_per_beat,
        audio_duration,
    )

    request = RenderRequest(
        animation_bytes=animation_bytes,
        audio_bytes=audio_bytes,
        time_per_beat=parse_seconds(time_per_beat, "timePerBeat"),
        audio_duration=parse_seconds(audio_duration, "audioDuration"),
    )

    runner = JobRunner(request, config=config, render_pipeline=render_pipeline)
    try:
        result = await _run_until_disconnect(runner, http_request, config.disconnect_poll_seconds)
    except BaseException:
        runner.cleanup()
        raise

    return RenderFileResponse(
        result.final_path,
        job_id=result.job_id,
        filename=config.output_filename,
        on_close=runner.cleanup,
    )
