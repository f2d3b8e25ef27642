"""Render job runner that orchestrates extraction, timeline and encoding."""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
import uuid
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import TracebackType

from beatloop.common.exceptions import MissingInputError
from beatloop.config import RenderConfig, get_render_config
from beatloop.frame_extractor.providers import frame_extractor_service
from beatloop.pipeline.schemas import RenderRequest, RenderResult
from beatloop.render_pipeline.providers import render_pipeline_service
from beatloop.render_pipeline.schemas import RenderArtifacts
from beatloop.render_pipeline.service import RenderPipelineService
from beatloop.timeline_builder.providers import timeline_builder_service

logger = logging.getLogger(__name__)


class JobRunner:
    """Runs one render request from uploaded bytes to the final video.

    Every job owns a private scratch directory keyed by its job ID. The
    directory is removed when the job fails, and by ``cleanup()`` once the
    caller is done with the final video.
    """

    def __init__(
        self,
        request: RenderRequest,
        config: RenderConfig | None = None,
        render_pipeline: RenderPipelineService | None = None,
    ) -> None:
        """Initialize the job runner.

        Args:
            request: The render request to process.
            config: Service configuration. Defaults to the environment config.
            render_pipeline: Encoder driver. Defaults to the shared service.
        """
        self.job_id = uuid.uuid4().hex
        self.request = request
        self.config = config or get_render_config()
        self.render_pipeline = render_pipeline or render_pipeline_service()
        self.executor = ThreadPoolExecutor(max_workers=self.config.decode_workers)
        self.scratch_dir: Path | None = None

    async def __aenter__(self) -> JobRunner:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    async def run(self) -> RenderResult:
        """Execute the full render.

        Returns:
            The final video location and timeline figures.

        Raises:
            MissingInputError: If a payload is absent. No files are created.
            InvalidTimelineError: If the beat parameters are unusable.
            DecodeError: If the animation cannot be decoded.
            EncodeError: If either encoder stage fails.
        """
        request = self.request
        if not request.animation_bytes:
            msg = "no animation uploaded"
            raise MissingInputError(msg)
        if not request.audio_bytes:
            msg = "no audio uploaded"
            raise MissingInputError(msg)

        timeline_builder = timeline_builder_service()
        timeline_builder.validate_parameters(request.time_per_beat, request.audio_duration)

        logger.info(
            "[job=%s] Starting render: timePerBeat=%.4fs, audioDuration=%.4fs",
            self.job_id,
            request.time_per_beat,
            request.audio_duration,
        )

        try:
            artifacts = self._create_scratch()
            artifacts.audio_path.write_bytes(request.audio_bytes)

            # Stage 1: Decode frames (CPU bound, off the event loop)
            loop = asyncio.get_running_loop()
            frame_set = await loop.run_in_executor(
                self.executor,
                frame_extractor_service().extract,
                request.animation_bytes,
                artifacts.frames_dir,
            )
            logger.info("[job=%s] Extracted %d frames", self.job_id, frame_set.frame_count)

            # Stage 2: Build the edit-decision list (can be large, also off the loop)
            timeline = await loop.run_in_executor(
                self.executor,
                timeline_builder.build,
                frame_set,
                request.time_per_beat,
                request.audio_duration,
                self.config.max_timeline_entries,
            )
            await loop.run_in_executor(
                self.executor,
                timeline_builder.write_concat_list,
                timeline,
                artifacts.concat_list_path,
            )
            logger.info(
                "[job=%s] Wrote %d timeline entries (%d beats) to %s",
                self.job_id,
                timeline.entry_count,
                timeline.beat_count,
                artifacts.concat_list_path,
            )

            # Stage 3: Encode frames, then mux audio
            await self.render_pipeline.render(artifacts)

        except asyncio.CancelledError:
            logger.warning("[job=%s] Render cancelled", self.job_id)
            self.cleanup()
            raise
        except Exception:
            logger.exception("[job=%s] Render failed", self.job_id)
            self.cleanup()
            raise

        logger.info("[job=%s] Render completed: %s", self.job_id, artifacts.final_path)
        return RenderResult(
            job_id=self.job_id,
            final_path=artifacts.final_path,
            frame_count=timeline.frame_count,
            beat_count=timeline.beat_count,
            entry_count=timeline.entry_count,
        )

    def cleanup(self) -> None:
        """Remove the job's scratch directory. Safe to call more than once."""
        self.executor.shutdown(wait=False)
        if self.scratch_dir is not None and self.scratch_dir.exists():
            logger.info("[job=%s] Cleaning up scratch directory: %s", self.job_id, self.scratch_dir)
            shutil.rmtree(self.scratch_dir, ignore_errors=True)
        self.scratch_dir = None

    def _create_scratch(self) -> RenderArtifacts:
        """Create the job-scoped scratch directory."""
        self.config.scratch_root.mkdir(parents=True, exist_ok=True)
        self.scratch_dir = Path(
            tempfile.mkdtemp(prefix=f"beatloop_{self.job_id}_", dir=self.config.scratch_root)
        )
        return RenderArtifacts(scratch_dir=self.scratch_dir)
