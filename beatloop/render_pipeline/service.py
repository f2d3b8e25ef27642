"""RenderPipeline service for driving the two ffmpeg stages."""

from beatloop.render_pipeline.encoder import build_assemble_args, build_mux_args, run_encoder
from beatloop.render_pipeline.schemas import EncoderStage, RenderArtifacts


class RenderPipelineService:
    """Service for assembling frames into a video and muxing in the audio."""

    def __init__(self, ffmpeg_binary: str = "ffmpeg") -> None:
        self.ffmpeg_binary = ffmpeg_binary

    async def assemble(self, artifacts: RenderArtifacts) -> None:
        """Stage 1: concat script of frames to a silent video."""
        await run_encoder(
            self.ffmpeg_binary,
            EncoderStage.ASSEMBLE,
            build_assemble_args(artifacts.concat_list_path, artifacts.video_path),
        )

    async def mux(self, artifacts: RenderArtifacts) -> None:
        """Stage 2: silent video plus audio to the final video."""
        await run_encoder(
            self.ffmpeg_binary,
            EncoderStage.MUX,
            build_mux_args(artifacts.video_path, artifacts.audio_path, artifacts.final_path),
        )

    async def render(self, artifacts: RenderArtifacts) -> None:
        """Run both stages in order.

        The concat list, frames and audio must already be in place. A
        failing stage raises ``EncodeError`` and later stages do not run.
        """
        await self.assemble(artifacts)
        await self.mux(artifacts)
