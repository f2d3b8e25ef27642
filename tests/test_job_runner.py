"""Tests for the render job runner with a stand-in ffmpeg."""

import asyncio
import threading

import pytest

from beatloop.common.exceptions import DecodeError, EncodeError, InvalidTimelineError, MissingInputError
from beatloop.pipeline.job_runner import JobRunner
from beatloop.pipeline.schemas import RenderRequest
from beatloop.render_pipeline.service import RenderPipelineService
from beatloop.timeline_builder.service import TimelineBuilderService
from conftest import make_gif_bytes, read_calls, scratch_entries

AUDIO_BYTES = b"ID3 fake mp3 payload"


def _request(**overrides) -> RenderRequest:
    values = {
        "animation_bytes": make_gif_bytes(4),
        "audio_bytes": AUDIO_BYTES,
        "time_per_beat": 2.0,
        "audio_duration": 5.0,
    }
    values.update(overrides)
    return RenderRequest(**values)


def _runner(request: RenderRequest, config) -> JobRunner:
    return JobRunner(
        request,
        config=config,
        render_pipeline=RenderPipelineService(ffmpeg_binary=config.ffmpeg_binary),
    )


class TestRun:
    """Tests for JobRunner.run."""

    async def test_success_produces_final_video(self, make_config, make_fake_ffmpeg, ffmpeg_log):
        runner = _runner(_request(), make_config(make_fake_ffmpeg()))

        result = await runner.run()

        assert result.job_id == runner.job_id
        assert result.frame_count == 4
        assert result.beat_count == 3
        assert result.entry_count == 12
        assert result.final_path.read_bytes() == b"fake-video"
        assert result.final_path.parent == runner.scratch_dir
        assert runner.job_id in runner.scratch_dir.name

        concat_list = (runner.scratch_dir / "filelist.txt").read_text().splitlines()
        assert len(concat_list) == 24
        assert concat_list[:2] == ["file frame-00000.png", "duration 0.5000"]
        assert (runner.scratch_dir / "audio.mp3").read_bytes() == AUDIO_BYTES
        assert len(read_calls(ffmpeg_log)) == 2

        scratch_dir = runner.scratch_dir
        runner.cleanup()
        assert not scratch_dir.exists()

    async def test_missing_animation_creates_nothing(self, make_config, make_fake_ffmpeg, scratch_root, ffmpeg_log):
        runner = _runner(_request(animation_bytes=None), make_config(make_fake_ffmpeg()))

        with pytest.raises(MissingInputError, match="no animation uploaded"):
            await runner.run()

        assert runner.scratch_dir is None
        assert not scratch_root.exists()
        assert read_calls(ffmpeg_log) == []

    async def test_empty_audio_is_missing(self, make_config, make_fake_ffmpeg, scratch_root):
        runner = _runner(_request(audio_bytes=b""), make_config(make_fake_ffmpeg()))

        with pytest.raises(MissingInputError, match="no audio uploaded"):
            await runner.run()

        assert not scratch_root.exists()

    async def test_invalid_timeline_before_any_work(self, make_config, make_fake_ffmpeg, scratch_root, ffmpeg_log):
        runner = _runner(_request(time_per_beat=0.0), make_config(make_fake_ffmpeg()))

        with pytest.raises(InvalidTimelineError):
            await runner.run()

        assert not scratch_root.exists()
        assert read_calls(ffmpeg_log) == []

    async def test_decode_error_aborts_before_encoding(self, make_config, make_fake_ffmpeg, scratch_root, ffmpeg_log):
        runner = _runner(_request(animation_bytes=b"not a gif"), make_config(make_fake_ffmpeg()))

        with pytest.raises(DecodeError):
            await runner.run()

        assert scratch_entries(scratch_root) == []
        assert read_calls(ffmpeg_log) == []

    async def test_assemble_failure_cleans_up(self, make_config, make_fake_ffmpeg, scratch_root, ffmpeg_log):
        """Stage 1 failing stops the job, skips stage 2 and removes scratch files."""
        runner = _runner(_request(), make_config(make_fake_ffmpeg(fail_stage=1)))

        with pytest.raises(EncodeError) as exc_info:
            await runner.run()

        assert exc_info.value.stage == 1
        assert exc_info.value.exit_code == 3
        assert len(read_calls(ffmpeg_log)) == 1
        assert scratch_entries(scratch_root) == []
        assert runner.scratch_dir is None

    async def test_mux_failure_cleans_up(self, make_config, make_fake_ffmpeg, scratch_root):
        runner = _runner(_request(), make_config(make_fake_ffmpeg(fail_stage=2)))

        with pytest.raises(EncodeError) as exc_info:
            await runner.run()

        assert exc_info.value.stage == 2
        assert scratch_entries(scratch_root) == []

    async def test_cancellation_cleans_up(self, make_config, slow_ffmpeg, scratch_root):
        script, pid_path = slow_ffmpeg
        runner = _runner(_request(), make_config(script))
        task = asyncio.create_task(runner.run())

        for _ in range(200):
            if pid_path.exists():
                break
            await asyncio.sleep(0.025)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert scratch_entries(scratch_root) == []


class TestIsolation:
    """Concurrent jobs never share scratch paths."""

    async def test_concurrent_jobs_use_separate_scratch(self, make_config, make_fake_ffmpeg, scratch_root):
        config = make_config(make_fake_ffmpeg())
        first = _runner(_request(), config)
        second = _runner(_request(animation_bytes=make_gif_bytes(2)), config)

        first_result, second_result = await asyncio.gather(first.run(), second.run())

        assert first.job_id != second.job_id
        assert first_result.final_path != second_result.final_path
        assert first_result.entry_count == 12
        assert second_result.entry_count == 6
        assert len(scratch_entries(scratch_root)) == 2

        first.cleanup()
        second.cleanup()
        assert scratch_entries(scratch_root) == []


class TestContextManager:
    async def test_exit_removes_scratch(self, make_config, make_fake_ffmpeg):
        async with _runner(_request(), make_config(make_fake_ffmpeg())) as runner:
            result = await runner.run()
            assert result.final_path.exists()

        assert not result.final_path.parent.exists()

    async def test_cleanup_is_idempotent(self, make_config, make_fake_ffmpeg):
        runner = _runner(_request(), make_config(make_fake_ffmpeg()))
        await runner.run()

        runner.cleanup()
        runner.cleanup()
        assert runner.scratch_dir is None


class TestTimelineWork:
    """Timeline construction stays off the event loop and is bounded."""

    async def test_entry_ceiling_aborts_before_encoding(self, make_config, make_fake_ffmpeg, scratch_root, ffmpeg_log):
        runner = _runner(_request(), make_config(make_fake_ffmpeg(), max_timeline_entries=11))

        with pytest.raises(InvalidTimelineError, match="limit is 11"):
            await runner.run()

        assert read_calls(ffmpeg_log) == []
        assert scratch_entries(scratch_root) == []

    async def test_build_and_write_run_in_worker_threads(self, monkeypatch, make_config, make_fake_ffmpeg):
        loop_thread = threading.get_ident()
        seen_threads: dict[str, int] = {}
        original_build = TimelineBuilderService.build
        original_write = TimelineBuilderService.write_concat_list

        def recording_build(self, *args, **kwargs):
            seen_threads["build"] = threading.get_ident()
            return original_build(self, *args, **kwargs)

        def recording_write(self, *args, **kwargs):
            seen_threads["write"] = threading.get_ident()
            return original_write(self, *args, **kwargs)

        monkeypatch.setattr(TimelineBuilderService, "build", recording_build)
        monkeypatch.setattr(TimelineBuilderService, "write_concat_list", recording_write)

        async with _runner(_request(), make_config(make_fake_ffmpeg())) as runner:
            await runner.run()

        assert set(seen_threads) == {"build", "write"}
        assert loop_thread not in seen_threads.values()
