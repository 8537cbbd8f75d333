"""End-to-end tests for the reel pipeline with a fake ffmpeg."""
import pytest

from reelgen.models.highlight import MeetingInfo
from reelgen.pipeline.errors import FallbackError, InputError
from reelgen.pipeline.fallback import FallbackReason, FallbackSynthesizer, FallbackTier
from reelgen.pipeline.runner import generate_highlight_reel
from reelgen.pipeline.session import ReelSession


@pytest.fixture
def two_highlights(make_highlight):
    return [
        make_highlight(id="act", type="action", priority="low", importanceScore=0.2, timestamp=10000),
        make_highlight(id="urg", type="urgent", priority="high", importanceScore=0.95, timestamp=20000),
    ]


class TestSuccess:
    """Primary path."""

    @pytest.mark.asyncio
    async def test_single_highlight(self, fake_ffmpeg, work_dirs, recording, tmp_path, make_highlight):
        """One decision highlight: 30s clip, intro + clip + outro, no transition."""
        temp_dir, _ = work_dirs
        h = make_highlight(type="decision", priority="high", importanceScore=0.9, timestamp=60000)
        out = tmp_path / "reel.mp4"

        result = await generate_highlight_reel(recording, [h], out)

        assert result.status == "success"
        assert result.path == out and out.exists()
        assert result.reason is None and result.tier is None

        segment_args = fake_ffmpeg.calls[0][0]
        assert segment_args[:4] == ["-ss", "45.000", "-t", "30.000"]
        assert not any("transition" in d for d in fake_ffmpeg.descriptions)

        concat_args = fake_ffmpeg.calls[-1][0]
        list_file = concat_args[concat_args.index("-i") + 1]
        assert fake_ffmpeg.descriptions[-1] == "concatenation"
        assert list(temp_dir.iterdir()) == []
        assert list_file.startswith(str(temp_dir))

    @pytest.mark.asyncio
    async def test_order_and_call_sequence(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        """Urgent-high clip first, then transition, then the action clip."""
        result = await generate_highlight_reel(recording, two_highlights, tmp_path / "reel.mp4")

        assert result.status == "success"
        assert fake_ffmpeg.descriptions == [
            "segment extraction for highlight urg",
            "segment extraction for highlight act",
            "transition urg -> act",
            "intro creation",
            "outro creation",
            "concatenation",
        ]

    @pytest.mark.asyncio
    async def test_manifest_order(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights, monkeypatch):
        from reelgen.pipeline import runner

        captured = {}
        original_assemble = runner.assemble

        async def spy(manifest, output_path, session):
            captured["kinds"] = [k.value for k in manifest.kinds]
            captured["names"] = [p.name for p in manifest.paths]
            return await original_assemble(manifest, output_path, session)

        monkeypatch.setattr(runner, "assemble", spy)
        await generate_highlight_reel(recording, two_highlights, tmp_path / "reel.mp4")

        assert captured["kinds"] == ["intro", "clip", "transition", "clip", "outro"]
        assert "highlight_0_urg" in captured["names"][1]
        assert "highlight_1_act" in captured["names"][3]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("n", [1, 2, 5])
    async def test_call_count(self, fake_ffmpeg, work_dirs, recording, tmp_path, make_highlight, n):
        highlights = [make_highlight(timestamp=i * 1000) for i in range(n)]
        await generate_highlight_reel(recording, highlights, tmp_path / "reel.mp4")
        # clips + transitions + intro + outro + concat
        assert len(fake_ffmpeg.calls) == n + (n - 1) + 2 + 1

    @pytest.mark.asyncio
    async def test_progress_reported(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        updates = []

        async def progress(pct, msg):
            updates.append((pct, msg))

        await generate_highlight_reel(
            recording, two_highlights, tmp_path / "reel.mp4", progress_callback=progress
        )

        assert updates[-1][0] == 100
        percents = [p for p, _ in updates]
        assert percents == sorted(percents)

    @pytest.mark.asyncio
    async def test_caller_session_torn_down(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        session = ReelSession(meeting_id="m1")
        await generate_highlight_reel(recording, two_highlights, tmp_path / "reel.mp4", session=session)

        assert session.is_torn_down
        assert len(session.temp_files) == 6  # 2 clips, 1 transition, intro, outro, list
        assert not any(p.exists() for p in session.temp_files)

    @pytest.mark.asyncio
    async def test_source_untouched(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        await generate_highlight_reel(recording, two_highlights, tmp_path / "reel.mp4")
        assert recording.read_bytes() == b"recording"


class TestInputErrors:
    """Input errors are raised, never degraded."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("highlights", [[], None])
    async def test_empty_highlights(self, fake_ffmpeg, work_dirs, recording, tmp_path, highlights):
        temp_dir, output_dir = work_dirs
        with pytest.raises(InputError):
            await generate_highlight_reel(recording, highlights, tmp_path / "reel.mp4")

        assert fake_ffmpeg.calls == []
        assert list(output_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_source(self, fake_ffmpeg, work_dirs, tmp_path, make_highlight):
        temp_dir, output_dir = work_dirs
        with pytest.raises(InputError):
            await generate_highlight_reel(tmp_path / "nope.mp4", [make_highlight()], tmp_path / "reel.mp4")

        assert fake_ffmpeg.calls == []
        assert list(temp_dir.iterdir()) == []
        assert list(output_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_timestamp_past_recording(self, fake_ffmpeg, work_dirs, recording, tmp_path, make_highlight):
        info = MeetingInfo(duration_ms=30000)
        late = make_highlight(id="late", timestamp=45000)

        with pytest.raises(InputError, match="late"):
            await generate_highlight_reel(recording, [late], tmp_path / "reel.mp4", info)
        assert fake_ffmpeg.calls == []

    @pytest.mark.asyncio
    async def test_timestamp_at_end_allowed(self, fake_ffmpeg, work_dirs, recording, tmp_path, make_highlight):
        info = MeetingInfo(duration_ms=30000)
        result = await generate_highlight_reel(
            recording, [make_highlight(timestamp=30000)], tmp_path / "reel.mp4", info
        )
        assert result.status == "success"

    @pytest.mark.asyncio
    async def test_session_already_torn_down(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        temp_dir, output_dir = work_dirs
        session = ReelSession()
        session.teardown()

        with pytest.raises(InputError, match="torn down"):
            await generate_highlight_reel(
                recording, two_highlights, tmp_path / "reel.mp4", session=session
            )

        assert fake_ffmpeg.calls == []
        assert list(output_dir.iterdir()) == []


class TestFallback:
    """Degraded outcomes."""

    @pytest.mark.asyncio
    async def test_engine_unavailable(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        fake_ffmpeg.available = False

        result = await generate_highlight_reel(
            recording, two_highlights, tmp_path / "reel.mp4", meeting_id="m42"
        )

        assert result.status == "fallback"
        assert result.is_fallback
        assert result.reason == FallbackReason.ENGINE_UNAVAILABLE
        assert result.to_dict()["reason"] == "engine-unavailable"
        assert not any("segment" in d or "concatenation" in d for d in fake_ffmpeg.descriptions)
        assert "highlight_reel_m42_" in result.path.name
        assert not (tmp_path / "reel.mp4").exists()

    @pytest.mark.asyncio
    async def test_engine_unavailable_text_manifest(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        """With no engine the video tiers fail too and a text file is returned."""
        fake_ffmpeg.available = False
        fake_ffmpeg.fail_on = "fallback"

        result = await generate_highlight_reel(recording, two_highlights, tmp_path / "reel.mp4")

        assert result.tier == FallbackTier.TEXT_MANIFEST
        assert result.path.suffix == ".txt"
        assert result.path.exists()

    @pytest.mark.asyncio
    async def test_segment_failure_mid_loop(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        """A failing second clip aborts the run; nothing partial survives."""
        temp_dir, _ = work_dirs
        fake_ffmpeg.fail_on = "highlight act"

        result = await generate_highlight_reel(recording, two_highlights, tmp_path / "reel.mp4")

        assert result.status == "fallback"
        assert result.reason == FallbackReason.PIPELINE_FAILED
        assert result.tier == FallbackTier.PLACEHOLDER_VIDEO
        assert "simulated" in result.error
        assert list(temp_dir.iterdir()) == []
        assert not (tmp_path / "reel.mp4").exists()
        assert "transition urg -> act" not in fake_ffmpeg.descriptions

    @pytest.mark.asyncio
    async def test_concat_failure(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        temp_dir, _ = work_dirs
        fake_ffmpeg.fail_on = "concatenation"
        out = tmp_path / "reel.mp4"

        result = await generate_highlight_reel(recording, two_highlights, out)

        assert result.reason == FallbackReason.PIPELINE_FAILED
        assert list(temp_dir.iterdir()) == []
        assert not out.exists()

    @pytest.mark.asyncio
    async def test_intro_failure(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        temp_dir, _ = work_dirs
        fake_ffmpeg.fail_on = "intro"

        result = await generate_highlight_reel(recording, two_highlights, tmp_path / "reel.mp4")

        assert result.reason == FallbackReason.PIPELINE_FAILED
        assert list(temp_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_every_fallback_fails(self, fake_ffmpeg, work_dirs, recording, tmp_path, two_highlights):
        fake_ffmpeg.available = False
        session = ReelSession()

        with pytest.raises(FallbackError):
            await generate_highlight_reel(
                recording, two_highlights, tmp_path / "reel.mp4",
                session=session,
                fallback=FallbackSynthesizer(strategies=[]),
            )
        assert session.is_torn_down
