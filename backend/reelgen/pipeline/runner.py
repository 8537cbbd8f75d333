"""Highlight reel pipeline runner.

Validates input, then drives clip, transition and bumper rendering and
the final concatenation strictly one ffmpeg call at a time. Any tooling
failure aborts the run, removes its temp files, and falls back to a
degraded artifact.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from reelgen.models.highlight import Highlight, MeetingInfo
from reelgen.utils.ffmpeg import FFmpegError, probe_ffmpeg
from .bumpers import render_intro, render_outro, render_transition
from .errors import InputError
from .fallback import FallbackReason, FallbackSynthesizer, FallbackTier
from .renderer import render_segment
from .scheduler import ScheduledClip, plan_clips
from .session import ReelSession
from .timeline import TimelineManifest, assemble

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], Awaitable[None]]


@dataclass
class PipelineResult:
    """Outcome of one reel run."""
    path: Path
    status: str  # success | fallback
    reason: Optional[FallbackReason] = None
    tier: Optional[FallbackTier] = None
    error: Optional[str] = None
    highlight_count: int = 0

    @property
    def is_fallback(self) -> bool:
        return self.status == "fallback"

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "status": self.status,
            "reason": self.reason.value if self.reason else None,
            "tier": self.tier.value if self.tier else None,
            "error": self.error,
            "highlight_count": self.highlight_count,
        }


def validate_inputs(
    source_path: Path,
    highlights: Optional[Sequence[Highlight]],
    meeting_info: MeetingInfo,
) -> None:
    """
    Reject unusable input before anything is spawned or written.

    Raises:
        InputError: On an empty highlight list, a missing source file, or a
            timestamp past the end of the recording
    """
    if not highlights:
        raise InputError("No highlight timestamps provided")

    if not source_path.is_file():
        raise InputError(f"Full recording file not found: {source_path}")

    if meeting_info.duration_ms is not None:
        late = [h.id for h in highlights if h.timestamp > meeting_info.duration_ms]
        if late:
            raise InputError(
                f"Highlights past end of recording ({meeting_info.duration_ms}ms): {', '.join(late)}"
            )


async def _render_timeline(
    source_path: Path,
    clips: List[ScheduledClip],
    meeting_info: MeetingInfo,
    output_path: Path,
    session: ReelSession,
    report_progress: ProgressCallback,
) -> Path:
    """Primary path: every stage in order, one ffmpeg call at a time."""
    total = len(clips)

    clip_paths = []
    for clip in clips:
        h = clip.highlight
        await report_progress(
            10 + 50 * clip.position / total,
            f"Extracting clip {clip.position + 1}/{total}: "
            f"{clip.start:.1f}s - {clip.end:.1f}s ({h.type.value})",
        )
        path = session.temp_path(f"highlight_{clip.position}_{h.id}")
        clip_paths.append(await render_segment(source_path, clip.start, clip.duration, h, path))

    transition_paths = []
    for current, upcoming in zip(clips, clips[1:]):
        await report_progress(60 + 15 * current.position / total, f"Creating transition {current.position + 1}")
        path = session.temp_path(f"transition_{current.position}")
        transition_paths.append(
            await render_transition(current.highlight, upcoming.highlight, path)
        )

    await report_progress(78, "Creating intro and outro...")
    intro_path = await render_intro(meeting_info, total, session.temp_path("intro"))
    outro_path = await render_outro(meeting_info, total, session.temp_path("outro"))

    manifest = TimelineManifest.build(intro_path, clip_paths, transition_paths, outro_path)

    await report_progress(85, f"Concatenating {len(manifest)} segments...")
    return await assemble(manifest, output_path, session)


async def generate_highlight_reel(
    source_path: str | Path,
    highlights: Optional[Sequence[Highlight]],
    output_path: str | Path,
    meeting_info: Optional[MeetingInfo] = None,
    *,
    meeting_id: Optional[str] = None,
    session: Optional[ReelSession] = None,
    fallback: Optional[FallbackSynthesizer] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> PipelineResult:
    """
    Produce a highlight reel, or a tagged fallback artifact.

    Args:
        source_path: Full meeting recording (never modified)
        highlights: Highlights to include
        output_path: Where the final reel is written
        meeting_info: Metadata for intro/outro text
        meeting_id: Used to name fallback artifacts
        session: Caller-owned session; a private one is created if omitted.
            It is torn down before this returns either way.
        fallback: Fallback synthesizer override
        progress_callback: Optional async callback(percent, message)

    Returns:
        PipelineResult with status ``success`` or ``fallback``

    Raises:
        InputError: If the input is unusable; no fallback is attempted
        FallbackError: If the primary path and every fallback tier failed
    """
    source_path = Path(source_path)
    output_path = Path(output_path)
    meeting_info = meeting_info or MeetingInfo()

    async def report_progress(pct: float, msg: str):
        if progress_callback:
            await progress_callback(pct, msg)
        logger.info(f"[{pct:.0f}%] {msg}")

    validate_inputs(source_path, highlights, meeting_info)
    if session is not None and session.is_torn_down:
        raise InputError(f"Session {session.run_id} was already torn down")

    session = session or ReelSession(meeting_id=meeting_id)
    meeting_id = meeting_id or session.meeting_id
    fallback = fallback or FallbackSynthesizer()

    logger.info(
        f"Starting highlight reel for meeting {meeting_id}: "
        f"{len(highlights)} highlights from {source_path} -> {output_path}"
    )

    reason = None
    error = None
    try:
        clips = plan_clips(highlights)
        await report_progress(5, f"Scheduled {len(clips)} clips")

        if not await probe_ffmpeg():
            reason = FallbackReason.ENGINE_UNAVAILABLE
            error = "ffmpeg is not available"
            logger.warning("FFmpeg not available, skipping primary pipeline")
        else:
            final_path = await _render_timeline(
                source_path, clips, meeting_info, output_path, session, report_progress
            )
    except (FFmpegError, OSError) as e:
        reason = FallbackReason.PIPELINE_FAILED
        error = str(e)
        logger.error(f"Error generating highlight reel for meeting {meeting_id}: {e}")
    finally:
        session.teardown()

    if reason is None:
        await report_progress(100, "Highlight reel complete")
        logger.info(f"Highlight reel generated successfully: {final_path}")
        return PipelineResult(
            path=final_path,
            status="success",
            highlight_count=len(clips),
        )

    await report_progress(90, f"Generating fallback reel ({reason.value})...")
    path, tier = await fallback.synthesize(meeting_id, highlights)
    await report_progress(100, f"Fallback reel complete ({tier.value})")
    return PipelineResult(
        path=path,
        status="fallback",
        reason=reason,
        tier=tier,
        error=error,
        highlight_count=len(highlights),
    )
