"""Degraded output when the real reel cannot be produced.

Strategies are tried in order; each returns the artifact path on success
or None to hand over to the next one.
"""
import datetime
import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from reelgen.config import settings
from reelgen.models.highlight import Highlight
from reelgen.utils.ffmpeg import (
    FFmpegError,
    centered_lines,
    color_source,
    encode_args,
    run_ffmpeg,
    tone_source,
)
from .errors import FallbackError
from .session import safe_name

logger = logging.getLogger(__name__)


class FallbackReason(str, enum.Enum):
    """Why the primary path was abandoned."""
    ENGINE_UNAVAILABLE = "engine-unavailable"
    PIPELINE_FAILED = "pipeline-failed"


class FallbackTier(str, enum.Enum):
    """Which fallback strategy produced the artifact."""
    PLACEHOLDER_VIDEO = "placeholder-video"
    PLAIN_VIDEO = "plain-video"
    TEXT_MANIFEST = "text-manifest"


@dataclass
class FallbackRequest:
    """Everything a fallback strategy needs."""
    meeting_id: str
    highlights: Sequence[Highlight]
    video_path: Path
    text_path: Path

    @property
    def duration(self) -> int:
        return len(self.highlights) * settings.fallback_seconds_per_highlight


def format_offset(milliseconds: int) -> str:
    """Milliseconds since meeting start as ``HH:MM:SS``."""
    total = milliseconds // 1000
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class FallbackStrategy:
    """Base class for one fallback tier."""

    tier: FallbackTier

    async def attempt(self, request: FallbackRequest) -> Optional[Path]:
        raise NotImplementedError


class PlaceholderVideoStrategy(FallbackStrategy):
    """Solid-color video with a tone and a description of the meeting."""

    tier = FallbackTier.PLACEHOLDER_VIDEO

    def text_lines(self, request: FallbackRequest) -> List[str]:
        return [
            "Meeting Recording",
            f"{len(request.highlights)} Highlights",
            f"Duration: {request.duration}s",
        ]

    def video_filter(self, request: FallbackRequest) -> List[str]:
        return ["-vf", ",".join(centered_lines(self.text_lines(request), 24))]

    def color(self) -> str:
        return settings.fallback_color

    async def attempt(self, request: FallbackRequest) -> Optional[Path]:
        path = request.video_path
        path.parent.mkdir(parents=True, exist_ok=True)
        args = [
            *color_source(self.color(), request.duration),
            *tone_source(settings.fallback_tone_hz, request.duration),
            *self.video_filter(request),
            "-map", "0:v",
            "-map", "1:a",
            *encode_args(),
            str(path),
        ]
        try:
            await run_ffmpeg(args, f"{self.tier.value} fallback")
        except FFmpegError as e:
            logger.warning(f"{self.tier.value} fallback failed: {e}")
            path.unlink(missing_ok=True)
            return None
        return path


class PlainVideoStrategy(PlaceholderVideoStrategy):
    """Same as the placeholder but without text, for builds lacking drawtext."""

    tier = FallbackTier.PLAIN_VIDEO

    def video_filter(self, request: FallbackRequest) -> List[str]:
        return []

    def color(self) -> str:
        return settings.fallback_plain_color


class TextManifestStrategy(FallbackStrategy):
    """Plain-text list of the highlights. Needs no media tooling."""

    tier = FallbackTier.TEXT_MANIFEST

    def render(self, request: FallbackRequest) -> str:
        generated = datetime.datetime.now(datetime.timezone.utc).isoformat()
        lines = [
            f"Mock Highlight Reel for Meeting {request.meeting_id}",
            f"Generated: {generated}",
            f"Highlights: {len(request.highlights)}",
            f"Duration: {request.duration} seconds",
            "",
            "Highlight Timestamps:",
        ]
        for i, h in enumerate(request.highlights, start=1):
            participant = h.participant_id or "unknown"
            lines.append(
                f"{i}. {format_offset(h.timestamp)} - {participant} ({h.type.value}: {h.label})"
            )
        lines += ["", "Note: video synthesis was unavailable. Install FFmpeg for actual video processing."]
        return "\n".join(lines) + "\n"

    async def attempt(self, request: FallbackRequest) -> Optional[Path]:
        path = request.text_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.render(request), encoding="utf-8")
        except OSError as e:
            logger.error(f"Text manifest fallback failed: {e}")
            return None
        return path


DEFAULT_STRATEGIES: List[FallbackStrategy] = [
    PlaceholderVideoStrategy(),
    PlainVideoStrategy(),
    TextManifestStrategy(),
]


class FallbackSynthesizer:
    """Runs fallback strategies in order until one produces an artifact."""

    def __init__(
        self,
        strategies: Optional[List[FallbackStrategy]] = None,
        output_dir: Optional[Path] = None,
    ):
        self.strategies = list(strategies) if strategies is not None else list(DEFAULT_STRATEGIES)
        self.output_dir = Path(output_dir or settings.output_dir)

    def build_request(self, meeting_id: str, highlights: Sequence[Highlight]) -> FallbackRequest:
        stamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        stem = f"highlight_reel_{safe_name(meeting_id)}_{stamp}"
        return FallbackRequest(
            meeting_id=meeting_id,
            highlights=list(highlights),
            video_path=self.output_dir / f"{stem}.mp4",
            text_path=self.output_dir / f"{stem}.txt",
        )

    async def synthesize(
        self,
        meeting_id: str,
        highlights: Sequence[Highlight],
    ) -> tuple[Path, FallbackTier]:
        """
        Produce the best available fallback artifact.

        Returns:
            (artifact path, tier that produced it)

        Raises:
            FallbackError: If every strategy failed
        """
        request = self.build_request(meeting_id, highlights)
        logger.warning(f"Generating fallback highlight reel for meeting {meeting_id}")

        for strategy in self.strategies:
            path = await strategy.attempt(request)
            if path is not None:
                logger.info(f"Fallback reel ({strategy.tier.value}) created: {path}")
                return path, strategy.tier

        raise FallbackError(f"All fallback strategies failed for meeting {meeting_id}")
