"""Highlight clip rendering.

Cuts one window out of the source recording per highlight and burns in
an overlay describing the highlight. Missing video or audio is replaced
with synthetic streams so every clip has the same stream layout.
"""
import logging
from pathlib import Path
from typing import Dict, List

from reelgen.config import settings
from reelgen.models.highlight import Highlight, HighlightType, Priority
from reelgen.utils.ffmpeg import (
    color_source,
    drawtext,
    encode_args,
    normalize_video_filter,
    run_ffmpeg,
    silence_source,
)

logger = logging.getLogger(__name__)


TYPE_ICONS: Dict[HighlightType, str] = {
    HighlightType.DECISION: "🎯",
    HighlightType.PROBLEM: "⚠️",
    HighlightType.SOLUTION: "💡",
    HighlightType.ACTION: "✅",
    HighlightType.URGENT: "🚨",
    HighlightType.EMOTIONAL: "😊",
    HighlightType.DISCUSSION: "💬",
}
DEFAULT_ICON = "⭐"

PRIORITY_LABELS: Dict[Priority, str] = {
    Priority.HIGH: "HIGH PRIORITY",
    Priority.MEDIUM: "MEDIUM PRIORITY",
}
DEFAULT_PRIORITY_LABEL = "LOW PRIORITY"


def overlay_text(highlight: Highlight) -> str:
    """Single overlay line: icon, priority label and description."""
    icon = TYPE_ICONS.get(highlight.type, DEFAULT_ICON)
    priority = PRIORITY_LABELS.get(highlight.priority, DEFAULT_PRIORITY_LABEL)
    body = highlight.description or highlight.type.value.upper()
    return f"{icon} {priority} - {body}"


def build_segment_args(
    source_path: str | Path,
    start: float,
    duration: float,
    highlight: Highlight,
    output_path: str | Path,
) -> List[str]:
    """Build the ffmpeg arguments that render one highlight clip."""
    text = overlay_text(highlight)
    font_size = settings.overlay_font_size

    # Input 0 is always the source window
    args = ["-ss", f"{start:.3f}", "-t", f"{duration:.3f}", "-i", str(source_path)]
    next_input = 1

    if highlight.has_video:
        video_chain = (
            f"[0:v]{normalize_video_filter()},"
            f"{drawtext(text, font_size, x='20', y='20', box_opacity=0.7)}[vout]"
        )
    else:
        args += color_source(settings.audio_only_color, duration)
        video_chain = (
            f"[{next_input}:v]"
            f"{drawtext(text, font_size + 4, y='100')},"
            f"{drawtext('Audio Only', font_size - 2, y='150', box_opacity=0.6)}[vout]"
        )
        next_input += 1

    if highlight.has_audio:
        audio_map = "0:a:0"
    else:
        args += silence_source(duration)
        audio_map = f"{next_input}:a:0"
        next_input += 1

    args += [
        "-filter_complex", video_chain,
        "-map", "[vout]",
        "-map", audio_map,
        "-t", f"{duration:.3f}",
        *encode_args(),
        "-avoid_negative_ts", "make_zero",
        str(output_path),
    ]
    return args


async def render_segment(
    source_path: str | Path,
    start: float,
    duration: float,
    highlight: Highlight,
    output_path: str | Path,
) -> Path:
    """
    Render the clip for one highlight.

    Args:
        source_path: Full meeting recording
        start: Window start in seconds
        duration: Window length in seconds
        highlight: Highlight the clip is centred on
        output_path: Where to write the clip

    Returns:
        Path to the rendered clip

    Raises:
        FFmpegError: If ffmpeg fails; the caller decides what happens next
    """
    output_path = Path(output_path)
    args = build_segment_args(source_path, start, duration, highlight, output_path)
    await run_ffmpeg(args, f"segment extraction for highlight {highlight.id}")

    streams = "video+audio" if highlight.has_video else "audio-only"
    logger.info(
        f"Extracted segment ({streams}) {start:.1f}s - {start + duration:.1f}s "
        f"for {highlight.type.value} highlight {highlight.id}"
    )
    return output_path
