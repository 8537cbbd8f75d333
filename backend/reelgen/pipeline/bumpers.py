"""Synthetic bumper clips: transitions, intro and outro."""
import datetime
import logging
from pathlib import Path
from typing import List

from reelgen.config import settings
from reelgen.models.highlight import Highlight, MeetingInfo
from reelgen.utils.ffmpeg import (
    centered_lines,
    color_source,
    encode_args,
    run_ffmpeg,
    tone_source,
)

logger = logging.getLogger(__name__)


def transition_lines(next_highlight: Highlight) -> List[str]:
    return [f"Next: {next_highlight.label}"]


def intro_lines(meeting_info: MeetingInfo, highlight_count: int) -> List[str]:
    day = meeting_info.meeting_date or datetime.date.today()
    lines = [meeting_info.title, day.strftime("%B %d, %Y"), f"{highlight_count} Important Moments"]
    if meeting_info.participant_count:
        lines.append(f"{meeting_info.participant_count} Participants")
    return lines


def outro_lines(meeting_info: MeetingInfo, highlight_count: int) -> List[str]:
    return [
        "Meeting Highlights Complete",
        f"{highlight_count} Important Moments Captured",
        "Thank you for watching!",
    ]


def build_bumper_args(
    lines: List[str],
    duration: float,
    color: str,
    tone_hz: int,
    font_size: int,
    output_path: str | Path,
) -> List[str]:
    """ffmpeg arguments for a solid-color clip with a tone and centred text."""
    return [
        *color_source(color, duration),
        *tone_source(tone_hz, duration),
        "-vf", ",".join(centered_lines(lines, font_size)),
        "-map", "0:v",
        "-map", "1:a",
        "-t", str(duration),
        *encode_args(),
        str(output_path),
    ]


async def render_transition(
    current: Highlight,
    next_highlight: Highlight,
    output_path: str | Path,
) -> Path:
    """Render the bumper announcing ``next_highlight`` after ``current``."""
    output_path = Path(output_path)
    args = build_bumper_args(
        transition_lines(next_highlight),
        settings.transition_seconds,
        settings.transition_color,
        settings.transition_tone_hz,
        24,
        output_path,
    )
    await run_ffmpeg(args, f"transition {current.id} -> {next_highlight.id}")
    return output_path


async def render_intro(
    meeting_info: MeetingInfo,
    highlight_count: int,
    output_path: str | Path,
) -> Path:
    output_path = Path(output_path)
    args = build_bumper_args(
        intro_lines(meeting_info, highlight_count),
        settings.intro_seconds,
        settings.intro_color,
        settings.intro_tone_hz,
        32,
        output_path,
    )
    await run_ffmpeg(args, "intro creation")
    logger.info(f"Created intro for '{meeting_info.title}'")
    return output_path


async def render_outro(
    meeting_info: MeetingInfo,
    highlight_count: int,
    output_path: str | Path,
) -> Path:
    output_path = Path(output_path)
    args = build_bumper_args(
        outro_lines(meeting_info, highlight_count),
        settings.outro_seconds,
        settings.outro_color,
        settings.outro_tone_hz,
        28,
        output_path,
    )
    await run_ffmpeg(args, "outro creation")
    logger.info("Created outro")
    return output_path
