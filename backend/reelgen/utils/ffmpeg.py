"""FFmpeg and ffprobe utilities."""
import asyncio
import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from reelgen.config import settings

logger = logging.getLogger(__name__)


@dataclass
class VideoInfo:
    """Video metadata container."""
    duration: float
    width: int
    height: int
    video_codec: Optional[str]
    audio_codec: Optional[str]
    format_name: str


class FFmpegError(Exception):
    """FFmpeg related error."""
    pass


def check_ffmpeg_available() -> bool:
    """Check if ffmpeg is on PATH."""
    return shutil.which(settings.ffmpeg_path) is not None


def check_ffprobe_available() -> bool:
    """Check if ffprobe is on PATH."""
    return shutil.which(settings.ffprobe_path) is not None


async def probe_ffmpeg() -> bool:
    """Check that ffmpeg can actually be executed (``ffmpeg -version`` exits 0)."""
    try:
        proc = await asyncio.create_subprocess_exec(
            settings.ffmpeg_path, "-version",
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL
        )
        await proc.wait()
    except OSError as e:
        logger.info(f"ffmpeg probe failed: {e}")
        return False
    return proc.returncode == 0


async def run_ffmpeg(args: List[str], description: str) -> None:
    """
    Run ffmpeg with the given arguments and wait for it to exit.

    Args:
        args: Arguments after the executable (``-y`` is prepended)
        description: Short label used in logs and error messages

    Raises:
        FFmpegError: If ffmpeg cannot be spawned, times out, is killed,
            or exits non-zero
    """
    cmd = [settings.ffmpeg_path, "-hide_banner", "-y", *args]
    logger.debug(f"Running ffmpeg ({description}): {' '.join(cmd)}")

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise FFmpegError(f"FFmpeg spawn error ({description}): {e}") from e

    try:
        _, stderr = await asyncio.wait_for(
            proc.communicate(), timeout=settings.ffmpeg_timeout_seconds
        )
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise FFmpegError(
            f"FFmpeg {description} timed out after {settings.ffmpeg_timeout_seconds}s"
        )

    if proc.returncode != 0:
        # Negative return codes mean the process was killed by a signal
        tail = stderr.decode("utf-8", errors="ignore")[-2000:]
        raise FFmpegError(
            f"FFmpeg {description} failed with code {proc.returncode}: {tail}"
        )


async def get_video_info(video_path: str | Path) -> VideoInfo:
    """
    Get media metadata using ffprobe.

    Raises:
        FFmpegError: If ffprobe fails
    """
    video_path = Path(video_path)
    if not video_path.exists():
        raise FFmpegError(f"Video file not found: {video_path}")

    cmd = [
        settings.ffprobe_path,
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(video_path)
    ]

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise FFmpegError(f"ffprobe spawn error: {e}") from e

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise FFmpegError(f"ffprobe failed: {stderr.decode()}")

    try:
        data = json.loads(stdout.decode())
    except json.JSONDecodeError as e:
        raise FFmpegError(f"Failed to parse ffprobe output: {e}")

    video_stream = None
    audio_stream = None
    for stream in data.get("streams", []):
        if stream.get("codec_type") == "video" and video_stream is None:
            video_stream = stream
        elif stream.get("codec_type") == "audio" and audio_stream is None:
            audio_stream = stream

    fmt = data.get("format", {})
    duration = float(fmt.get("duration", 0) or 0)
    if duration == 0 and video_stream:
        duration = float(video_stream.get("duration", 0) or 0)

    return VideoInfo(
        duration=duration,
        width=int(video_stream.get("width", 0)) if video_stream else 0,
        height=int(video_stream.get("height", 0)) if video_stream else 0,
        video_codec=video_stream.get("codec_name") if video_stream else None,
        audio_codec=audio_stream.get("codec_name") if audio_stream else None,
        format_name=fmt.get("format_name", "unknown"),
    )


# =============================================================================
# Argument builders
# =============================================================================

def _backslash_escape(value: str, special: str) -> str:
    return "".join("\\" + c if c == "\\" or c in special else c for c in value)


def escape_filter_value(value: str) -> str:
    """
    Escape an unquoted filter option value for use inside a filtergraph.

    ffmpeg unescapes twice: the filtergraph parser first (``,;[]'``),
    then the filter's option parser (``:'``). Each level gets its own
    backslashes.
    """
    option_level = _backslash_escape(value, ":'")
    return _backslash_escape(option_level, ",;[]'")


def escape_drawtext(text: str) -> str:
    """Escape text for an unquoted drawtext ``text=`` value inside a filtergraph."""
    # drawtext expands %{...} sequences and unescapes once more itself
    literal = _backslash_escape(text.replace("\n", " "), "%")
    return escape_filter_value(literal)


def drawtext(
    text: str,
    fontsize: int,
    x: str = "(w-text_w)/2",
    y: str = "(h-text_h)/2",
    box_opacity: float = 0.8,
) -> str:
    """Build one drawtext filter with a translucent black box behind the text."""
    parts = [
        f"text={escape_drawtext(text)}",
        f"fontsize={fontsize}",
        "fontcolor=white",
        f"x={x}",
        f"y={y}",
        "box=1",
        f"boxcolor=black@{box_opacity}",
    ]
    if settings.font_file:
        fontfile = escape_filter_value(settings.font_file.replace("\\", "/"))
        parts.insert(0, f"fontfile={fontfile}")
    return "drawtext=" + ":".join(parts)


def centered_lines(lines: List[str], fontsize: int, line_gap: int = 16) -> List[str]:
    """Stack several drawtext filters vertically around the frame centre."""
    step = fontsize + line_gap
    total = step * len(lines) - line_gap
    filters = []
    for i, line in enumerate(lines):
        offset = i * step - total // 2
        filters.append(drawtext(line, fontsize, y=f"h/2{offset:+d}"))
    return filters


def color_source(color: str, duration: float) -> List[str]:
    """lavfi input producing a solid-color frame in the shared format."""
    size = f"{settings.frame_width}x{settings.frame_height}"
    return [
        "-f", "lavfi",
        "-i", f"color=c={color}:size={size}:duration={duration}:rate={settings.frame_rate}",
    ]


def tone_source(frequency: int, duration: float) -> List[str]:
    """lavfi input producing a sine tone."""
    return [
        "-f", "lavfi",
        "-i", f"sine=frequency={frequency}:duration={duration}:sample_rate={settings.audio_sample_rate}",
    ]


def silence_source(duration: float) -> List[str]:
    """lavfi input producing a silent stereo track."""
    return [
        "-f", "lavfi",
        "-t", str(duration),
        "-i", f"anullsrc=channel_layout=stereo:sample_rate={settings.audio_sample_rate}",
    ]


def normalize_video_filter() -> str:
    """Scale/pad any input to the shared frame size, SAR and rate."""
    w, h = settings.frame_width, settings.frame_height
    return (
        f"scale={w}:{h}:force_original_aspect_ratio=decrease,"
        f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2,setsar=1,fps={settings.frame_rate}"
    )


def encode_args() -> List[str]:
    """Output options of the single encode profile used for every segment."""
    return [
        "-c:v", settings.video_codec,
        "-preset", settings.video_preset,
        "-crf", str(settings.video_crf),
        "-pix_fmt", settings.pixel_format,
        "-r", str(settings.frame_rate),
        "-c:a", settings.audio_codec,
        "-b:a", settings.audio_bitrate,
        "-ar", str(settings.audio_sample_rate),
        "-ac", "2",
        "-movflags", "+faststart",
    ]
