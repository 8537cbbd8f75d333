#!/usr/bin/env python3
"""
CLI tool to build a highlight reel from a recording and a highlights file.

Usage:
    python scripts/generate_reel_cli.py <recording> <highlights.json> [--output <file>]

The highlights file holds either a JSON list of highlights or an object
with a "highlights" list and an optional "meetingInfo" object.

Example:
    python scripts/generate_reel_cli.py meeting.mp4 highlights.json --title "Sprint Review"
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from reelgen.models.highlight import Highlight, MeetingInfo
from reelgen.pipeline.errors import FallbackError, InputError
from reelgen.pipeline.runner import generate_highlight_reel
from reelgen.utils.ffmpeg import FFmpegError, check_ffprobe_available, get_video_info


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)


def load_highlights(path: Path) -> tuple[list[Highlight], dict]:
    """Read highlights (and optional meeting info) from a JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, list):
        raw_highlights, raw_info = data, {}
    else:
        raw_highlights = data.get("highlights", [])
        raw_info = data.get("meetingInfo", {})

    return [Highlight.model_validate(h) for h in raw_highlights], raw_info


async def build_reel(
    recording: Path,
    highlights_file: Path,
    output: Path,
    meeting_id: str,
    title: Optional[str] = None,
) -> dict:
    highlights, raw_info = load_highlights(highlights_file)
    if title:
        raw_info["title"] = title

    # Fill in the recording length so out-of-range highlights are rejected
    if "durationMs" not in raw_info and recording.exists() and check_ffprobe_available():
        try:
            info = await get_video_info(recording)
            raw_info["durationMs"] = int(info.duration * 1000)
        except FFmpegError as e:
            logger.warning(f"Could not read recording duration: {e}")

    meeting_info = MeetingInfo.model_validate(raw_info)

    async def progress_callback(pct, msg):
        logger.debug(f"[{pct:.0f}%] {msg}")

    result = await generate_highlight_reel(
        recording,
        highlights,
        output,
        meeting_info,
        meeting_id=meeting_id,
        progress_callback=progress_callback,
    )
    return result.to_dict()


def main():
    parser = argparse.ArgumentParser(
        description="Generate a meeting highlight reel",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "recording",
        type=Path,
        help="Path to the full meeting recording"
    )

    parser.add_argument(
        "highlights",
        type=Path,
        help="JSON file with highlights"
    )

    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("./highlight_reel.mp4"),
        help="Output reel path (default: ./highlight_reel.mp4)"
    )

    parser.add_argument(
        "--meeting-id", "-m",
        default="cli",
        help="Meeting identifier used for fallback artifact names"
    )

    parser.add_argument(
        "--title", "-t",
        default=None,
        help="Title shown on the intro"
    )

    args = parser.parse_args()

    try:
        result = asyncio.run(build_reel(
            recording=args.recording,
            highlights_file=args.highlights,
            output=args.output,
            meeting_id=args.meeting_id,
            title=args.title,
        ))
    except (InputError, FileNotFoundError, ValidationError) as e:
        logger.error(str(e))
        sys.exit(1)
    except FallbackError as e:
        logger.error(str(e))
        sys.exit(2)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
