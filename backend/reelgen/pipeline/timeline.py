"""Timeline manifest and final concatenation."""
import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from reelgen.utils.ffmpeg import FFmpegError, run_ffmpeg
from .session import ReelSession

logger = logging.getLogger(__name__)


class SegmentKind(str, enum.Enum):
    """What a rendered segment is."""
    INTRO = "intro"
    CLIP = "clip"
    TRANSITION = "transition"
    OUTRO = "outro"


@dataclass
class RenderedSegment:
    """A rendered file and its place in the reel."""
    path: Path
    position: int
    kind: SegmentKind


@dataclass
class TimelineManifest:
    """Ordered segments that fully determine concatenation order."""
    segments: List[RenderedSegment] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        intro: Path,
        clips: Sequence[Path],
        transitions: Sequence[Path],
        outro: Path,
    ) -> "TimelineManifest":
        """
        Interleave ``intro, clip0, transition0, clip1, ..., clipN-1, outro``.

        Raises:
            ValueError: If there are no clips or the transition count is not
                one less than the clip count
        """
        if not clips:
            raise ValueError("Timeline needs at least one clip")
        if len(transitions) != len(clips) - 1:
            raise ValueError(
                f"Expected {len(clips) - 1} transitions for {len(clips)} clips, "
                f"got {len(transitions)}"
            )

        ordered = [(intro, SegmentKind.INTRO)]
        for i, clip in enumerate(clips):
            ordered.append((clip, SegmentKind.CLIP))
            if i < len(transitions):
                ordered.append((transitions[i], SegmentKind.TRANSITION))
        ordered.append((outro, SegmentKind.OUTRO))

        return cls(segments=[
            RenderedSegment(path=Path(path), position=i, kind=kind)
            for i, (path, kind) in enumerate(ordered)
        ])

    def __len__(self):
        return len(self.segments)

    @property
    def paths(self) -> List[Path]:
        return [seg.path for seg in self.segments]

    @property
    def kinds(self) -> List[SegmentKind]:
        return [seg.kind for seg in self.segments]

    def to_concat_list(self) -> str:
        """Render as an ffmpeg concat-demuxer list."""
        lines = []
        for seg in self.segments:
            path_str = str(seg.path.resolve()).replace("\\", "/").replace("'", "'\\''")
            lines.append(f"file '{path_str}'")
        return "\n".join(lines) + "\n"


async def assemble(
    manifest: TimelineManifest,
    output_path: str | Path,
    session: ReelSession,
) -> Path:
    """
    Concatenate the manifest into one file with a stream copy.

    All segments already share one codec profile, so nothing is re-encoded.
    The concat list is a session temp file. A partial output is removed on
    failure.

    Raises:
        FFmpegError: If a segment is missing or concatenation fails
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    missing = [str(p) for p in manifest.paths if not p.exists()]
    if missing:
        raise FFmpegError(f"Timeline segments missing before concat: {', '.join(missing)}")

    list_path = session.temp_path("filelist", suffix=".txt")
    list_path.write_text(manifest.to_concat_list(), encoding="utf-8")

    logger.info(f"Concatenating {len(manifest)} segments into {output_path}")
    try:
        await run_ffmpeg(
            [
                "-f", "concat",
                "-safe", "0",
                "-i", str(list_path),
                "-c", "copy",
                "-movflags", "+faststart",
                str(output_path),
            ],
            "concatenation",
        )
    except FFmpegError:
        output_path.unlink(missing_ok=True)
        raise

    return output_path
