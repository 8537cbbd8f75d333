"""Highlight scheduling.

Decides the order highlights appear in the reel and how much context
each clip gets around its highlight.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from reelgen.models.highlight import Highlight, HighlightType, Priority
from .errors import InputError


PRIORITY_RANK: Dict[Optional[Priority], int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
    None: 1,
}

# Seconds of context per highlight type; types needing more context get more
BASE_DURATION: Dict[HighlightType, int] = {
    HighlightType.DECISION: 20,
    HighlightType.PROBLEM: 25,
    HighlightType.SOLUTION: 20,
    HighlightType.ACTION: 15,
    HighlightType.URGENT: 15,
    HighlightType.EMOTIONAL: 12,
}
DEFAULT_DURATION = 10
MAX_DURATION = 30


@dataclass
class ScheduledClip:
    """A highlight with its place in the reel and its source window."""
    highlight: Highlight
    position: int
    start: float
    duration: int

    @property
    def end(self) -> float:
        return self.start + self.duration

    def __repr__(self):
        return (
            f"ScheduledClip(#{self.position} {self.highlight.id} "
            f"{self.start:.2f}-{self.end:.2f}, dur={self.duration}s)"
        )


def _sort_key(highlight: Highlight):
    return (
        -PRIORITY_RANK[highlight.priority],
        -highlight.importance_score,
        highlight.timestamp,
    )


def schedule(highlights: Optional[Sequence[Highlight]]) -> List[Highlight]:
    """
    Order highlights for the reel.

    Priority descending, then importance score descending, then
    timestamp ascending. The input sequence is not modified.

    Raises:
        InputError: If no highlights are given
    """
    if not highlights:
        raise InputError("No highlight timestamps provided")
    return sorted(highlights, key=_sort_key)


def clip_duration(highlight: Highlight) -> int:
    """Clip length in seconds, between 10 and 30."""
    duration = BASE_DURATION.get(highlight.type, DEFAULT_DURATION)

    if highlight.importance_score > 0.8:
        duration += 5
    elif highlight.importance_score > 0.6:
        duration += 3

    if highlight.priority == Priority.HIGH:
        duration += 5
    elif highlight.priority == Priority.MEDIUM:
        duration += 2

    return min(duration, MAX_DURATION)


def clip_start(highlight: Highlight, duration: float) -> float:
    """Start of a window of ``duration`` seconds centred on the highlight."""
    return max(0.0, highlight.timestamp_seconds - duration / 2)


def plan_clips(highlights: Optional[Sequence[Highlight]]) -> List[ScheduledClip]:
    """Schedule highlights and compute the source window of each clip."""
    clips = []
    for position, highlight in enumerate(schedule(highlights)):
        duration = clip_duration(highlight)
        clips.append(ScheduledClip(
            highlight=highlight,
            position=position,
            start=clip_start(highlight, duration),
            duration=duration,
        ))
    return clips
