# Highlight reel pipeline
"""
Highlight Reel Pipeline

Turns a full meeting recording and a set of highlights into one reel:
intro, one annotated clip per highlight with transition bumpers between
them, and an outro.

Pipeline stages:
1. Validate: highlights present, recording exists
2. Schedule: order highlights and size their clip windows
3. Render: clips, transitions, intro and outro (one ffmpeg call at a time)
4. Assemble: stream-copy concatenation in manifest order
5. Cleanup: remove every temp file of the run
6. Fallback: placeholder video or text manifest when the above fails
"""
from .errors import InputError, FallbackError
from .runner import PipelineResult, generate_highlight_reel
from .session import ReelSession

__all__ = [
    "FallbackError",
    "InputError",
    "PipelineResult",
    "ReelSession",
    "generate_highlight_reel",
]
