"""Job handlers."""
import logging
from typing import Callable, List, Optional

from reelgen.models.highlight import Highlight, MeetingInfo
from reelgen.pipeline.runner import generate_highlight_reel
from reelgen.pipeline.session import ReelSession

logger = logging.getLogger(__name__)


async def handle_generate_reel(
    job_id: int,
    progress_callback: Callable,
    meeting_id: str,
    source_path: str,
    highlights: List[dict],
    output_path: str,
    meeting_info: Optional[dict] = None,
    **kwargs
) -> dict:
    """
    Handle a highlight reel generation job.

    Highlights and meeting info arrive as plain dicts so the job
    arguments stay serializable.

    Returns:
        PipelineResult as a dictionary
    """
    parsed = [Highlight.model_validate(h) for h in highlights]
    info = MeetingInfo.model_validate(meeting_info or {})

    session = ReelSession(meeting_id=meeting_id)
    logger.info(f"Job {job_id}: reel run {session.run_id} for meeting {meeting_id}")

    result = await generate_highlight_reel(
        source_path,
        parsed,
        output_path,
        info,
        meeting_id=meeting_id,
        session=session,
        progress_callback=progress_callback,
    )
    return result.to_dict()
