"""API routes."""
import logging
from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from reelgen.config import settings
from reelgen.db.database import get_db
from reelgen.models.highlight import MeetingInfo
from reelgen.models.job import Job, JobStatus
from reelgen.pipeline.errors import InputError
from reelgen.pipeline.runner import validate_inputs
from reelgen.pipeline.session import safe_name
from reelgen.utils.ffmpeg import check_ffmpeg_available, check_ffprobe_available
from reelgen.workers.job_runner import job_runner
from reelgen.api.schemas import (
    HealthResponse,
    JobResponse,
    ReelCreateRequest,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _job_response(job: Job) -> JobResponse:
    return JobResponse(
        id=job.id,
        meeting_id=job.meeting_id,
        job_type=job.job_type,
        status=job.status.value,
        progress=job.progress or 0.0,
        message=job.message,
        result=job.result_data,
        error=job.error,
        created_at=job.created_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
    )


# =============================================================================
# Health & System
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health and media tooling."""
    ffmpeg_ok = check_ffmpeg_available()
    ffprobe_ok = check_ffprobe_available()

    message = None
    if not ffmpeg_ok:
        message = "ffmpeg not found: highlight reels will be generated as placeholders"

    return HealthResponse(
        status="healthy" if ffmpeg_ok and ffprobe_ok else "degraded",
        ffmpeg_available=ffmpeg_ok,
        ffprobe_available=ffprobe_ok,
        message=message
    )


# =============================================================================
# Reels
# =============================================================================

@router.post("/reels", response_model=JobResponse)
async def create_reel(data: ReelCreateRequest, db: AsyncSession = Depends(get_db)):
    """Validate input and start a highlight reel job."""
    meeting_info = data.meeting_info or MeetingInfo()
    try:
        validate_inputs(Path(data.source_path), data.highlights, meeting_info)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    output_path = data.output_path or str(
        settings.output_dir
        / f"highlight_reel_{safe_name(data.meeting_id)}_{datetime.now():%Y%m%d_%H%M%S}.mp4"
    )

    job = Job(meeting_id=data.meeting_id, status=JobStatus.PENDING)
    db.add(job)
    await db.commit()
    await db.refresh(job)

    await job_runner.start_job(
        job.id,
        "generate_reel",
        meeting_id=data.meeting_id,
        source_path=data.source_path,
        highlights=[h.model_dump(mode="json") for h in data.highlights],
        meeting_info=meeting_info.model_dump(mode="json"),
        output_path=output_path,
    )
    logger.info(f"Started reel job {job.id} for meeting {data.meeting_id}")
    return _job_response(job)


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: int, db: AsyncSession = Depends(get_db)):
    """Get job status."""
    job = await db.get(Job, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_response(job)


@router.get("/reels/{job_id}/download")
async def download_reel(job_id: int, db: AsyncSession = Depends(get_db)):
    """Serve the reel (or fallback artifact) produced by a job."""
    job = await db.get(Job, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    result = job.result_data
    if job.status != JobStatus.COMPLETED or not result:
        raise HTTPException(status_code=404, detail="Reel not ready")

    path = Path(result["path"])
    if not path.exists():
        raise HTTPException(status_code=404, detail="Reel file missing")

    media_type = "text/plain" if path.suffix == ".txt" else "video/mp4"
    return FileResponse(path, media_type=media_type, filename=path.name)
