"""Pydantic schemas for API requests and responses."""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from reelgen.models.highlight import Highlight, MeetingInfo


class ReelCreateRequest(BaseModel):
    """Request to generate a highlight reel."""
    meeting_id: str = Field(..., min_length=1, description="Meeting identifier")
    source_path: str = Field(..., description="Path to the full meeting recording")
    highlights: List[Highlight] = Field(default_factory=list, description="Highlights to include")
    meeting_info: Optional[MeetingInfo] = Field(None, description="Metadata for intro/outro text")
    output_path: Optional[str] = Field(None, description="Output file (generated if omitted)")


class ReelResult(BaseModel):
    """Outcome of a finished reel job."""
    path: str
    status: str
    reason: Optional[str] = None
    tier: Optional[str] = None
    error: Optional[str] = None
    highlight_count: int = 0


class JobResponse(BaseModel):
    """Job response."""
    id: int
    meeting_id: str
    job_type: str
    status: str
    progress: float
    message: Optional[str]
    result: Optional[ReelResult] = None
    error: Optional[str]
    created_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    ffmpeg_available: bool
    ffprobe_available: bool
    message: Optional[str] = None
