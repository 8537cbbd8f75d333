"""Highlight and meeting metadata models.

These are the read-only inputs of a reel run. Both accept the camelCase
field names emitted by the meeting front-end as well as snake_case.
"""
import enum
import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HighlightType(str, enum.Enum):
    """Kind of moment a highlight marks."""
    DECISION = "decision"
    PROBLEM = "problem"
    SOLUTION = "solution"
    ACTION = "action"
    URGENT = "urgent"
    EMOTIONAL = "emotional"
    DISCUSSION = "discussion"
    OTHER = "other"


class Priority(str, enum.Enum):
    """Highlight priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Highlight(BaseModel):
    """One flagged moment in a meeting."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    timestamp: int = Field(..., ge=0, description="Milliseconds since meeting start")
    type: HighlightType = HighlightType.OTHER
    priority: Optional[Priority] = None
    importance_score: float = Field(0.0, ge=0.0, le=1.0, alias="importanceScore")
    description: Optional[str] = None
    participant_id: Optional[str] = Field(None, alias="participantId")
    has_video: bool = Field(True, alias="hasVideo")
    has_audio: bool = Field(True, alias="hasAudio")

    @property
    def timestamp_seconds(self) -> float:
        return self.timestamp / 1000

    @property
    def label(self) -> str:
        """Description if present, otherwise the type name."""
        return self.description or self.type.value


class MeetingInfo(BaseModel):
    """Descriptive meeting metadata, used only for bumper text."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = "Meeting Highlights"
    participant_count: int = Field(0, ge=0, alias="participantCount")
    meeting_date: Optional[datetime.date] = Field(None, alias="date")
    duration_ms: Optional[int] = Field(None, ge=0, alias="durationMs")
