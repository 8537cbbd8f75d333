"""Job model for tracking reel generation runs."""
import enum
import json
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Enum, Float, Text

from reelgen.db.database import Base


class JobStatus(str, enum.Enum):
    """Job status enumeration."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Job(Base):
    """A background highlight reel job."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    meeting_id = Column(String(255), nullable=False, index=True)
    job_type = Column(String(64), default="generate_reel", nullable=False)
    status = Column(Enum(JobStatus), default=JobStatus.PENDING, nullable=False)

    # Progress tracking
    progress = Column(Float, default=0.0, nullable=False)  # 0.0 to 100.0
    message = Column(String(1024), nullable=True)

    # Results/errors
    result = Column(Text, nullable=True)  # JSON of PipelineResult.to_dict()
    error = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Job(id={self.id}, meeting={self.meeting_id}, status={self.status})>"

    @property
    def result_data(self) -> dict | None:
        """Parsed result JSON, if any."""
        if not self.result:
            return None
        try:
            return json.loads(self.result)
        except json.JSONDecodeError:
            return None

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "id": self.id,
            "meeting_id": self.meeting_id,
            "job_type": self.job_type,
            "status": self.status.value if self.status else None,
            "progress": self.progress,
            "message": self.message,
            "result": self.result_data,
            "error": self.error,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
