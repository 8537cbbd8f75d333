# Models package
from reelgen.models.highlight import Highlight, HighlightType, MeetingInfo, Priority
from reelgen.models.job import Job, JobStatus

__all__ = ["Highlight", "HighlightType", "MeetingInfo", "Priority", "Job", "JobStatus"]
