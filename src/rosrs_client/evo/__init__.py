"""Research object evolution: lineage and snapshot/archive jobs."""
from .job import JobState, JobStatus, JobStatusMessage
from .lineage import Lineage
from .service import ROEVOService
from .types import EvoType, find_evo_type

__all__ = [
    "EvoType",
    "find_evo_type",
    "JobState",
    "JobStatus",
    "JobStatusMessage",
    "Lineage",
    "ROEVOService",
]
