"""Client for research objects stored in an RO storage service (ROSRS)."""
import importlib_metadata
from typing_extensions import Final

from .config import ClientSettings
from .evo import EvoType, JobState, JobStatus, ROEVOService
from .exceptions import ManifestError, ObjectNotLoadedError, ROSRSError
from .model import (
    Annotation,
    Folder,
    FolderEntry,
    Person,
    ResearchObject,
    ResearchObjectRegistry,
    Resource,
    Statement,
)
from .service import CreatedObject, ROSRService

# Set version, will use version from pyproject.toml if defined
__version__: Final[str] = importlib_metadata.version(__package__ or __name__)

__all__ = [
    "Annotation",
    "ClientSettings",
    "CreatedObject",
    "EvoType",
    "Folder",
    "FolderEntry",
    "JobState",
    "JobStatus",
    "ManifestError",
    "ObjectNotLoadedError",
    "Person",
    "ROEVOService",
    "ROSRSError",
    "ROSRService",
    "ResearchObject",
    "ResearchObjectRegistry",
    "Resource",
    "Statement",
]
