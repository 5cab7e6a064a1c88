"""Object model of research objects and their members."""
from .annotable import Annotable
from .annotation import Annotation, AnnotationTriple, Statement
from .attribution import Person
from .folder import Folder, FolderEntry, Member
from .index import AnnotationIndex
from .lifecycle import LoadState
from .resource import Resource

# depends on the extractors, which depend on the modules above
from .research_object import ResearchObject, ResearchObjectRegistry  # isort: skip

__all__ = [
    "Annotable",
    "Annotation",
    "AnnotationIndex",
    "AnnotationTriple",
    "Folder",
    "FolderEntry",
    "LoadState",
    "Member",
    "Person",
    "ResearchObject",
    "ResearchObjectRegistry",
    "Resource",
    "Statement",
]
