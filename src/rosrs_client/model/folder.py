"""Folders (ro:Folder) and their entries.

A folder is described by its own resource map, listing folder entries.
Each entry points at an aggregated resource or at another folder.
The entries are only known after the resource map has been loaded.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Set, Union
from urllib.parse import urljoin

from overrides import overrides
from rdflib import URIRef

from ..exceptions import ManifestError, ObjectNotLoadedError
from ..rdf.query import GraphQueryFacade
from ..rdf.vocab import ORE
from ..util import name_from_uri
from .annotable import Annotable
from .annotation import Annotation
from .attribution import Person, attribution
from .lifecycle import LoadState
from .resource import Resource, proxied_uri

if TYPE_CHECKING:
    from .research_object import ResearchObject

logger = logging.getLogger(__name__)

ENTRIES_QUERY = """
SELECT ?entry ?target ?name WHERE {
    ?entry ore:proxyIn $folder ;
           ore:proxyFor ?target .
    OPTIONAL { ?entry ro:entryName ?name . }
}
"""


class FolderEntry:
    """Entry of a folder, pointing at a resource or subfolder.

    Entries are identified by their own URI, not by the URI they point at.
    """

    folder: Folder
    uri: URIRef
    target: URIRef
    """URI of the resource or folder this entry points at."""

    name: str

    def __init__(self, folder: Folder, uri, target, name: Optional[str] = None):
        self.folder = folder
        self.uri = URIRef(uri)
        self.target = URIRef(target)
        self.name = name if name is not None else name_from_uri(self.target)

    def __eq__(self, other):
        return isinstance(other, FolderEntry) and self.uri == other.uri

    def __hash__(self):
        return hash(self.uri)

    def __repr__(self):
        return f"FolderEntry({self.uri} -> {self.target}, name={self.name!r})"


def extract_entries(graph: GraphQueryFacade, folder: Folder) -> Set[FolderEntry]:
    """Return the entries of a folder listed in its resource map."""
    entries = {}
    for row in graph.select(ENTRIES_QUERY, folder=folder.uri):
        entry_uri = row["entry"]
        if not isinstance(entry_uri, URIRef) or entry_uri in entries:
            continue
        name = str(row["name"]) if row["name"] is not None else None
        entries[entry_uri] = FolderEntry(folder, entry_uri, row["target"], name)
    return set(entries.values())


Member = Union[Resource, "Folder"]
"""Anything a folder entry can point at."""


class Folder(Annotable):
    """An aggregated folder."""

    uri: URIRef
    proxy_uri: Optional[URIRef]
    resource_map: URIRef
    """URI of the document describing the folder contents."""

    creator: Optional[Person]
    created: Optional[datetime]
    is_root_folder: bool
    """Whether the manifest asserts this to be the root folder of the RO.

    This is independent of `ResearchObject.root_folders`, which is computed
    from the folder structure.
    """

    state: LoadState

    def __init__(
        self,
        research_object: ResearchObject,
        uri,
        proxy_uri,
        resource_map,
        creator: Optional[Person] = None,
        created: Optional[datetime] = None,
        is_root_folder: bool = False,
    ):
        self._research_object = research_object
        self.uri = URIRef(uri)
        self.proxy_uri = URIRef(proxy_uri) if proxy_uri is not None else None
        self.resource_map = URIRef(resource_map)
        self.creator = creator
        self.created = created
        self.is_root_folder = is_root_folder
        self.state = LoadState.UNLOADED
        self._entries: Set[FolderEntry] = set()

    def __eq__(self, other):
        return isinstance(other, Folder) and self.uri == other.uri

    def __hash__(self):
        return hash(self.uri)

    def __repr__(self):
        return f"Folder({self.uri})"

    @property
    def research_object(self) -> ResearchObject:
        return self._research_object

    @property
    def name(self) -> str:
        return name_from_uri(self.uri)

    @property
    def is_loaded(self) -> bool:
        return self.state is LoadState.LOADED

    @overrides
    def get_annotations(self) -> List[Annotation]:
        return self.research_object.annotations_about(self.uri)

    # ---- remote commands

    @classmethod
    def create(cls, research_object: ResearchObject, path: str) -> Folder:
        """Create an empty folder in the RO (remote only).

        Use `ResearchObject.create_folder` to also register it with the RO.
        """
        ro = research_object
        created = ro.rosrs.create_folder(ro.uri, path)
        uri = proxied_uri(created, urljoin(ro.uri, path))
        description = created.description()
        rmap = created.link(ORE.isDescribedBy)
        if rmap is None:
            rmap = next(description.node(uri).uri_objects(ORE.isDescribedBy), None)
        if rmap is None:
            raise ManifestError("The service did not report a resource map for", uri)
        creator, created_at = attribution(description, uri)
        ret = cls(ro, uri, created.location, rmap, creator, created_at)
        # a new folder is known to be empty
        ret.state = LoadState.LOADED
        return ret

    def delete(self) -> None:
        """Delete the folder remotely, then forget it and the annotations about it."""
        self.research_object.rosrs.delete_resource(self.uri)
        self.research_object.remove_folder(self)

    def add_entry(self, member: Member, name: Optional[str] = None) -> FolderEntry:
        """Add a resource or folder to this folder."""
        name = name if name is not None else member.name
        created = self.research_object.rosrs.add_folder_entry(self.uri, member.uri, name)
        if not self.is_loaded:
            self.load()
        entry = FolderEntry(self, created.location, member.uri, name)
        self._entries.discard(entry)
        self._entries.add(entry)
        self.research_object.entry_added(entry)
        return entry

    def add_sub_folder(self, name: str) -> FolderEntry:
        """Create a new folder and add it to this folder."""
        ro = self.research_object
        base = self.uri if self.uri.endswith("/") else f"{self.uri}/"
        folder = ro.create_folder(urljoin(base, name)[len(ro.uri) :])
        return self.add_entry(folder, name.rstrip("/"))

    # ---- contents

    def load(self, recursive: bool = False) -> None:
        """Load the resource map of this folder.

        Loading is done only once. If `recursive`, all subfolders are
        loaded as well (after this call no subfolder needs to be fetched).
        """
        self._load(recursive, set())

    def _load(self, recursive: bool, seen: Set[URIRef]) -> None:
        seen.add(self.uri)
        if self.state is LoadState.UNLOADED:
            self._fetch()
        if recursive:
            for sub in self.get_subfolders():
                if sub.uri not in seen:
                    sub._load(recursive, seen)

    def _fetch(self) -> None:
        rosrs = self.research_object.rosrs
        self.state = LoadState.LOADING
        try:
            response = rosrs.get_resource(self.resource_map, accept=rosrs.settings.rdf_format)
            graph = GraphQueryFacade.parse(
                response.content,
                content_type=response.headers.get("content-type"),
                public_id=self.resource_map,
            )
            entries = extract_entries(graph, self)
        except Exception:
            self.state = LoadState.UNLOADED
            raise
        self._entries = entries
        self.state = LoadState.LOADED
        logger.debug("Loaded folder %s with %d entries", self.uri, len(entries))

    @property
    def entries(self) -> Set[FolderEntry]:
        if not self.is_loaded:
            raise ObjectNotLoadedError(self)
        return set(self._entries)

    def get_subfolders(self) -> List[Folder]:
        """Return the folders this folder contains (entries pointing at known folders)."""
        ro = self.research_object
        found = (ro.get_folder(e.target) for e in self.entries)
        return [f for f in found if f is not None]

    def get_resources(self) -> List[Resource]:
        """Return the resources this folder contains.

        Entries pointing at something that is not aggregated by the RO are ignored.
        """
        ro = self.research_object
        found = (ro.get_resource(e.target) for e in self.entries)
        return [r for r in found if r is not None]
