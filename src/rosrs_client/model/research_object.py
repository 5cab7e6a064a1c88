"""The research object, aggregate root of resources, folders and annotations."""
from __future__ import annotations

import logging
import weakref
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple, TypeVar, Union

from overrides import overrides
from rdflib import URIRef

from ..evo import EvoType, JobStatus, Lineage, ROEVOService
from ..exceptions import ManifestError, ObjectNotLoadedError
from ..extract import (
    describe_self,
    extract_annotations,
    extract_evo_type,
    extract_folders,
    extract_resources,
)
from ..rdf.query import GraphQueryFacade
from ..rdf.vocab import AO
from ..service import ROSRService
from .annotable import Annotable, load_quietly
from .annotation import Annotation
from .attribution import Person, attribution
from .folder import Folder, FolderEntry
from .index import AnnotationIndex
from .lifecycle import LoadState
from .resource import Resource

logger = logging.getLogger(__name__)

M = TypeVar("M", Resource, Folder)


def sort_by_name(members: Iterable[M]) -> List[M]:
    """Sort resources or folders by display name (stable for equal names)."""
    return sorted(members, key=lambda m: m.name)


def root_members(members: Iterable[M], contained: Set[URIRef]) -> List[M]:
    """Return the members not contained in any folder, sorted by name.

    `contained` is the set of all entry targets of all folders of the RO.
    """
    return sort_by_name(m for m in members if m.uri not in contained)


class ResearchObjectRegistry:
    """Hands out one `ResearchObject` per URI.

    Research objects are only weakly referenced, a handle that is no
    longer used anywhere is dropped from the registry.
    """

    rosrs: ROSRService

    def __init__(self, rosrs: ROSRService, roevo: Optional[ROEVOService] = None):
        self.rosrs = rosrs
        self._roevo = roevo
        self._ros: weakref.WeakValueDictionary = weakref.WeakValueDictionary()

    @property
    def roevo(self) -> ROEVOService:
        if self._roevo is None:
            self._roevo = ROEVOService.for_rosrs(self.rosrs)
        return self._roevo

    def __contains__(self, uri) -> bool:
        return URIRef(str(uri)) in self._ros

    def __len__(self):
        return len(self._ros)

    def get(self, uri) -> ResearchObject:
        """Return the research object for a URI (an unloaded one, if it is new)."""
        if (ro := self._ros.get(URIRef(str(uri)))) is not None:
            return ro
        return ResearchObject(uri, self.rosrs, registry=self)

    def _register(self, ro: ResearchObject) -> None:
        self._ros[ro.uri] = ro


class ResearchObject(Annotable):
    """A research object stored in a ROSRS.

    A new instance is only a reference, the contents are available after
    `load()`. Mutating methods first run the remote command and then patch
    the loaded contents, so the object stays usable without reloading.
    Instances are not safe for concurrent use.
    """

    uri: URIRef
    rosrs: ROSRService

    state: LoadState
    creator: Optional[Person]
    created: Optional[datetime]

    evo_type: Optional[EvoType]
    """Evolution class, from the manifest (or the lineage, once loaded)."""

    # lineage (see load_evolution_information)
    evolution_information_loaded: bool
    live_ro_uri: Optional[URIRef]
    previous_snapshot_uri: Optional[URIRef]
    snapshot_uris: Set[URIRef]
    archive_uris: Set[URIRef]

    def __init__(
        self,
        uri,
        rosrs: ROSRService,
        *,
        roevo: Optional[ROEVOService] = None,
        registry: Optional[ResearchObjectRegistry] = None,
    ):
        self.uri = URIRef(str(uri))
        self.rosrs = rosrs
        if registry is None:
            registry = ResearchObjectRegistry(rosrs, roevo)
        self._registry = registry
        self._registry._register(self)
        self._reset()

    def _reset(self) -> None:
        self._clear()
        self.evo_type = None
        self._clear_lineage()

    def _clear(self) -> None:
        self.state = LoadState.UNLOADED
        self.creator = None
        self.created = None
        self._resources: Dict[URIRef, Resource] = {}
        self._folders: Dict[URIRef, Folder] = {}
        self._annotations = AnnotationIndex()
        self._root_folders: List[Folder] = []
        self._root_resources: List[Resource] = []

    def _clear_lineage(self) -> None:
        self.evolution_information_loaded = False
        self.live_ro_uri = None
        self.previous_snapshot_uri = None
        self.snapshot_uris = set()
        self.archive_uris = set()

    def __eq__(self, other):
        return isinstance(other, ResearchObject) and self.uri == other.uri

    def __hash__(self):
        return hash(self.uri)

    def __repr__(self):
        return f"ResearchObject({self.uri}, {self.state.value})"

    @property
    def research_object(self) -> ResearchObject:
        return self

    @property
    def registry(self) -> ResearchObjectRegistry:
        return self._registry

    @property
    def roevo(self) -> ROEVOService:
        return self._registry.roevo

    @property
    def is_loaded(self) -> bool:
        return self.state is LoadState.LOADED

    # ---- remote RO lifecycle

    @classmethod
    def create(cls, rosrs: ROSRService, ro_id: str, **kwargs) -> ResearchObject:
        """Create an empty research object, return an unloaded reference to it."""
        uri = rosrs.create_research_object(ro_id)
        logger.debug("Created research object %s", uri)
        return cls(uri, rosrs, **kwargs)

    def delete(self) -> None:
        """Delete the RO remotely and forget all of its contents."""
        self.rosrs.delete_research_object(self.uri)
        self._reset()

    # ---- loading

    def load(self) -> None:
        """Load the manifest and all annotation bodies.

        The contents are replaced only if the whole load succeeds, otherwise
        the RO keeps its previous state. Annotation bodies that cannot be
        loaded are logged and skipped.
        """
        previous = self.state
        self.state = LoadState.LOADING
        try:
            self._load()
        except Exception:
            self.state = previous
            raise
        self.state = LoadState.LOADED

    def _load(self) -> None:
        response = self.rosrs.get_resource(self.uri, accept=self.rosrs.settings.rdf_format)
        manifest = GraphQueryFacade.parse(
            response.content,
            content_type=response.headers.get("content-type"),
            public_id=str(response.url),
        )
        creator, created = describe_self(manifest, self.uri)
        resources = extract_resources(manifest, self)
        folders = extract_folders(manifest, self)
        annotations = extract_annotations(manifest, self)
        for annotation in annotations:
            if load_quietly(annotation):
                manifest.merge(annotation.body)
        evo_type = extract_evo_type(manifest, self.uri)
        root_folders, root_resources = self._root_views(resources, folders)

        self.creator, self.created = creator, created
        self._resources, self._folders = resources, folders
        self._annotations = annotations
        self._root_folders, self._root_resources = root_folders, root_resources
        self.evo_type = evo_type
        logger.debug(
            "Loaded %s: %d resources, %d folders, %d annotations",
            self.uri,
            len(resources),
            len(folders),
            len(annotations),
        )

    @staticmethod
    def _root_views(
        resources: Dict[URIRef, Resource], folders: Dict[URIRef, Folder]
    ) -> Tuple[List[Folder], List[Resource]]:
        # `folders` lists all folders at any depth, so loading each one
        # non-recursively is enough to know every containment relation
        for folder in folders.values():
            if not folder.is_loaded:
                folder.load()
        contained = {e.target for f in folders.values() for e in f.entries}
        return (
            root_members(folders.values(), contained),
            root_members(resources.values(), contained),
        )

    def _update_root_views(self) -> None:
        self._root_folders, self._root_resources = self._root_views(
            self._resources, self._folders
        )

    def _ensure_loaded(self) -> None:
        if not self.is_loaded:
            self.load()

    def _check_loaded(self) -> None:
        if not self.is_loaded:
            raise ObjectNotLoadedError(self)

    # ---- contents

    @property
    def resources(self) -> Dict[URIRef, Resource]:
        """Aggregated resources that are not folders, by URI."""
        self._check_loaded()
        return dict(self._resources)

    @property
    def folders(self) -> Dict[URIRef, Folder]:
        self._check_loaded()
        return dict(self._folders)

    @property
    def root_folders(self) -> List[Folder]:
        """Folders not contained in any other folder, sorted by name."""
        self._check_loaded()
        return list(self._root_folders)

    @property
    def root_resources(self) -> List[Resource]:
        """Resources not contained in any folder, sorted by name."""
        self._check_loaded()
        return list(self._root_resources)

    @property
    def annotations(self) -> List[Annotation]:
        self._check_loaded()
        return list(self._annotations)

    @property
    def all_annotations(self) -> Dict[URIRef, Set[Annotation]]:
        """All annotations by target URI."""
        self._check_loaded()
        return self._annotations.as_multimap()

    def get_resource(self, uri) -> Optional[Resource]:
        return self._resources.get(URIRef(str(uri)))

    def get_folder(self, uri) -> Optional[Folder]:
        return self._folders.get(URIRef(str(uri)))

    def get_annotation(self, uri) -> Optional[Annotation]:
        return self._annotations.annotation(uri)

    def annotations_about(self, uri) -> List[Annotation]:
        """Return the annotations about a resource, folder or this RO."""
        self._check_loaded()
        return self._annotations.get(uri)

    @overrides
    def get_annotations(self) -> List[Annotation]:
        return self.annotations_about(self.uri)

    # ---- mutations (remote command first, then local patch)

    def aggregate(self, path: str, content: bytes, content_type: str) -> Resource:
        """Upload a new resource into the RO."""
        resource = Resource.create(self, path, content, content_type)
        return self._add_resource(resource)

    def aggregate_external(self, uri) -> Resource:
        """Aggregate a resource stored outside of the ROSRS."""
        resource = Resource.create_external(self, uri)
        return self._add_resource(resource)

    def _add_resource(self, resource: Resource) -> Resource:
        self._ensure_loaded()
        if (known := self._resources.get(resource.uri)) is not None:
            return known
        if resource.uri in self._folders:
            raise ManifestError("Aggregated resource is a folder of the RO", resource.uri)
        self._resources[resource.uri] = resource
        self._update_root_views()
        return resource

    def create_folder(self, path: str) -> Folder:
        """Create an empty folder in the RO."""
        folder = Folder.create(self, path)
        self._ensure_loaded()
        if (known := self._folders.get(folder.uri)) is not None:
            return known
        if folder.uri in self._resources:
            raise ManifestError("Created folder is a resource of the RO", folder.uri)
        self._folders[folder.uri] = folder
        self._update_root_views()
        return folder

    def annotate(
        self,
        content: bytes,
        content_type: str,
        *,
        targets: Optional[Iterable[Union[Annotable, str]]] = None,
        path: Optional[str] = None,
    ) -> Annotation:
        """Upload an annotation body and annotate the targets (default: this RO) with it.

        The returned annotation has its body parsed from `content`.
        """
        if targets is None:
            targets = [self]
        uris = [URIRef(str(t.uri if isinstance(t, Annotable) else t)) for t in targets]
        created = self.rosrs.add_annotation(self.uri, uris, path, content, content_type)
        description = created.description()
        body = created.link(AO.body)
        if body is None:
            body = next(description.node(created.location).uri_objects(AO.body), None)
        if body is None:
            raise ManifestError("The service did not report the body of", created.location)
        creator, created_at = attribution(description, created.location)
        annotation = Annotation(self, created.location, body, uris, creator, created_at)
        annotation.load_body(content, content_type)

        self._ensure_loaded()
        self._annotations.add(annotation)
        # the uploaded body is aggregated, but it is not a resource on its own
        if self._resources.pop(annotation.body_uri, None) is not None:
            self._update_root_views()
        return annotation

    def add_annotation(self, body, targets: Iterable[Union[Annotable, str]]) -> Annotation:
        """Annotate the targets with an already aggregated body."""
        uris = [URIRef(str(t.uri if isinstance(t, Annotable) else t)) for t in targets]
        annotation = Annotation.create(self, body, uris)
        self._ensure_loaded()
        self._annotations.add(annotation)
        return annotation

    # local patches, applied after a successful remote delete

    def remove_resource(self, resource: Resource) -> None:
        """Forget a resource and cascade to the annotations about it."""
        self._ensure_loaded()
        self._resources.pop(resource.uri, None)
        self._annotations.remove_target(resource.uri)
        self._update_root_views()

    def remove_folder(self, folder: Folder) -> None:
        """Forget a folder and cascade to the annotations about it.

        Members of the folder that are not contained elsewhere become root members.
        """
        self._ensure_loaded()
        self._folders.pop(folder.uri, None)
        self._annotations.remove_target(folder.uri)
        self._update_root_views()

    def remove_annotation(self, annotation: Annotation) -> None:
        """Forget an annotation, its targets are left untouched."""
        self._ensure_loaded()
        self._annotations.remove_annotation(annotation)

    def entry_added(self, entry: FolderEntry) -> None:
        """Update the root views after an entry has been added to a folder."""
        self._ensure_loaded()
        self._update_root_views()

    # ---- evolution

    def snapshot(self, target: Optional[str] = None, finalize: bool = True) -> JobStatus:
        """Start creating a snapshot of this RO, return the job to poll."""
        return self.roevo.create_snapshot(self.uri, target, finalize)

    def archive(self, target: Optional[str] = None, finalize: bool = True) -> JobStatus:
        """Start creating an archive of this RO, return the job to poll."""
        return self.roevo.create_archive(self.uri, target, finalize)

    def load_evolution_information(self) -> None:
        """Load the lineage of this RO from the evolution service.

        The evolution class from the lineage replaces the one from the
        manifest. If the lineage does not describe this RO, the lineage
        stays empty (this is normal for an RO without history).
        """
        data = self.roevo.get_evolution_information(self.uri)
        graph = GraphQueryFacade.parse(data, content_type="text/turtle", public_id=self.uri)
        self._clear_lineage()
        if not graph.describes(self.uri):
            logger.warning("No evolution information found for %s", self.uri)
            return
        lineage = Lineage.from_graph(graph.graph, self.uri)
        self.evo_type = lineage.evo_type
        self.live_ro_uri = lineage.live
        self.previous_snapshot_uri = lineage.previous
        self.snapshot_uris = lineage.snapshots
        self.archive_uris = lineage.archives
        self.evolution_information_loaded = True

    def _resolve(self, uri: Optional[URIRef]) -> Optional[ResearchObject]:
        return self._registry.get(uri) if uri is not None else None

    @property
    def live_ro(self) -> Optional[ResearchObject]:
        """The live RO this snapshot or archive was created from."""
        return self._resolve(self.live_ro_uri)

    @property
    def previous_snapshot(self) -> Optional[ResearchObject]:
        return self._resolve(self.previous_snapshot_uri)

    @property
    def snapshots(self) -> Set[ResearchObject]:
        return {self._registry.get(u) for u in self.snapshot_uris}

    @property
    def archives(self) -> Set[ResearchObject]:
        return {self._registry.get(u) for u in self.archive_uris}
