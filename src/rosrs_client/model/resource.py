"""Resources aggregated by a research object."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from urllib.parse import urljoin

from overrides import overrides
from rdflib import URIRef

from ..exceptions import ManifestError
from ..rdf.vocab import ORE
from ..service import CreatedObject
from ..util import name_from_uri
from .annotable import Annotable
from .annotation import Annotation
from .attribution import Person, attribution

if TYPE_CHECKING:
    from .research_object import ResearchObject


def proxied_uri(created: CreatedObject, default: Optional[str] = None) -> URIRef:
    """Return the URI of the resource behind a newly created proxy."""
    if uri := created.link(ORE.proxyFor):
        return uri
    node = created.description().node(created.location)
    if (target := next(node.uri_objects(ORE.proxyFor), None)) is not None:
        return target
    if default is None:
        raise ManifestError("Cannot tell the resource behind proxy", created.location)
    return URIRef(default)


class Resource(Annotable):
    """An aggregated resource that is not a folder."""

    uri: URIRef
    proxy_uri: Optional[URIRef]
    """Proxy representing the aggregation of this resource in the manifest."""

    creator: Optional[Person]
    created: Optional[datetime]

    def __init__(
        self,
        research_object: ResearchObject,
        uri,
        proxy_uri=None,
        creator: Optional[Person] = None,
        created: Optional[datetime] = None,
    ):
        self._research_object = research_object
        self.uri = URIRef(uri)
        self.proxy_uri = URIRef(proxy_uri) if proxy_uri is not None else None
        self.creator = creator
        self.created = created

    def __eq__(self, other):
        return isinstance(other, Resource) and self.uri == other.uri

    def __hash__(self):
        return hash(self.uri)

    def __repr__(self):
        return f"Resource({self.uri})"

    @property
    def research_object(self) -> ResearchObject:
        return self._research_object

    @property
    def name(self) -> str:
        """Display name (last segment of the URI path)."""
        return name_from_uri(self.uri)

    @overrides
    def get_annotations(self) -> List[Annotation]:
        return self.research_object.annotations_about(self.uri)

    # ----

    @classmethod
    def _from_created(cls, ro: ResearchObject, created: CreatedObject, default=None):
        uri = proxied_uri(created, default)
        creator, created_at = attribution(created.description(), uri)
        return cls(ro, uri, created.location, creator, created_at)

    @classmethod
    def create(
        cls, research_object: ResearchObject, path: str, content: bytes, content_type: str
    ) -> Resource:
        """Upload a new resource into the RO (remote only).

        Use `ResearchObject.aggregate` to also register it with the RO.
        """
        ro = research_object
        created = ro.rosrs.aggregate_internal(ro.uri, path, content, content_type)
        return cls._from_created(ro, created, urljoin(ro.uri, path))

    @classmethod
    def create_external(cls, research_object: ResearchObject, uri) -> Resource:
        """Aggregate a resource stored elsewhere (remote only)."""
        ro = research_object
        created = ro.rosrs.aggregate_external(ro.uri, uri)
        return cls._from_created(ro, created, uri)

    def delete(self) -> None:
        """Delete the resource remotely, then forget it and the annotations about it."""
        self.research_object.rosrs.delete_resource(self.proxy_uri or self.uri)
        self.research_object.remove_resource(self)
