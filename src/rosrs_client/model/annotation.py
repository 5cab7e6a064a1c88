"""Annotations and the statements in their bodies."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional, Set, Union

import rdflib
from pydantic import BaseModel, ConfigDict
from rdflib import URIRef

from ..exceptions import ManifestError, ObjectNotLoadedError
from ..rdf.query import GraphQueryFacade
from .attribution import Person, attribution
from .lifecycle import LoadState

if TYPE_CHECKING:
    from .annotable import Annotable
    from .research_object import ResearchObject

logger = logging.getLogger(__name__)


class Statement(BaseModel):
    """A single statement of an annotation body."""

    model_config = ConfigDict(frozen=True)

    subject: str
    property: str
    value: str
    is_uri: bool = False
    """Whether `value` is a URI (otherwise it is a literal)."""

    @classmethod
    def from_triple(cls, s, p, o) -> Statement:
        return cls(subject=str(s), property=str(p), value=str(o), is_uri=isinstance(o, URIRef))

    def to_triple(self):
        obj = URIRef(self.value) if self.is_uri else rdflib.Literal(self.value)
        return (URIRef(self.subject), URIRef(self.property), obj)


@dataclass(frozen=True)
class AnnotationTriple:
    """A property value of an annotated subject, with the annotation asserting it."""

    annotation: Annotation
    subject: Annotable
    property: URIRef
    value: str
    merged: bool = False
    """Whether `value` joins the values of several statements."""


class Annotation:
    """An aggregated annotation, i.e. a body document about one or more targets.

    The body is loaded lazily, statements are only available after `load()`.
    """

    research_object: ResearchObject
    uri: URIRef
    body_uri: URIRef
    targets: Set[URIRef]
    """URIs of the annotated subjects (an RO, its resources and folders)."""

    creator: Optional[Person]
    created: Optional[datetime]
    state: LoadState

    def __init__(
        self,
        research_object: ResearchObject,
        uri,
        body,
        targets: Union[str, Iterable[str]],
        creator: Optional[Person] = None,
        created: Optional[datetime] = None,
    ):
        self.research_object = research_object
        self.uri = URIRef(uri)
        self.body_uri = URIRef(body)
        if isinstance(targets, str):
            targets = [targets]
        self.targets = {URIRef(t) for t in targets}
        self.creator = creator
        self.created = created
        self.state = LoadState.UNLOADED
        self._body: Optional[GraphQueryFacade] = None

    def __eq__(self, other):
        return isinstance(other, Annotation) and self.uri == other.uri

    def __hash__(self):
        return hash(self.uri)

    def __repr__(self):
        return f"Annotation({self.uri}, body={self.body_uri}, targets={sorted(self.targets)})"

    @property
    def is_loaded(self) -> bool:
        return self.state is LoadState.LOADED

    @classmethod
    def create(cls, research_object: ResearchObject, body, targets: Iterable[str]) -> Annotation:
        """Create an annotation using an already aggregated resource as body.

        Only the remote annotation is created, use `ResearchObject.annotate`
        to also register it with the RO.
        """
        targets = [URIRef(t) for t in targets]
        created = research_object.rosrs.create_annotation(research_object.uri, body, targets)
        creator, created_at = attribution(created.description(), created.location)
        return cls(research_object, created.location, body, targets, creator, created_at)

    def delete(self) -> None:
        """Delete the annotation remotely, then forget it in the RO."""
        self.research_object.rosrs.delete_resource(self.uri)
        self.research_object.remove_annotation(self)

    # ----

    def load(self) -> None:
        """Download and parse the annotation body."""
        rosrs = self.research_object.rosrs
        response = rosrs.get_resource(self.body_uri, accept=rosrs.settings.rdf_format)
        self.load_body(response.content, response.headers.get("content-type"))

    def load_body(self, data: bytes, content_type: Optional[str]) -> None:
        """Parse a serialized annotation body (e.g. the one just uploaded)."""
        previous = self.state
        self.state = LoadState.LOADING
        try:
            self._body = GraphQueryFacade.parse(
                data, content_type=content_type, public_id=self.body_uri
            )
        except ManifestError:
            self.state = previous
            raise
        self.state = LoadState.LOADED

    @property
    def body(self) -> GraphQueryFacade:
        """Parsed body graph."""
        if self._body is None or not self.is_loaded:
            raise ObjectNotLoadedError(self)
        return self._body

    @property
    def statements(self) -> List[Statement]:
        return [Statement.from_triple(*t) for t in self.body.graph]

    def body_serialized(self, format: str = "xml") -> str:
        """Return the body serialized in an rdflib format (default: RDF/XML)."""
        return self.body.serialize(format=format)

    def get_property_values(self, subject, property) -> List[str]:
        """Return all values of a property of a subject asserted in the body."""
        objs = self.body.graph.objects(URIRef(str(subject)), URIRef(str(property)))
        return sorted(str(o) for o in objs)

    def get_annotation_triples(self, subject: Annotable) -> List[AnnotationTriple]:
        """Return all property values of a subject asserted in the body."""
        g = self.body.graph
        return [
            AnnotationTriple(self, subject, p, str(o))
            for p, o in g.predicate_objects(subject.uri)
        ]

    @staticmethod
    def wrap_annotation_body(statements: Iterable[Statement]) -> bytes:
        """Serialize statements into an RDF/XML annotation body."""
        g = rdflib.Graph()
        for st in statements:
            g.add(st.to_triple())
        return g.serialize(format="xml").encode("utf-8")
