"""Creator and creation date of aggregated entities."""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

import rdflib
from pydantic import BaseModel, ConfigDict, field_validator
from rdflib.term import Node

from ..exceptions import ManifestError
from ..rdf.lib import GraphNode
from ..rdf.query import GraphQueryFacade
from ..rdf.vocab import DCTERMS, FOAF


class Person(BaseModel):
    """A creator, identified by URI, by name or both."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    uri: Optional[rdflib.URIRef] = None
    name: Optional[str] = None

    @field_validator("uri", mode="before")
    @classmethod
    def _as_uriref(cls, v):
        return rdflib.URIRef(v) if v is not None else None

    def __str__(self):
        return self.name or str(self.uri)

    @classmethod
    def from_nodes(
        cls, creator: Optional[Node], name: Optional[Node] = None
    ) -> Optional[Person]:
        """Create a person from a creator node and an optional name node.

        A literal creator is taken to be the name.
        """
        if creator is None:
            return None
        if isinstance(creator, rdflib.Literal):
            return cls(name=str(creator))
        uri = creator if isinstance(creator, rdflib.URIRef) else None
        name_str = str(name) if name is not None else None
        if uri is None and name_str is None:
            return None
        return cls(uri=uri, name=name_str)

    @classmethod
    def from_node(cls, creator: Optional[GraphNode]) -> Optional[Person]:
        """Create a person from a creator node, looking up its `foaf:name`."""
        if creator is None:
            return None
        name = creator.first(FOAF.name)
        return cls.from_nodes(creator.node, name.node if name is not None else None)


def parse_created(value: Optional[Node], subject=None) -> Optional[datetime]:
    """Return the timestamp of a `dcterms:created` value.

    Raises ManifestError if the value is not a valid timestamp.
    """
    if value is None or not isinstance(value, rdflib.Literal):
        return None
    parsed = value.toPython()
    if isinstance(parsed, datetime):
        return parsed
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        raise ManifestError(f"Invalid creation date '{value}'", subject)


def attribution(
    graph: GraphQueryFacade, uri
) -> Tuple[Optional[Person], Optional[datetime]]:
    """Return creator and creation date asserted about `uri` in a graph."""
    node = graph.node(uri)
    creator = node.first(DCTERMS.creator)
    created = node.first(DCTERMS.created)
    return (
        Person.from_node(creator),
        parse_created(created.node if created is not None else None, uri),
    )
