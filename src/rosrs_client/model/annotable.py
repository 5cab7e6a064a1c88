"""Interface of everything that can be annotated within a research object."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

import httpx
from rdflib import URIRef

from ..exceptions import ManifestError, ROSRSError
from ..util import local_name
from .annotation import Annotation, AnnotationTriple, Statement

if TYPE_CHECKING:
    from .research_object import ResearchObject

logger = logging.getLogger(__name__)

RDF_XML = "application/rdf+xml"


def load_quietly(annotation: Annotation) -> bool:
    """Load an annotation body unless loaded, log and return False on failure."""
    if not annotation.is_loaded:
        try:
            annotation.load()
        except (ROSRSError, ManifestError, httpx.HTTPError) as e:
            logger.error("Can't load annotation body %s: %s", annotation.body_uri, e)
            return False
    return True


class Annotable(ABC):
    """A research object, resource or folder, i.e. a possible annotation target."""

    uri: URIRef

    @property
    @abstractmethod
    def research_object(self) -> ResearchObject:
        """Research object holding the annotations about this entity."""

    @abstractmethod
    def get_annotations(self) -> List[Annotation]:
        """Return the annotations about this entity."""

    def get_property_values(self, property, merge: bool = False) -> List[AnnotationTriple]:
        """Return the values of a property asserted by any annotation about this entity.

        Annotation bodies are loaded if needed, bodies that cannot be loaded
        are skipped. With `merge`, all values from one annotation are joined
        into a single triple.
        """
        prop = URIRef(str(property))
        ret: List[AnnotationTriple] = []
        for annotation in self.get_annotations():
            if not load_quietly(annotation):
                continue
            values = annotation.get_property_values(self.uri, prop)
            if not values:
                continue
            if merge:
                ret.append(AnnotationTriple(annotation, self, prop, "; ".join(values), True))
            else:
                ret += [AnnotationTriple(annotation, self, prop, v) for v in values]
        return ret

    def get_annotation_triples(self) -> List[AnnotationTriple]:
        """Return all property values about this entity, sorted by property name."""
        ret: List[AnnotationTriple] = []
        for annotation in self.get_annotations():
            if load_quietly(annotation):
                ret += annotation.get_annotation_triples(self)
        return sorted(ret, key=lambda t: local_name(t.property))

    def create_property_value(self, property, value) -> AnnotationTriple:
        """Assert a property value by annotating this entity with a new body.

        URI values (`rdflib.URIRef`) are stored as resources, everything else
        as a literal.
        """
        statement = Statement(
            subject=str(self.uri),
            property=str(property),
            value=str(value),
            is_uri=isinstance(value, URIRef),
        )
        annotation = self.research_object.annotate(
            Annotation.wrap_annotation_body([statement]), RDF_XML, targets=[self]
        )
        return AnnotationTriple(annotation, self, URIRef(str(property)), str(value))
