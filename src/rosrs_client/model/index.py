"""Bidirectional index of annotations and their targets."""
from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set

from rdflib import URIRef

from .annotation import Annotation


class AnnotationIndex:
    """Maps target URIs to annotations and annotation URIs to annotations.

    The target set of each indexed `Annotation` is the reverse direction of
    the index and is kept consistent by all mutating methods.
    """

    _by_target: Dict[URIRef, Set[URIRef]]
    """Target URI -> URIs of annotations about it."""

    _by_uri: Dict[URIRef, Annotation]
    """Annotation URI -> annotation."""

    def __init__(self):
        self._by_target = {}
        self._by_uri = {}

    def __len__(self):
        return len(self._by_uri)

    def __contains__(self, uri) -> bool:
        return URIRef(str(uri)) in self._by_uri

    def __iter__(self) -> Iterator[Annotation]:
        return iter(list(self._by_uri.values()))

    def annotation(self, uri) -> Optional[Annotation]:
        return self._by_uri.get(URIRef(str(uri)))

    def get(self, target) -> List[Annotation]:
        """Return the annotations about a target."""
        uris = self._by_target.get(URIRef(str(target)), ())
        return [self._by_uri[u] for u in uris]

    def targets(self) -> Set[URIRef]:
        return set(self._by_target.keys())

    def as_multimap(self) -> Dict[URIRef, Set[Annotation]]:
        """Return a snapshot of the index as dict from target to annotations."""
        return {t: {self._by_uri[u] for u in us} for t, us in self._by_target.items()}

    # ----

    def add(self, annotation: Annotation) -> None:
        """Index an annotation under all of its targets.

        An annotation with the same URI that is already indexed is replaced.
        """
        if annotation.uri in self._by_uri:
            self.remove_annotation(self._by_uri[annotation.uri])
        self._by_uri[annotation.uri] = annotation
        for target in annotation.targets:
            self._by_target.setdefault(target, set()).add(annotation.uri)

    def remove_annotation(self, annotation: Annotation) -> None:
        """Drop an annotation from all target buckets."""
        indexed = self._by_uri.pop(annotation.uri, None)
        if indexed is None:
            return
        for target in indexed.targets:
            self._discard(target, annotation.uri)

    def remove_target(self, target) -> None:
        """Forget a target (a deleted resource or folder).

        The target is removed from the target set of every annotation about it.
        Annotations without any remaining target are dropped, the others stay
        indexed under their remaining targets.
        """
        target = URIRef(str(target))
        for uri in self._by_target.pop(target, set()):
            annotation = self._by_uri[uri]
            annotation.targets.discard(target)
            if not annotation.targets:
                del self._by_uri[uri]

    def _discard(self, target: URIRef, uri: URIRef) -> None:
        bucket = self._by_target.get(target)
        if bucket is None:
            return
        bucket.discard(uri)
        if not bucket:
            del self._by_target[target]
