"""Parse the evolution lineage of a research object.

The lineage document (provided by the evolution service, not the manifest)
links an RO to:
* the live RO it was copied from (`roevo:isArchiveOf`, `roevo:isSnapshotOf`)
* its archives and snapshots (`roevo:hasArchive`, `roevo:hasSnapshot`)
* the snapshot it is a revision of (`prov:wasRevisionOf`)

Only URI nodes are considered, blank nodes are ignored.
"""
from __future__ import annotations

import logging
from typing import Iterator, Optional, Set

import rdflib

from ..rdf.lib import GraphNode, RDFParser
from ..rdf.vocab import PROV, ROEVO
from .types import EvoType, find_evo_type

logger = logging.getLogger(__name__)


def _first(uris: Iterator[rdflib.URIRef], what: str, node) -> Optional[rdflib.URIRef]:
    found = sorted(uris)
    if len(found) > 1:
        logger.warning("%s has more than one %s, using %s", node, what, found[0])
    return found[0] if found else None


class Lineage(RDFParser):
    """Evolution information about one RO."""

    evo_type: Optional[EvoType]
    """Evolution class asserted in the lineage document."""

    live: Optional[rdflib.URIRef]
    """Live RO this RO was archived or snapshotted from."""

    archives: Set[rdflib.URIRef]
    snapshots: Set[rdflib.URIRef]

    previous: Optional[rdflib.URIRef]
    """The snapshot this one is a revision of."""

    def parse_evo_type(self, node: GraphNode) -> Optional[EvoType]:
        return find_evo_type(node)

    def parse_live(self, node: GraphNode) -> Optional[rdflib.URIRef]:
        # archive relation takes precedence over the snapshot relation
        for pred in (ROEVO.isArchiveOf, ROEVO.isSnapshotOf):
            if live := _first(node.uri_objects(pred), "live RO", node.node):
                return live
        return None

    def parse_archives(self, node: GraphNode) -> Set[rdflib.URIRef]:
        return set(node.uri_objects(ROEVO.hasArchive))

    def parse_snapshots(self, node: GraphNode) -> Set[rdflib.URIRef]:
        return set(node.uri_objects(ROEVO.hasSnapshot))

    def parse_previous(self, node: GraphNode) -> Optional[rdflib.URIRef]:
        return _first(node.uri_objects(PROV.wasRevisionOf), "previous revision", node.node)
