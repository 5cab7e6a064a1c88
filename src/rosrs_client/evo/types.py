"""Evolution classes of research objects."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..rdf.lib import GraphNode
from ..rdf.vocab import ROEVO

logger = logging.getLogger(__name__)


class EvoType(str, Enum):
    """RO evolution class."""

    LIVE = "LIVE"
    """roevo:LiveRO"""

    SNAPSHOT = "SNAPSHOT"
    """roevo:SnapshotRO"""

    ARCHIVE = "ARCHIVE"
    """roevo:ArchivedRO"""

    @property
    def rdf_type(self):
        return _RDF_TYPES[self]

    @classmethod
    def from_rdf_type(cls, uri) -> Optional[EvoType]:
        return next((k for k, v in _RDF_TYPES.items() if v == uri), None)


_RDF_TYPES = {
    EvoType.LIVE: ROEVO.LiveRO,
    EvoType.SNAPSHOT: ROEVO.SnapshotRO,
    EvoType.ARCHIVE: ROEVO.ArchivedRO,
}


def find_evo_type(node: GraphNode) -> Optional[EvoType]:
    """Return the evolution class asserted for a node.

    If several classes are asserted, which one is returned is unspecified.
    """
    asserted = (EvoType.from_rdf_type(t.node) for t in node.types())
    found = [t for t in asserted if t is not None]
    if len(found) > 1:
        logger.warning("Multiple evolution classes asserted for %s: %s", node.node, found)
    return found[0] if found else None
