"""Query access to parsed RDF documents."""
from __future__ import annotations

from string import Template
from typing import Dict, List, Optional, Union

import rdflib
from rdflib.term import Node

from ..exceptions import ManifestError
from ..util import rdf_format
from .lib import GraphNode
from .vocab import PREFIXES

Binding = Dict[str, Optional[Node]]
"""One result row of a pattern query, unbound variables map to `None`."""


def _prologue() -> str:
    return "\n".join(f"PREFIX {p}: <{ns}>" for p, ns in PREFIXES.items())


class GraphQueryFacade:
    """A parsed semantic document answering pattern queries.

    Queries are SPARQL patterns with `$name` placeholders, which are
    substituted by the N3 form of the URIs passed as keyword arguments
    (so the placeholders can never be confused with query variables).
    """

    graph: rdflib.Graph

    def __init__(self, graph: Optional[rdflib.Graph] = None):
        self.graph = graph if graph is not None else rdflib.Graph()

    @classmethod
    def parse(
        cls,
        data: Union[bytes, str],
        *,
        content_type: Optional[str] = None,
        public_id: Optional[str] = None,
    ) -> GraphQueryFacade:
        """Parse a document into a new queryable graph."""
        ret = cls()
        ret.merge(data, content_type=content_type, public_id=public_id)
        return ret

    def merge(
        self,
        data: Union[bytes, str, GraphQueryFacade],
        *,
        content_type: Optional[str] = None,
        public_id: Optional[str] = None,
    ) -> None:
        """Add the statements of another document (or parsed graph) to this graph."""
        if isinstance(data, GraphQueryFacade):
            self.graph += data.graph
            return
        try:
            self.graph.parse(
                data=data, format=rdf_format(content_type), publicID=public_id
            )
        except Exception as e:
            raise ManifestError(f"Cannot parse RDF document ({e})", public_id) from e

    # ----

    def _expand(self, query: str, uris: Dict[str, str]) -> str:
        subst = {k: rdflib.URIRef(v).n3() for k, v in uris.items()}
        return f"{_prologue()}\n{Template(query).substitute(subst)}"

    def select(self, query: str, **uris: str) -> List[Binding]:
        """Run a SELECT pattern and return the bindings in result order."""
        result = self.graph.query(self._expand(query, uris))
        names = [str(v) for v in result.vars or []]
        rows = []
        for row in result:
            bound = row.asdict()  # type: ignore
            rows.append({n: bound.get(n) for n in names})
        return rows

    def ask(self, query: str, **uris: str) -> bool:
        """Run an ASK pattern."""
        return bool(self.graph.query(self._expand(query, uris)).askAnswer)

    # ----

    def describes(self, uri: str) -> bool:
        """Return whether the graph contains any statement about `uri`."""
        return (rdflib.URIRef(uri), None, None) in self.graph

    def node(self, uri: str) -> GraphNode:
        """Return a navigable node for `uri`."""
        return GraphNode(self.graph, rdflib.URIRef(uri))

    def serialize(self, format: str = "xml") -> str:
        return self.graph.serialize(format=format)

    def __len__(self):
        return len(self.graph)
