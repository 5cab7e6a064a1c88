"""Lazy navigation of nodes in rdflib graphs."""
from typing import Any, Dict, Iterator, Optional, Union

import rdflib
import wrapt
from rdflib.term import Identifier


class GraphNode(wrapt.ObjectProxy):
    """A node of an `rdflib.Graph` that can follow the edges of the graph."""

    _self_graph: rdflib.Graph

    def __init__(self, graph: rdflib.Graph, obj: Optional[Identifier] = None):
        super().__init__(obj)
        self._self_graph = graph

    @property
    def graph(self):
        return self._self_graph

    @property
    def node(self):
        return self.__wrapped__

    def wrap(self, obj: Identifier):
        return GraphNode(self.graph, obj)

    def is_uriref(self):
        return isinstance(self.__wrapped__, rdflib.URIRef)

    # ----

    def types(self):
        return self.objects(rdflib.RDF.type)

    def objects(self, pred) -> Iterator["GraphNode"]:
        return map(self.wrap, self.graph.objects(self.node, pred, unique=True))  # type: ignore

    def first(self, pred) -> Optional["GraphNode"]:
        """Return some object of an edge, or None if there is none."""
        return next(self.objects(pred), None)

    def uri_objects(self, pred) -> Iterator[rdflib.URIRef]:
        """Return the objects of an edge that are URI nodes (literals and blank nodes are skipped)."""
        return (o.node for o in self.objects(pred) if o.is_uriref())


class RDFParser(wrapt.ObjectProxy):
    """Helper wrapper to access entity properties backed by an RDFlib graph.

    Ensures that queries are only performed when needed (more efficient).

    Subclasses define `parse_<attribute>` methods, the value is computed on
    first access of `<attribute>` and memoized.
    """

    __wrapped__: GraphNode

    def __init__(self, node: GraphNode):
        super().__init__(node)
        self._self_parsed: Dict[str, Any] = {}

    def __getattr__(self, key: str):
        # special case: return the method
        if key.startswith("parse_") or key.startswith("_self_"):
            return wrapt.ObjectProxy.__getattr__(self, key)

        # try to return the attribute
        if key in self._self_parsed:
            return self._self_parsed[key]
        # need first to compute the attribute
        if pfunc := getattr(type(self), f"parse_{key}", None):
            val = pfunc(self, self.__wrapped__)
            self._self_parsed[key] = val
            return val
        # no parser defined -> pass through
        return getattr(self.__wrapped__, key)

    @classmethod
    def from_graph(cls, g: rdflib.Graph, obj: Union[str, rdflib.URIRef]):
        return cls(GraphNode(g, rdflib.URIRef(obj)))
