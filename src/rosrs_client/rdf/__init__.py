"""RDF parsing and pattern queries."""
from .lib import GraphNode, RDFParser
from .query import Binding, GraphQueryFacade

__all__ = ["GraphNode", "RDFParser", "Binding", "GraphQueryFacade"]
