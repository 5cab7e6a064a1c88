"""Vocabulary used in RO manifests, resource maps and evolution documents."""
from rdflib import Namespace
from rdflib.namespace import DCTERMS, FOAF, PROV, RDF

ORE = Namespace("http://www.openarchives.org/ore/terms/")
"""OAI Object Reuse and Exchange (aggregations, proxies, resource maps)."""

RO = Namespace("http://purl.org/wf4ever/ro#")
"""Wf4Ever research object model."""

AO = Namespace("http://purl.org/ao/")
"""Annotation ontology."""

ROEVO = Namespace("http://purl.org/wf4ever/roevo#")
"""Research object evolution ontology."""

PREFIXES = {
    "ore": ORE,
    "ro": RO,
    "ao": AO,
    "roevo": ROEVO,
    "prov": PROV,
    "dcterms": DCTERMS,
    "foaf": FOAF,
    "rdf": RDF,
}
"""Namespace bindings available in every pattern query."""

__all__ = ["ORE", "RO", "AO", "ROEVO", "PROV", "DCTERMS", "FOAF", "RDF", "PREFIXES"]
