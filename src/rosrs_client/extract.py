"""Extract the members of a research object from its manifest.

All functions are pure: they only read the parsed manifest and construct
unloaded entities, nothing is fetched.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from rdflib import URIRef

from .evo.types import EvoType, find_evo_type
from .exceptions import ManifestError
from .model.annotation import Annotation
from .model.attribution import Person, attribution, parse_created
from .model.folder import Folder
from .model.index import AnnotationIndex
from .model.resource import Resource
from .rdf.query import Binding, GraphQueryFacade

if TYPE_CHECKING:
    from .model.research_object import ResearchObject

_ATTRIBUTION = """
    OPTIONAL { ?$var dcterms:creator ?creator .
               OPTIONAL { ?creator foaf:name ?creatorName . } }
    OPTIONAL { ?$var dcterms:created ?created . }
"""

RESOURCES_QUERY = (
    """
SELECT ?resource ?proxy ?created ?creator ?creatorName WHERE {
    $ro ore:aggregates ?resource .
    ?resource a ro:Resource .
    ?proxy ore:proxyFor ?resource .
    FILTER NOT EXISTS { ?resource a ro:Folder . }
"""
    + _ATTRIBUTION.replace("$var", "resource")
    + "}"
)

FOLDERS_QUERY = (
    """
SELECT ?folder ?proxy ?resourcemap ?created ?creator ?creatorName WHERE {
    $ro ore:aggregates ?folder .
    ?folder a ro:Folder ;
            ore:isDescribedBy ?resourcemap .
    ?proxy ore:proxyFor ?folder .
"""
    + _ATTRIBUTION.replace("$var", "folder")
    + "}"
)

ROOT_FOLDER_QUERY = "ASK { $ro ro:rootFolder $folder }"

ANNOTATIONS_QUERY = (
    """
SELECT ?annotation ?body ?target ?created ?creator ?creatorName WHERE {
    $ro ore:aggregates ?annotation .
    ?annotation a ro:AggregatedAnnotation ;
                ao:body ?body ;
                ro:annotatesAggregatedResource ?target .
"""
    + _ATTRIBUTION.replace("$var", "annotation")
    + "}"
)


def _attribution(row: Binding, subject) -> Tuple[Optional[Person], Optional[datetime]]:
    creator = Person.from_nodes(row.get("creator"), row.get("creatorName"))
    return creator, parse_created(row.get("created"), subject)


def describe_self(manifest: GraphQueryFacade, ro_uri):
    """Return creator and creation date of the RO itself.

    Raises ManifestError if the manifest does not describe the RO.
    """
    if not manifest.describes(ro_uri):
        raise ManifestError("RO not found in the manifest", ro_uri)
    return attribution(manifest, ro_uri)


def extract_resources(manifest: GraphQueryFacade, ro: ResearchObject) -> Dict[URIRef, Resource]:
    """Return the aggregated resources that are not folders (unloaded)."""
    ret: Dict[URIRef, Resource] = {}
    for row in manifest.select(RESOURCES_QUERY, ro=ro.uri):
        uri = row["resource"]
        if not isinstance(uri, URIRef) or uri in ret:
            continue
        creator, created = _attribution(row, uri)
        ret[uri] = Resource(ro, uri, row["proxy"], creator, created)
    return ret


def extract_folders(manifest: GraphQueryFacade, ro: ResearchObject) -> Dict[URIRef, Folder]:
    """Return the aggregated folders (unloaded)."""
    ret: Dict[URIRef, Folder] = {}
    for row in manifest.select(FOLDERS_QUERY, ro=ro.uri):
        uri = row["folder"]
        if not isinstance(uri, URIRef) or uri in ret:
            continue
        creator, created = _attribution(row, uri)
        is_root = manifest.ask(ROOT_FOLDER_QUERY, ro=ro.uri, folder=uri)
        ret[uri] = Folder(
            ro, uri, row["proxy"], row["resourcemap"], creator, created, is_root
        )
    return ret


def extract_annotations(manifest: GraphQueryFacade, ro: ResearchObject) -> AnnotationIndex:
    """Return the aggregated annotations (bodies not loaded), indexed by target.

    An annotation with several targets is matched by several rows, these
    are merged into one annotation before it is indexed.
    """
    by_uri: Dict[URIRef, Annotation] = {}
    for row in manifest.select(ANNOTATIONS_QUERY, ro=ro.uri):
        uri, target = row["annotation"], row["target"]
        if not isinstance(uri, URIRef) or not isinstance(target, URIRef):
            continue
        if uri in by_uri:
            by_uri[uri].targets.add(target)
            continue
        creator, created = _attribution(row, uri)
        by_uri[uri] = Annotation(ro, uri, row["body"], [target], creator, created)

    index = AnnotationIndex()
    for annotation in by_uri.values():
        index.add(annotation)
    return index


def extract_evo_type(manifest: GraphQueryFacade, ro_uri) -> Optional[EvoType]:
    """Return the evolution class asserted for the RO, if any."""
    return find_evo_type(manifest.node(ro_uri))
