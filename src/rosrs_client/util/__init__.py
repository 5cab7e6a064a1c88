import re
from typing import Dict, Iterable, List, Optional
from urllib.parse import unquote, urlsplit

_LINK_RE = re.compile(r'<([^>]*)>\s*;\s*rel\s*=\s*"?([^",;]+)"?')

_RDF_FORMATS = {
    "application/rdf+xml": "xml",
    "text/turtle": "turtle",
    "application/x-turtle": "turtle",
    "application/n-triples": "nt",
    "application/ld+json": "json-ld",
    "application/trig": "trig",
    "text/n3": "n3",
}


def name_from_uri(uri: str) -> str:
    """Return the last non-empty path segment of a URI, percent-decoded."""
    path = urlsplit(uri).path.rstrip("/")
    if not path:
        return uri
    return unquote(path.rsplit("/", 1)[-1])


def local_name(uri: str) -> str:
    """Return the part of a URI after the last `#` or `/`."""
    return re.split(r"[#/]", uri.rstrip("/#"))[-1]


def parse_link_headers(values: Iterable[str]) -> Dict[str, List[str]]:
    """Parse HTTP `Link` header values into a dict from relation to targets.

    Unlike a plain dict of links, a relation may occur multiple times.
    """
    ret: Dict[str, List[str]] = {}
    for value in values:
        for target, rel in _LINK_RE.findall(value):
            ret.setdefault(rel.strip(), []).append(target)
    return ret


def rdf_format(content_type: Optional[str], default: str = "xml") -> str:
    """Return the rdflib parser name for a media type (parameters are ignored)."""
    if not content_type:
        return default
    mime = content_type.split(";", 1)[0].strip().lower()
    return _RDF_FORMATS.get(mime, default)


def is_rdf_type(content_type: Optional[str]) -> bool:
    """Return whether a media type names an RDF serialization rdflib can parse."""
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() in _RDF_FORMATS
