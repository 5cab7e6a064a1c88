"""Blocking HTTP client for the RO storage service (ROSRS)."""
from __future__ import annotations

import logging
from typing import Collection, Dict, Iterable, List, Optional
from urllib.parse import urljoin

import httpx
import rdflib
from pydantic import BaseModel, ConfigDict
from rdflib import BNode, Literal, URIRef

from .config import ClientSettings
from .exceptions import ROSRSError
from .rdf.query import GraphQueryFacade
from .rdf.vocab import AO, ORE, RDF, RO
from .util import is_rdf_type, parse_link_headers

logger = logging.getLogger(__name__)

PROXY_TYPE = "application/vnd.wf4ever.proxy"
FOLDER_TYPE = "application/vnd.wf4ever.folder"
FOLDER_ENTRY_TYPE = "application/vnd.wf4ever.folderentry"
ANNOTATION_TYPE = "application/vnd.wf4ever.annotation"


class CreatedObject(BaseModel):
    """Metadata returned by the service for a successful create command."""

    model_config = ConfigDict(frozen=True)

    location: str
    """Value of the `Location` header (URI assigned by the service)."""

    links: Dict[str, List[str]] = {}
    """Targets of the `Link` headers, grouped by relation."""

    content: bytes = b""
    """Response entity (usually an RDF description of the created object)."""

    content_type: Optional[str] = None

    def link(self, rel) -> Optional[URIRef]:
        """Return the first target of a link relation, if any."""
        targets = self.links.get(str(rel))
        return URIRef(targets[0]) if targets else None

    def links_for(self, rel) -> List[URIRef]:
        return [URIRef(t) for t in self.links.get(str(rel), [])]

    def description(self) -> GraphQueryFacade:
        """Return the parsed response entity.

        The graph is empty if there is no entity or it is not RDF.
        """
        if not self.content or not is_rdf_type(self.content_type):
            return GraphQueryFacade()
        return GraphQueryFacade.parse(
            self.content, content_type=self.content_type, public_id=self.location
        )


def _description(*triples) -> bytes:
    g = rdflib.Graph()
    for t in triples:
        g.add(t)
    return g.serialize(format="xml").encode("utf-8")


class HttpService:
    """Shared plumbing of the remote service clients."""

    settings: ClientSettings
    client: httpx.Client

    def __init__(
        self,
        settings: ClientSettings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.settings = settings
        if client is None:
            headers = {}
            if settings.token:
                headers["Authorization"] = f"Bearer {settings.token}"
            client = httpx.Client(
                headers=headers,
                timeout=settings.timeout,
                transport=transport,
                follow_redirects=True,
            )
        self.client = client

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def _request(
        self, method: str, uri, *, expected: Collection[int], **kwargs
    ) -> httpx.Response:
        logger.debug("%s %s", method, uri)
        response = self.client.request(method, str(uri), **kwargs)
        if response.status_code not in expected:
            msg = f"{method} {uri} returned an unexpected response"
            raise ROSRSError(msg, response.status_code, response.reason_phrase, uri)
        return response

    @staticmethod
    def _location(response: httpx.Response) -> URIRef:
        location = response.headers.get("location")
        if location is None:
            raise ROSRSError(
                "Response has no Location header",
                response.status_code,
                response.reason_phrase,
                response.url,
            )
        return URIRef(urljoin(str(response.url), location))

    def _created(self, response: httpx.Response) -> CreatedObject:
        return CreatedObject(
            location=str(self._location(response)),
            links=parse_link_headers(response.headers.get_list("link")),
            content=response.content,
            content_type=response.headers.get("content-type"),
        )


class ROSRService(HttpService):
    """Client of the RO storage service.

    All methods block until the service answered and raise `ROSRSError`
    if the answer is not the expected one.
    """

    @classmethod
    def connect(cls, rosrs_uri: str, token: Optional[str] = None, **kwargs):
        """Create a client from a service URI and an optional access token."""
        return cls(ClientSettings(rosrs_uri=rosrs_uri, token=token), **kwargs)

    @property
    def rosrs_uri(self) -> URIRef:
        return URIRef(self.settings.rosrs_uri)

    @property
    def token(self) -> Optional[str]:
        return self.settings.token

    # ---- documents

    def get_resource(self, uri, accept: Optional[str] = None) -> httpx.Response:
        """Download a resource, following redirects (e.g. from an RO to its manifest)."""
        headers = {"Accept": accept or self.settings.rdf_format}
        return self._request("GET", uri, expected=(200,), headers=headers)

    # ---- research objects

    def create_research_object(self, ro_id: str) -> URIRef:
        """Create an empty research object, return its URI."""
        response = self._request(
            "POST",
            self.rosrs_uri,
            expected=(201,),
            headers={"Slug": ro_id, "Accept": self.settings.rdf_format},
        )
        return self._location(response)

    def delete_research_object(self, ro_uri) -> None:
        self._request("DELETE", ro_uri, expected=(200, 204))

    # ---- aggregated resources

    def aggregate_internal(
        self, ro_uri, path: str, content: bytes, content_type: str
    ) -> CreatedObject:
        """Upload a resource into the RO. The `Location` is the new proxy."""
        response = self._request(
            "POST",
            ro_uri,
            expected=(201,),
            content=content,
            headers={"Slug": path, "Content-Type": content_type},
        )
        return self._created(response)

    def aggregate_external(self, ro_uri, resource_uri) -> CreatedObject:
        """Aggregate a resource stored elsewhere by creating a proxy for it."""
        proxy = BNode()
        body = _description(
            (proxy, RDF.type, ORE.Proxy),
            (proxy, ORE.proxyFor, URIRef(resource_uri)),
        )
        response = self._request(
            "POST",
            ro_uri,
            expected=(201,),
            content=body,
            headers={"Content-Type": PROXY_TYPE},
        )
        return self._created(response)

    def delete_resource(self, uri) -> None:
        """Delete an aggregated resource, folder, proxy or annotation.

        The service may redirect from a resource to its proxy, in that case
        the proxy is deleted.
        """
        response = self._request(
            "DELETE", uri, expected=(200, 204, 303), follow_redirects=False
        )
        if response.status_code == 303:
            self._request("DELETE", self._location(response), expected=(200, 204))

    # ---- folders

    def create_folder(self, ro_uri, path: str) -> CreatedObject:
        folder = BNode()
        body = _description((folder, RDF.type, RO.Folder))
        response = self._request(
            "POST",
            ro_uri,
            expected=(201,),
            content=body,
            headers={"Slug": path, "Content-Type": FOLDER_TYPE},
        )
        return self._created(response)

    def add_folder_entry(self, folder_uri, target_uri, name: str) -> CreatedObject:
        """Add an entry to a folder. The `Location` is the new entry."""
        entry = BNode()
        body = _description(
            (entry, RDF.type, RO.FolderEntry),
            (entry, ORE.proxyFor, URIRef(target_uri)),
            (entry, RO.entryName, Literal(name)),
        )
        response = self._request(
            "POST",
            folder_uri,
            expected=(201,),
            content=body,
            headers={"Content-Type": FOLDER_ENTRY_TYPE},
        )
        return self._created(response)

    # ---- annotations

    def add_annotation(
        self,
        ro_uri,
        targets: Iterable,
        path: Optional[str],
        content: bytes,
        content_type: str,
    ) -> CreatedObject:
        """Upload an annotation body and annotate the targets with it."""
        headers = [("Content-Type", content_type)]
        if path:
            headers.append(("Slug", path))
        for target in targets:
            headers.append(("Link", f'<{target}>; rel="{AO.annotatesResource}"'))
        response = self._request(
            "POST", ro_uri, expected=(201,), content=content, headers=headers
        )
        return self._created(response)

    def create_annotation(self, ro_uri, body_uri, targets: Iterable) -> CreatedObject:
        """Annotate the targets with a body that already exists."""
        ann = BNode()
        triples = [(ann, RDF.type, RO.AggregatedAnnotation), (ann, AO.body, URIRef(body_uri))]
        triples += [(ann, RO.annotatesAggregatedResource, URIRef(t)) for t in targets]
        response = self._request(
            "POST",
            ro_uri,
            expected=(201,),
            content=_description(*triples),
            headers={"Content-Type": ANNOTATION_TYPE},
        )
        return self._created(response)
