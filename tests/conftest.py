from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from rdflib import Namespace

from rosrs_client import ResearchObject, ROSRService

EX = Namespace("http://example.org/")
RO1 = EX["ro1/"]

DATA_DIR = Path(__file__).parent / "data"

# documents of the test RO and where the fake service serves them
RO1_DOCUMENTS = {
    "manifest.ttl": EX["ro1/.ro/manifest.ttl"],
    "body1.ttl": EX["ro1/.ro/body1.ttl"],
    "body2.ttl": EX["ro1/.ro/body2.ttl"],
    "folder1.ttl": EX["ro1/.ro/folder1.ttl"],
    "folder2.ttl": EX["ro1/.ro/folder2.ttl"],
    "folder3.ttl": EX["ro1/.ro/folder3.ttl"],
}

Handler = Callable[[httpx.Request], httpx.Response]


class FakeServer:
    """In-memory stand-in for the RO storage and RO evolution services.

    GET requests are answered from `documents` (or redirected by
    `redirects`), everything else must be registered with `route`.
    Unknown requests are answered with 404.
    """

    def __init__(self):
        self.documents: Dict[str, Tuple[bytes, str]] = {}
        self.redirects: Dict[str, str] = {}
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def add_document(self, uri, content, content_type: str = "text/turtle"):
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.documents[str(uri)] = (content, content_type)

    def route(self, method: str, uri, handler: Handler):
        self.routes[(method, str(uri))] = handler

    def sent(self, method: str, uri: Optional[str] = None) -> List[httpx.Request]:
        """Return the received requests with given method (and URI, without query)."""
        return [
            r
            for r in self.requests
            if r.method == method and (uri is None or _path_uri(r) == str(uri))
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        uri = _path_uri(request)
        if (handler := self.routes.get((request.method, uri))) is not None:
            return handler(request)
        if request.method == "GET":
            if uri in self.redirects:
                return httpx.Response(303, headers={"Location": self.redirects[uri]})
            if uri in self.documents:
                content, content_type = self.documents[uri]
                return httpx.Response(
                    200, content=content, headers={"Content-Type": content_type}
                )
        return httpx.Response(404)


def _path_uri(request: httpx.Request) -> str:
    return str(request.url).split("?", 1)[0]


def created(location, links=(), status: int = 201) -> httpx.Response:
    """Build the answer to a create command (`links` are (target, rel) pairs)."""
    headers = [("Location", str(location))]
    headers += [("Link", f'<{target}>; rel="{rel}"') for target, rel in links]
    return httpx.Response(status, headers=headers)


@pytest.fixture
def server():
    """Fake remote services serving the test RO `ro1`."""
    srv = FakeServer()
    for name, uri in RO1_DOCUMENTS.items():
        srv.add_document(uri, (DATA_DIR / "ro1" / name).read_bytes())
    # the RO URI redirects to its manifest
    srv.redirects[str(RO1)] = str(EX["ro1/.ro/manifest.ttl"])
    srv.route(
        "GET",
        EX["evo/info"],
        lambda _: httpx.Response(
            200,
            content=(DATA_DIR / "ro1" / "evolution.ttl").read_bytes(),
            headers={"Content-Type": "text/turtle"},
        ),
    )
    return srv


@pytest.fixture
def rosrs(server):
    """Storage service client talking to the fake server."""
    service = ROSRService.connect(
        str(EX), token="secret", transport=httpx.MockTransport(server)
    )
    yield service
    service.close()


@pytest.fixture
def ro1(rosrs):
    """The loaded test RO."""
    ro = ResearchObject(RO1, rosrs)
    ro.load()
    return ro


@pytest.fixture
def fake_created():
    """Access to the helper building create command answers."""
    return created
