import httpx
import pytest
import rdflib
from rdflib import Namespace

from rosrs_client import CreatedObject, ROSRSError, ROSRService
from rosrs_client.rdf.vocab import ORE, RO
from rosrs_client.service import FOLDER_TYPE

EX = Namespace("http://example.org/")
RO1 = EX["ro1/"]


def test_connect(rosrs):
    assert rosrs.rosrs_uri == EX[""]
    assert rosrs.token == "secret"
    assert rosrs.settings.timeout == 30.0


def test_bearer_token(rosrs, server):
    rosrs.get_resource(EX["ro1/.ro/body1.ttl"])
    (req,) = server.requests
    assert req.headers["Authorization"] == "Bearer secret"
    assert req.headers["Accept"] == "application/rdf+xml"


def test_no_token(server):
    with ROSRService.connect(str(EX), transport=httpx.MockTransport(server)) as rosrs:
        rosrs.get_resource(EX["ro1/.ro/body1.ttl"], accept="text/turtle")
    (req,) = server.requests
    assert "Authorization" not in req.headers
    assert req.headers["Accept"] == "text/turtle"


def test_get_follows_redirects(rosrs, server):
    response = rosrs.get_resource(RO1)
    assert str(response.url) == str(EX["ro1/.ro/manifest.ttl"])
    assert [r.method for r in server.requests] == ["GET", "GET"]


def test_unexpected_status(rosrs):
    with pytest.raises(ROSRSError) as e:
        rosrs.get_resource(EX["missing"])
    assert e.value.status == 404
    assert e.value.reason == "Not Found"
    assert e.value.uri == str(EX["missing"])


def test_create_without_location(rosrs, server):
    server.route("POST", EX, lambda _: httpx.Response(201))
    with pytest.raises(ROSRSError):
        rosrs.create_research_object("ro-new")


def test_delete_resource_follows_see_other(rosrs, server):
    proxy = EX["ro1/.ro/proxies/p1"]
    server.route(
        "DELETE",
        EX["ro1/res1.txt"],
        lambda _: httpx.Response(303, headers={"Location": str(proxy)}),
    )
    server.route("DELETE", proxy, lambda _: httpx.Response(204))
    rosrs.delete_resource(EX["ro1/res1.txt"])
    assert [str(r.url) for r in server.sent("DELETE")] == [str(EX["ro1/res1.txt"]), str(proxy)]


def test_create_folder(rosrs, server):
    folder = EX["ro1/folder4/"]
    server.route(
        "POST",
        RO1,
        lambda _: httpx.Response(
            201,
            headers=[
                ("Location", str(EX["ro1/.ro/proxies/p9"])),
                ("Link", f'<{folder}>; rel="{ORE.proxyFor}"'),
                ("Link", f'<{EX["ro1/.ro/folder4.ttl"]}>; rel="{ORE.isDescribedBy}"'),
            ],
        ),
    )
    created = rosrs.create_folder(RO1, "folder4")
    assert isinstance(created, CreatedObject)
    assert created.location == str(EX["ro1/.ro/proxies/p9"])
    assert created.link(ORE.proxyFor) == folder
    assert created.links_for(ORE.isDescribedBy) == [EX["ro1/.ro/folder4.ttl"]]
    assert created.link(ORE.aggregates) is None
    assert len(created.description()) == 0

    (req,) = server.sent("POST", RO1)
    assert req.headers["Content-Type"] == FOLDER_TYPE
    assert req.headers["Slug"] == "folder4"
    g = rdflib.Graph().parse(data=req.content, format="xml")
    assert next(g.subjects(rdflib.RDF.type, RO.Folder), None) is not None


def test_created_object_description():
    created = CreatedObject(
        location="http://example.org/ro1/.ro/proxies/p1",
        content=b'<http://example.org/ro1/.ro/proxies/p1> '
        b'<http://www.openarchives.org/ore/terms/proxyFor> <http://example.org/ro1/a.txt> .',
        content_type="text/turtle",
    )
    node = created.description().node(created.location)
    assert list(node.uri_objects(ORE.proxyFor)) == [EX["ro1/a.txt"]]


def test_created_object_plain_text():
    created = CreatedObject(
        location="http://example.org/ro1/.ro/proxies/p1",
        content=b"Created",
        content_type="text/plain; charset=utf-8",
    )
    assert len(created.description()) == 0
