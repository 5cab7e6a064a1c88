import pytest
import rdflib

from rosrs_client import ManifestError
from rosrs_client.rdf import GraphNode, GraphQueryFacade, RDFParser
from rosrs_client.rdf.vocab import DCTERMS, ORE

DOC = b"""
@prefix ore: <http://www.openarchives.org/ore/terms/> .
@prefix dcterms: <http://purl.org/dc/terms/> .

<http://example.org/ro/> ore:aggregates <http://example.org/ro/a>, <http://example.org/ro/b> .
<http://example.org/ro/a> dcterms:title "A" .
"""

RO = rdflib.URIRef("http://example.org/ro/")
A = rdflib.URIRef("http://example.org/ro/a")
B = rdflib.URIRef("http://example.org/ro/b")


@pytest.fixture
def graph():
    return GraphQueryFacade.parse(DOC, content_type="text/turtle")


def test_select_with_optional(graph):
    rows = graph.select(
        """
        SELECT ?res ?title WHERE {
            $ro ore:aggregates ?res .
            OPTIONAL { ?res dcterms:title ?title . }
        } ORDER BY ?res
        """,
        ro=RO,
    )
    assert rows == [{"res": A, "title": rdflib.Literal("A")}, {"res": B, "title": None}]


def test_placeholders_are_uris(graph):
    # a placeholder is always substituted as a URI, never as a pattern variable
    query = "SELECT ?res WHERE { $ro ore:aggregates ?res . }"
    assert graph.select(query, ro="http://example.org/other/") == []


def test_ask(graph):
    assert graph.ask("ASK { $ro ore:aggregates $res }", ro=RO, res=A)
    assert not graph.ask("ASK { $ro ore:aggregates $res }", ro=RO, res=RO)


def test_describes(graph):
    assert graph.describes(RO)
    assert graph.describes(str(A))
    # B is only an object
    assert not graph.describes(B)


def test_parse_error():
    with pytest.raises(ManifestError) as e:
        GraphQueryFacade.parse(b"<not turtle", content_type="text/turtle", public_id="http://example.org/x")
    assert e.value.uri == "http://example.org/x"


def test_merge(graph):
    other = GraphQueryFacade.parse(f'<{B}> <{DCTERMS.title}> "B" .', content_type="text/turtle")
    n = len(graph)
    graph.merge(other)
    assert len(graph) == n + 1
    assert graph.describes(B)


def test_serialize(graph):
    g = rdflib.Graph().parse(data=graph.serialize(), format="xml")
    assert len(g) == len(graph)


# ----


def test_graph_node(graph):
    node = graph.node(RO)
    objs = {o.node for o in node.objects(ORE.aggregates)}
    assert objs == {A, B}
    assert set(node.uri_objects(ORE.aggregates)) == {A, B}
    assert node.is_uriref()
    title = graph.node(A).first(DCTERMS.title)
    assert not title.is_uriref()
    assert str(title) == "A"
    assert graph.node(B).first(DCTERMS.title) is None
    # literals are skipped
    assert list(graph.node(A).uri_objects(DCTERMS.title)) == []


class Titled(RDFParser):
    calls = 0

    def parse_title(self, node: GraphNode):
        Titled.calls += 1
        if (t := node.first(DCTERMS.title)) is not None:
            return str(t)
        return None


def test_rdf_parser(graph):
    Titled.calls = 0
    a = Titled.from_graph(graph.graph, A)
    assert a.title == "A"
    assert a.title == "A"
    b = Titled.from_graph(graph.graph, B)
    assert b.title is None
    assert b.title is None
    assert Titled.calls == 2
    # unknown attributes are passed to the wrapped node
    assert a.node == A
