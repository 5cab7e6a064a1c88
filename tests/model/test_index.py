from dataclasses import dataclass

from hypothesis import given
from hypothesis import strategies as st
from rdflib import Namespace, URIRef

from rosrs_client.model import Annotation, AnnotationIndex
from rosrs_client.model.research_object import root_members, sort_by_name

EX = Namespace("http://example.org/")
R1, R2, R3 = EX["r1"], EX["r2"], EX["r3"]


def ann(name, *targets):
    return Annotation(None, EX[name], EX[f"{name}.ttl"], targets)


def test_add_and_get():
    index = AnnotationIndex()
    a = ann("a", R1, R2)
    index.add(a)
    assert index.get(R1) == [a]
    assert index.get(str(R2)) == [a]
    assert index.get(R3) == []
    assert index.targets() == {R1, R2}
    assert len(index) == 1
    assert EX["a"] in index
    assert index.annotation(str(EX["a"])) is a


def test_add_replaces_same_uri():
    index = AnnotationIndex()
    index.add(ann("a", R1))
    b = ann("a", R2)
    index.add(b)
    assert len(index) == 1
    assert index.get(R1) == []
    assert index.get(R2) == [b]


def test_remove_annotation_keeps_targets_of_others():
    index = AnnotationIndex()
    a, b = ann("a", R1, R2), ann("b", R1)
    index.add(a)
    index.add(b)
    index.remove_annotation(a)
    assert index.get(R1) == [b]
    assert R2 not in index.targets()
    assert EX["a"] not in index
    # removing twice is harmless
    index.remove_annotation(a)
    assert len(index) == 1


def test_remove_target_cascade():
    index = AnnotationIndex()
    shared, single = ann("shared", R1, R2), ann("single", R1)
    index.add(shared)
    index.add(single)

    index.remove_target(R1)
    # the single-target annotation is gone
    assert EX["single"] not in index
    # the shared one stays under its remaining target
    assert shared.targets == {R2}
    assert index.get(R2) == [shared]
    assert index.as_multimap() == {R2: {shared}}


def test_remove_unknown_target():
    index = AnnotationIndex()
    a = ann("a", R1)
    index.add(a)
    index.remove_target(R3)
    assert list(index) == [a]


# ---- root views


@dataclass(frozen=True)
class Member:
    uri: URIRef
    name: str


members_st = st.lists(
    st.builds(
        Member,
        st.integers(0, 50).map(lambda i: EX[f"m{i}"]),
        st.sampled_from(["a", "b", "c", "d"]),
    ),
    unique_by=lambda m: m.uri,
)


@given(members_st, st.data())
def test_root_members(members, data):
    contained = data.draw(st.sets(st.sampled_from([m.uri for m in members] or [R1])))
    roots = root_members(members, contained)

    assert {m.uri for m in roots} == {m.uri for m in members} - contained
    names = [m.name for m in roots]
    assert names == sorted(names)
    # stable for equal names
    for name in set(names):
        same = [m for m in roots if m.name == name]
        assert same == [m for m in members if m.name == name and m.uri not in contained]


def test_sort_by_name():
    a, b, c = Member(R1, "b"), Member(R2, "a"), Member(R3, "b")
    assert sort_by_name([a, b, c]) == [b, a, c]
