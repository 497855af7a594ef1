"""Tests for the relationship graph and its queries."""

import pytest

from errors import StructureError
from graph import (
    build_graph,
    children_of,
    left_union,
    relation_classes,
    rendered_children,
    right_union,
    union_above,
    union_on_side,
)
from models import Side, UnionKey
from parsing import parse_records

HOMER_MARGE = UnionKey("Homer", "Marge")


def test_nodes_have_kinds(simpsons):
    assert simpsons.nodes["Homer"]["kind"] == "person"
    assert simpsons.nodes[HOMER_MARGE]["kind"] == "union"
    # Only ever mentioned as a child
    assert simpsons.nodes["Bart"]["kind"] == "person"
    assert simpsons.nodes["?#1"]["kind"] == "person"


def test_graph_is_bipartite(simpsons):
    for u, v in simpsons.edges:
        assert isinstance(u, UnionKey) != isinstance(v, UnionKey)


def test_children_in_file_order(simpsons):
    assert children_of(simpsons, HOMER_MARGE) == ["Bart", "Lisa", "Maggie"]
    assert children_of(simpsons, UnionKey("Herb", "...#2")) == []
    assert children_of(simpsons, None) == []


def test_side_unions(simpsons):
    # Homer is the left member, so the union sits to his right
    assert right_union(simpsons, "Homer") == HOMER_MARGE
    assert left_union(simpsons, "Homer") is None
    assert left_union(simpsons, "Marge") == HOMER_MARGE
    assert union_on_side(simpsons, "Marge", Side.RIGHT) == HOMER_MARGE
    assert union_on_side(simpsons, "Marge", Side.LEFT) is None


def test_union_above(simpsons):
    assert union_above(simpsons, "Lisa") == HOMER_MARGE
    assert union_above(simpsons, "Homer") == UnionKey("Abe", "Mona")
    assert union_above(simpsons, "Abe") is None


def test_two_unions_on_one_side():
    G = build_graph(parse_records("Alice + Bob\nAlice + Carl\n"))
    with pytest.raises(StructureError, match="Alice has two unions on side left"):
        right_union(G, "Alice")


def test_two_sets_of_parents():
    G = build_graph(parse_records("A + B\n  c: X\nC + D\n  c: X\n"))
    with pytest.raises(StructureError, match="X is listed as a child of both"):
        union_above(G, "X")


def test_own_child_rejected():
    with pytest.raises(StructureError, match="A is listed as their own child"):
        build_graph({UnionKey("A", "B"): ["c: C, A"]})


def test_repeated_child_rejected():
    with pytest.raises(StructureError, match="C is listed twice"):
        build_graph({UnionKey("A", "B"): ["c: C, C"]})


@pytest.mark.parametrize(
    "records",
    [
        {"A": ["c: B"]},
        {UnionKey("A", "B"): ["p: wedding.png"]},
        {"A": ["not an attribute"]},
    ],
)
def test_attribute_whitelist(records):
    with pytest.raises(StructureError, match="Mis-formatted attribute"):
        build_graph(records)


def test_rendered_children(simpsons):
    layout = {"Bart": None, "Maggie": None}
    assert rendered_children(simpsons, HOMER_MARGE, layout) == ["Bart", "Maggie"]


def test_relation_classes_from_child(simpsons):
    classes = relation_classes(simpsons, "Bart")
    assert classes["Bart"] == "root"
    assert classes["Homer"] == "ancestor"
    assert classes["Marge"] == "ancestor"
    assert classes["Abe"] == "ancestor"
    assert classes["Lisa"] == "blood"
    assert classes["Ling"] == "blood"
    assert classes["Zia"] == "blood"
    assert classes["Milhouse"] == "other"
    assert classes["?#1"] == "other"


def test_relation_classes_from_parent(simpsons):
    classes = relation_classes(simpsons, "Homer")
    assert classes["Bart"] == "descendant"
    assert classes["Zia"] == "descendant"
    assert classes["Marge"] == "other"
    assert classes["Herb"] == "blood"
    assert classes["Selma"] == "other"
