"""Tests for structural validation."""

import networkx as nx
import pytest

from errors import StructureError
from graph import build_graph
from models import UnionKey
from parsing import parse_records
from validation import validate_graph


def test_valid_tree_passes(simpsons, alice_bob):
    validate_graph(simpsons)
    validate_graph(alice_bob)


def test_single_person_passes():
    validate_graph(build_graph(parse_records("Alice\n")))


def test_loop_detected():
    G = build_graph(parse_records("A + B\n  c: C\nC + D\n  c: A\n"))
    with pytest.raises(StructureError, match="Loop detected") as excinfo:
        validate_graph(G)
    message = str(excinfo.value)
    for name in ("A + B", "C + D", "A", "C"):
        assert name in message


def test_multiple_components_lists_each_group():
    G = build_graph(parse_records("A + B\n  c: C\nD + E\n  c: F, G\n"))
    with pytest.raises(StructureError, match="Multiple connected components") as excinfo:
        validate_graph(G)
    message = str(excinfo.value)
    assert "| 4 connected to A + B" in message
    assert "| 5 connected to D + E" in message


def test_singleton_person_is_its_own_component():
    G = build_graph(parse_records("Alice + Bob\nLoner\n"))
    with pytest.raises(StructureError, match="1 connected to Loner"):
        validate_graph(G)


def test_dangling_reference():
    G = nx.Graph()
    G.add_node("A", kind="person")
    G.add_edge("A", "B")
    with pytest.raises(StructureError, match="B is referenced by A but never defined"):
        validate_graph(G)


def test_union_missing_member():
    G = nx.Graph()
    union = UnionKey("A", "B")
    G.add_node(union, kind="union")
    G.add_node("A", kind="person")
    G.add_edge(union, "A")
    with pytest.raises(StructureError, match="missing member B"):
        validate_graph(G)


def test_two_unions_on_a_side_caught_before_layout():
    G = build_graph(parse_records("Bob + Alice\nCarl + Alice\n"))
    with pytest.raises(StructureError, match="Alice has two unions on side right"):
        validate_graph(G)


def test_messages_hide_placeholder_numbering():
    G = build_graph(parse_records("? + Bob\n  c: Xavier\nCarl + Dee\n  c: Xavier\n"))
    with pytest.raises(StructureError) as excinfo:
        validate_graph(G)
    assert str(excinfo.value) == "Xavier is listed as a child of both ? + Bob and Carl + Dee"
