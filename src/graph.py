"""NetworkX graph building and relationship queries."""

import logging
from typing import Iterator, NamedTuple

import networkx as nx

from errors import StructureError
from models import PERSON, PERSON_ATTRIBUTES, UNION, UNION_ATTRIBUTES, Side, UnionKey
from parsing import ATTRIBUTE_LINE, Records, attribute_values, display_name, split_children

logger = logging.getLogger(__name__)

Node = str | UnionKey


def is_union(node: Node | None) -> bool:
    return isinstance(node, UnionKey)


def is_person(node: Node | None) -> bool:
    return isinstance(node, str)


def build_graph(records: Records) -> nx.Graph:
    """
    Build the undirected bipartite graph of people and unions.

    Every union is joined to each listed child (in file order) and then to its
    left and right member. People referenced only from a union (children,
    placeholder partners) become person nodes as well, so every node carries a
    `kind` attribute of "person" or "union".

    Args:
        records: Parsed family file, from parsing.parse_records

    Returns:
        An nx.Graph whose adjacency order follows the file
    """
    G = nx.Graph()

    for key, lines in records.items():
        if is_union(key):
            _check_attributes(key, lines, UNION_ATTRIBUTES)
            G.add_node(key, kind=UNION)
        else:
            _check_attributes(key, lines, PERSON_ATTRIBUTES)
            G.add_node(key, kind=PERSON)

    for key, lines in records.items():
        if not is_union(key):
            continue
        children = [c for value in attribute_values(lines, "c") for c in split_children(value)]
        for child in children:
            if child in key.members:
                raise StructureError(f"{display_name(child)} is listed as their own child")
            if G.has_edge(key, child):
                raise StructureError(
                    f"{display_name(child)} is listed twice as a child of {display_name(key)}"
                )
            _add_person(G, child)
            G.add_edge(key, child)
        for member in key.members:
            _add_person(G, member)
            G.add_edge(key, member)

    logger.info("Built graph with %d nodes and %d edges", G.number_of_nodes(), G.number_of_edges())
    return G


def _add_person(G: nx.Graph, name: str):
    if name not in G:
        G.add_node(name, kind=PERSON)


def _check_attributes(key: Node, lines: list[str], allowed: tuple[str, ...]):
    for line in lines:
        match = ATTRIBUTE_LINE.match(line)
        if match is None or match.group(1) not in allowed:
            raise StructureError(f"Mis-formatted attribute under {display_name(key)}: {line}")


def union_on_side(G: nx.Graph, person: str, side: Side) -> UnionKey | None:
    """
    Find the union in which `person` is the member on the given side.

    A person is the left member of at most one union and the right member of
    at most one union; more than that cannot be drawn on a single row.
    """
    found = [n for n in G.neighbors(person) if is_union(n) and n.side_of(person) is side]
    if not found:
        return None
    if len(found) > 1:
        raise StructureError(f"{display_name(person)} has two unions on side {side.name.lower()}")
    return found[0]


def left_union(G: nx.Graph, person: str) -> UnionKey | None:
    """Union drawn to the left of `person`, i.e. where they are the right member."""
    return union_on_side(G, person, Side.RIGHT)


def right_union(G: nx.Graph, person: str) -> UnionKey | None:
    """Union drawn to the right of `person`, i.e. where they are the left member."""
    return union_on_side(G, person, Side.LEFT)


def union_above(G: nx.Graph, person: str) -> UnionKey | None:
    """Return the union listing `person` as a child, if any."""
    found = [n for n in G.neighbors(person) if is_union(n) and n.side_of(person) is None]
    if not found:
        return None
    if len(found) > 1:
        raise StructureError(
            f"{display_name(person)} is listed as a child of both "
            f"{display_name(found[0])} and {display_name(found[1])}"
        )
    return found[0]


def children_of(G: nx.Graph, union: UnionKey | None) -> list[str]:
    if union is None:
        return []
    return [n for n in G.neighbors(union) if n not in union.members]


def rendered_children(G: nx.Graph, union: UnionKey, layout: dict) -> list[str]:
    return [child for child in children_of(G, union) if child in layout]


class Kinship(NamedTuple):
    ancestor: bool = True
    descendant: bool = True
    blood: bool = True


def _relation(pred: Node | None, kin: Kinship) -> str:
    if pred is None:
        return "root"
    if kin.ancestor:
        return "ancestor"
    if kin.descendant:
        return "descendant"
    if kin.blood:
        return "blood"
    return "other"


def relatives(G: nx.Graph, root: str) -> Iterator[tuple[Node, Node | None, str]]:
    """
    Walk the whole tree from `root`, yielding (node, predecessor, relation).

    Going up to a parent union stops a branch being descendant or blood; going
    sideways to a spouse union or down to a child stops it being ancestral, and
    keeps it blood only if it was ancestral or blood before.
    """

    def visit(node, pred, kin):
        yield node, pred, _relation(pred, kin)

        sideways = kin._replace(ancestor=False, blood=kin.ancestor or kin.blood)
        upward = kin._replace(blood=False, descendant=False)
        if is_person(node):
            steps = [
                (left_union(G, node), sideways),
                (right_union(G, node), sideways),
                (union_above(G, node), upward),
            ]
        else:
            steps = [(member, upward) for member in node.members]
            steps += [(child, sideways) for child in children_of(G, node)]

        for nxt, nxt_kin in steps:
            if nxt is None or nxt == pred:
                continue
            yield from visit(nxt, node, nxt_kin)

    yield from visit(root, None, Kinship())


def relation_classes(G: nx.Graph, root: str) -> dict[str, str]:
    """Map every person to "root", "ancestor", "descendant", "blood" or "other"."""
    return {node: rel for node, _, rel in relatives(G, root) if is_person(node)}
