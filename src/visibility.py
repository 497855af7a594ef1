"""Selection of the people and unions drawn around the root."""

import logging
from typing import NamedTuple

import networkx as nx

from errors import StructureError
from graph import Node, children_of, is_person, left_union, right_union, union_above
from session import Session

logger = logging.getLogger(__name__)


class PathState(NamedTuple):
    allow_up: bool  # may still climb to a parent union
    downs_left: float  # child levels left to descend once off the root's own line
    descending: bool  # still on the root's own line of descent


def compute_visible(G: nx.Graph, session: Session) -> set[Node]:
    """
    Return every node to draw for the session's root and detail level.

    From the root we climb through all ancestors. Spouse unions are entered
    sideways, which blocks climbing to in-laws' parents. Children are always
    shown on the root's own line of descent; elsewhere each step down uses up
    one level of the detail limit:
    - level 1: ancestors and siblings
    - level 2: adds first cousins, nieces and nephews
    - Infinity: every blood relative
    """
    if session.root not in G:
        raise StructureError(f"Selected name not found in data: {session.root}")
    if session.detail.include_all:
        return set(G.nodes)

    visible = _visible_from(G, session.root, None, PathState(True, session.detail.descent_limit, True))
    logger.debug("%d of %d nodes visible from %s", len(visible), G.number_of_nodes(), session.root)
    return visible


def _visible_from(G: nx.Graph, node: Node, pred: Node | None, path: PathState) -> set[Node]:
    result = {node}

    def visit(nxt, **changes):
        if nxt is None or nxt == pred:
            return
        result.update(_visible_from(G, nxt, node, path._replace(**changes)))

    if is_person(node):
        if path.allow_up:
            visit(union_above(G, node), descending=False)
        visit(left_union(G, node), allow_up=False)
        visit(right_union(G, node), allow_up=False)
    else:
        for member in node.members:
            visit(member)
        if path.descending or path.downs_left != 0:
            for child in children_of(G, node):
                visit(child, allow_up=False, downs_left=path.downs_left - 1)

    return result
