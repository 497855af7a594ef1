"""
Layout engine: coordinates for every visible person and union.

A layout maps each node to a Point. While it is being built, x is in pixels
and y counts generations (negative is up). compute_layout then moves the
whole layout into positive coordinates and converts y to pixels.
"""

import logging
from typing import Callable

import networkx as nx

from errors import LayoutError
from graph import (
    Node,
    children_of,
    is_person,
    is_union,
    left_union,
    rendered_children,
    right_union,
    union_above,
)
from models import Footprint, LayoutSettings, Point
from parsing import display_name
from session import Session
from visibility import compute_visible

logger = logging.getLogger(__name__)

Layout = dict[Node, Point]
Radius = Callable[[Node], float]


def shift(layout: Layout, dx: float, dy: float):
    """Move every point of `layout` in place."""
    for point in layout.values():
        point.x += dx
        point.y += dy


def row_ranges(layout: Layout, radius: Radius) -> dict[float, tuple[float, float]]:
    """Return {row: (min x, max x)} covering the horizontal extent of each row."""
    ranges: dict[float, tuple[float, float]] = {}
    for node, pt in layout.items():
        r = radius(node)
        lo, hi = pt.x - r, pt.x + r
        if pt.y in ranges:
            old_lo, old_hi = ranges[pt.y]
            lo, hi = min(lo, old_lo), max(hi, old_hi)
        ranges[pt.y] = (lo, hi)
    return ranges


def collides(left: Layout, right: Layout, radius: Radius) -> bool:
    """Would any two boxes overlap if both layouts were drawn as they are?"""
    rows: dict[float, list[tuple[float, float]]] = {}
    for layout in (left, right):
        for node, pt in layout.items():
            r = radius(node)
            rows.setdefault(pt.y, []).append((pt.x - r, pt.x + r))
    for intervals in rows.values():
        intervals.sort()
        for (_, end), (start, _) in zip(intervals, intervals[1:]):
            if end > start:
                return True
    return False


def merged_layout(
    left: Layout,
    right: Layout,
    radius: Radius,
    move_right: bool = True,
    try_overlay: bool = False,
) -> Layout:
    """
    Combine two layouts side by side, `left` ending up to the left of `right`.

    The moving layout (right by default, else left) is shifted horizontally by
    the smallest amount that clears every row the two have in common. With
    `try_overlay`, the layouts are first tried exactly where they are, which
    lets small subtrees tuck under each other.

    Both layouts are consumed; the result is `left` updated with `right`.
    """
    if try_overlay and not collides(left, right, radius):
        left.update(right)
        return left

    left_rows = row_ranges(left, radius)
    right_rows = row_ranges(right, radius)
    gaps = [left_rows[y][1] - right_rows[y][0] for y in left_rows if y in right_rows]
    if not gaps:
        raise LayoutError(
            f"Cannot merge layouts without a common row: {_names(left)} and {_names(right)}"
        )

    delta = max(gaps)
    if move_right:
        shift(right, delta, 0)
    else:
        shift(left, -delta, 0)
    left.update(right)
    return left


def _names(layout: Layout) -> str:
    return "[" + ", ".join(display_name(n) for n in layout) + "]"


def relative_layout(
    G: nx.Graph, node: Node, pred: Node | None, visible: set[Node], radius: Radius
) -> Layout:
    """
    Lay out `node` and everything reachable from it without passing through `pred`.

    The result has `node` at (0, 0) and also contains `pred` (if visible), so
    the caller can line the two layouts up.

    A person gets their spouse unions on either side and their parents' union
    one row up. A union gets its visible children one row down, side by side
    and centred below it, with its two members on either side.
    """

    def place(nxt: Node | None, offset: tuple[float, float] = (0, 0)) -> Layout | None:
        if nxt is None or nxt not in visible:
            return None
        if nxt == pred:
            return {node: Point(0, 0), nxt: Point(*offset)}
        sub = relative_layout(G, nxt, node, visible, radius)
        origin = sub[node]
        shift(sub, -origin.x, -origin.y)
        return sub

    main: Layout = {node: Point(0, 0)}
    if is_person(node):
        left = place(left_union(G, node))
        right = place(right_union(G, node))
        above = place(union_above(G, node), (0, -1))
        if above is not None:
            main = above
    else:
        left = place(node.left)
        right = place(node.right)
        children = [c for c in children_of(G, node) if c in visible]
        if children:
            child_layouts = [place(child, (0, 1)) for child in children]
            for child_layout in child_layouts:
                del child_layout[node]
            main = child_layouts[0]
            for child_layout in child_layouts[1:]:
                main = merged_layout(main, child_layout, radius)
            xs = [main[child].x for child in children]
            shift(main, -(min(xs) + max(xs)) / 2, 0)
            main[node] = Point(0, 0)

    overlay = is_person(node)
    if left is not None:
        del left[node]
        main = merged_layout(left, main, radius, move_right=False, try_overlay=overlay)
    if right is not None:
        del right[node]
        main = merged_layout(main, right, radius, move_right=True, try_overlay=overlay)
    return main


def bounding_box(layout: Layout, radius: Radius) -> tuple[Point, Point]:
    """Return (top-left, bottom-right) corners around every box in the layout."""
    top_left = Point(
        min(pt.x - radius(n) for n, pt in layout.items()),
        min(pt.y for pt in layout.values()),
    )
    bottom_right = Point(
        max(pt.x + radius(n) for n, pt in layout.items()),
        max(pt.y for pt in layout.values()),
    )
    return top_left, bottom_right


def adjust_unions(G: nx.Graph, layout: Layout, footprints: dict[str, Footprint]):
    """
    Move each union with drawn children halfway between the bottom of its
    parents' boxes and the top of its children's boxes.
    """
    for node in layout:
        if not is_union(node):
            continue
        children = rendered_children(G, node, layout)
        if not children:
            continue
        parent_bottom = max(
            layout[p].y + footprints[p].height / 2 for p in node.members if p in layout
        )
        child_top = min(layout[c].y - footprints[c].height / 2 for c in children)
        if child_top < parent_bottom:
            raise LayoutError(
                f"Union {display_name(node)} overlapped above/below. Try increasing line height"
            )
        layout[node].y = (parent_bottom + child_top) / 2


def compute_layout(
    G: nx.Graph,
    session: Session,
    footprint_of: Callable[[str], Footprint],
    settings: LayoutSettings | None = None,
) -> Layout:
    """
    Compute final pixel coordinates for the session's visible nodes.

    Args:
        G: Validated family graph
        session: Root and detail level
        footprint_of: Size of a person's rendered box
        settings: Row height and padding (defaults if None)

    Returns:
        A fresh layout; nothing is cached between calls
    """
    settings = settings or LayoutSettings()
    visible = compute_visible(G, session)
    footprints = {n: footprint_of(n) for n in visible if is_person(n)}

    def radius(node: Node) -> float:
        if is_union(node):
            return 0
        return settings.padding + footprints[node].width / 2

    layout = relative_layout(G, session.root, None, visible, radius)
    top_left, _ = bounding_box(layout, radius)
    shift(layout, -top_left.x, settings.margin_rows - top_left.y)
    for pt in layout.values():
        pt.y *= settings.line_height
    adjust_unions(G, layout, footprints)

    logger.info("Laid out %d nodes around %s", len(layout), session.root)
    return layout
