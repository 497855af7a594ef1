"""Rendering of a laid-out family tree with matplotlib."""

import logging
from pathlib import Path
import re

import networkx as nx

from graph import (
    is_person,
    is_union,
    left_union,
    relation_classes,
    relatives,
    rendered_children,
    right_union,
)
from layout import Layout, bounding_box
from models import Footprint, LayoutSettings, Point
from parsing import Records, attribute_values, display_name, parse_lifespan
from session import LoadBarrier, Session

logger = logging.getLogger(__name__)

# Box geometry, in pixels
CHAR_WIDTH = 7
TEXT_LINE_HEIGHT = 14
BOX_PADDING = 6
PHOTO_WIDTH = 70
FUDGE_BELOW_PARENT = 4  # tuck partner lines just inside the box

DPI = 100

# First web address in a note, attached to its line as a link in SVG/PDF output
NOTE_LINK = re.compile(r"http\S*")

RELATION_COLORS = {
    "root": "gold",
    "ancestor": "lightblue",
    "descendant": "lightgreen",
    "blood": "khaki",
    "other": "lightgray",
}
LINE_COLORS = {
    "root": "black",
    "ancestor": "steelblue",
    "descendant": "seagreen",
    "blood": "darkgoldenrod",
    "other": "darkgray",
}


def label_lines(name: str, records: Records) -> list[str]:
    """Text shown in a person's box: one word per line, then the lifespan."""
    lines = display_name(name).replace("-", "\u2011").split(" ")
    for value in attribute_values(records.get(name, []), "l"):
        birth, death = parse_lifespan(value)
        if birth:
            lines.append(birth + ("" if death else "\u2013"))
        if death:
            lines.append("\u2013" + death)
    return lines


def person_info(G: nx.Graph, name: str, records: Records) -> list[str]:
    """
    Notes about a person: their own `n:` lines, then one line per side union
    with a note, "With <partner>: <note>".
    """
    info = attribute_values(records.get(name, []), "n")
    for union in (left_union(G, name), right_union(G, name)):
        if union is None:
            continue
        notes = attribute_values(records.get(union, []), "n")
        if notes:
            info.append(f"With {display_name(union.partner_of(name))}: {' '.join(notes)}")
    return info


def note_link(note: str) -> str | None:
    match = NOTE_LINK.search(note)
    return match.group(0) if match else None


def photo_path(name: str, records: Records, photo_dir: Path) -> Path | None:
    values = attribute_values(records.get(name, []), "p")
    return Path(photo_dir) / values[-1] if values else None


def load_photos(
    G: nx.Graph, records: Records, photo_dir: Path, barrier: LoadBarrier
) -> dict:
    """
    Load every person's photo, settling one barrier slot per photo.

    A photo that cannot be read is logged and left out; it still settles so
    the barrier can release.
    """
    import matplotlib.image as mpimg

    photos = {}
    for name in G.nodes:
        if not is_person(name):
            continue
        path = photo_path(name, records, photo_dir)
        if path is None:
            continue
        settle = barrier.expect()
        try:
            photos[name] = mpimg.imread(str(path))
        except (OSError, ValueError) as e:
            logger.warning("Could not load photo for %s from %s: %s", display_name(name), path, e)
        finally:
            settle()
    return photos


def photo_height(image) -> float:
    height, width = image.shape[:2]
    return PHOTO_WIDTH * height / width


def footprint(name: str, records: Records, photos: dict) -> Footprint:
    """
    Size of a person's box. Photos not loaded yet take no space, so the box
    grows once they arrive.
    """
    lines = label_lines(name, records)
    width = max(len(line) for line in lines) * CHAR_WIDTH
    height = len(lines) * TEXT_LINE_HEIGHT
    if name in photos:
        width = max(width, PHOTO_WIDTH)
        height += photo_height(photos[name])
    return Footprint(width + 2 * BOX_PADDING, height + 2 * BOX_PADDING)


def footprint_function(records: Records, photos: dict):
    return lambda name: footprint(name, records, photos)


def _connect(G, a, b, layout: Layout, footprints: dict) -> tuple[Point, Point]:
    person, union = (a, b) if is_person(a) else (b, a)
    p, u = layout[person], layout[union]
    size = footprints[person]
    end = Point(u.x, u.y)

    if person in union.members:
        if rendered_children(G, union, layout):
            # Down from the bottom of the partner to the union
            return Point(p.x, p.y + size.height / 2 - FUDGE_BELOW_PARENT), end
        # Across from the partner's side facing the union
        sign = 1 if union.left == person else -1
        return Point(p.x + sign * size.width / 2, p.y), end
    # Up from the top of the child
    return Point(p.x, p.y - size.height / 2), end


def connection_segments(
    G: nx.Graph, root: str, layout: Layout, footprints: dict
) -> list[tuple[Point, Point, str]]:
    """Return (start, end, relation) for every line joining drawn nodes."""
    segments = []
    for node, pred, relation in relatives(G, root):
        if pred is None or node not in layout or pred not in layout:
            continue
        if is_union(node) and pred in node.members and not rendered_children(G, node, layout):
            # A childless union is not part of anyone's line
            relation = "other"
        start, end = _connect(G, node, pred, layout, footprints)
        segments.append((start, end, relation))
    return segments


def describe_counts(classes: dict[str, str], layout: Layout) -> str:
    """Summary like "Showing 2 descendants, 4 ancestors and 1 others (total 8)."."""
    counts = {relation: 0 for relation in ("descendant", "ancestor", "blood", "other")}
    for person, relation in classes.items():
        if person in layout and relation in counts:
            counts[relation] += 1

    parts = [
        f"{number} {description}"
        for description, number in zip(
            ("descendants", "ancestors", "blood relatives", "others"), counts.values()
        )
        if number > 0
    ]
    if len(parts) > 1:
        text = ", ".join(parts[:-1]) + " and " + parts[-1]
    else:
        text = "".join(parts)
    total = sum(counts.values()) + 1
    return f"Showing {text} (total {total})." if text else f"Showing (total {total})."


def draw_tree(
    G: nx.Graph,
    records: Records,
    session: Session,
    layout: Layout,
    photos: dict,
    output_path: Path | None = None,
    settings: LayoutSettings | None = None,
):
    """
    Draw the laid-out tree: a box per person, lines through each union and
    the notes of everyone shown listed underneath.

    Args:
        G: Family graph
        records: Parsed family file, for labels and lifespans
        session: Root and detail level of this view
        layout: Pixel coordinates from layout.compute_layout
        photos: Loaded photos by person name
        output_path: Path to save the image (PNG/SVG/PDF). If None, displays interactively.
        settings: Layout settings used to compute `layout`
    """
    import matplotlib.pyplot as plt
    from matplotlib.patches import FancyBboxPatch

    settings = settings or LayoutSettings()
    people = [n for n in layout if is_person(n)]
    footprints = {n: footprint(n, records, photos) for n in people}
    classes = relation_classes(G, session.root)

    _, bottom_right = bounding_box(layout, lambda n: footprints[n].width / 2 if is_person(n) else 0)
    width = bottom_right.x + settings.padding
    height = bottom_right.y + settings.line_height * settings.margin_rows

    # Notes panel under the tree
    notes = [
        f"{display_name(name)}: {note}"
        for name in people
        for note in person_info(G, name, records)
    ]
    notes_top = height
    height += len(notes) * TEXT_LINE_HEIGHT

    fig, ax = plt.subplots(figsize=(max(width, 1) / DPI, max(height, 1) / DPI), dpi=DPI)

    for start, end, relation in connection_segments(G, session.root, layout, footprints):
        ax.plot([start.x, end.x], [start.y, end.y], color=LINE_COLORS[relation], linewidth=1.5)

    for name in people:
        pt, size = layout[name], footprints[name]
        left, top = pt.x - size.width / 2, pt.y - size.height / 2
        ax.add_patch(
            FancyBboxPatch(
                (left, top),
                size.width,
                size.height,
                boxstyle="round,pad=0,rounding_size=6",
                facecolor=RELATION_COLORS[classes.get(name, "other")],
                edgecolor="dimgray",
            )
        )
        text_top = top + BOX_PADDING
        lines = label_lines(name, records)
        if name in photos:
            name_lines = len(display_name(name).split(" "))
            ax.text(pt.x, text_top, "\n".join(lines[:name_lines]), ha="center", va="top", fontsize=8)
            photo_top = text_top + name_lines * TEXT_LINE_HEIGHT
            photo_bottom = photo_top + photo_height(photos[name])
            ax.imshow(
                photos[name],
                extent=(pt.x - PHOTO_WIDTH / 2, pt.x + PHOTO_WIDTH / 2, photo_bottom, photo_top),
                aspect="auto",
            )
            if lines[name_lines:]:
                ax.text(pt.x, photo_bottom, "\n".join(lines[name_lines:]), ha="center", va="top", fontsize=8)
        else:
            ax.text(pt.x, text_top, "\n".join(lines), ha="center", va="top", fontsize=8)

    for i, note in enumerate(notes):
        ax.text(
            settings.padding,
            notes_top + i * TEXT_LINE_HEIGHT,
            note,
            ha="left",
            va="top",
            fontsize=8,
            url=note_link(note),
        )

    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)  # generations grow downwards
    ax.axis("off")
    ax.set_title(f"{display_name(session.root)}'s Family Tree\n{describe_counts(classes, layout)}")

    if output_path:
        fig.savefig(output_path, dpi=DPI, bbox_inches="tight")
        plt.close(fig)
        print(f"Tree saved to {output_path}")
    else:
        plt.show()
