"""
1) Parse the family file into records.
2) Build the person/union graph.
3) Validate that it is a single tree.
4) Lay out the people visible from the chosen root.
5) Load photos, then lay out again with their final sizes and draw the tree.
"""

import argparse
import logging
from pathlib import Path
import sys

from errors import FamilyTreeError
from graph import build_graph, is_person
from layout import compute_layout
from models import Detail, LayoutSettings
from parsing import display_name, read_records
from plotting import draw_tree, footprint_function, load_photos
from session import LoadBarrier, Session
from validation import validate_graph


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Draw a family tree around one person.")
    parser.add_argument("family_file", type=Path, help="Family records text file")
    parser.add_argument("--root", help="Person to centre the tree on (default: first person in the file)")
    parser.add_argument(
        "--detail",
        default="Infinity",
        help='How far to branch out: 1, 2, ..., "Infinity" or "Everyone" (default: Infinity)',
    )
    parser.add_argument(
        "--view",
        help='Deep link such as "#Homer%%20Simpson:2"; overrides --root, and --detail when it names a level',
    )
    parser.add_argument("--photo-dir", type=Path, help="Photo folder (default: photos/ next to the family file)")
    parser.add_argument("--line-height", type=float, default=LayoutSettings.line_height)
    parser.add_argument("--output", type=Path, help="Image file to write (default: show a window)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log layout details")
    return parser.parse_args(argv)


def run(args: argparse.Namespace):
    print(f"Parsing family file: {args.family_file}")
    records = read_records(args.family_file)
    print(f"  Found {len(records)} entries")

    print("Building relationship graph...")
    G = build_graph(records)
    print(f"  Graph has {G.number_of_nodes()} nodes and {G.number_of_edges()} edges")

    print("Validating graph...")
    validate_graph(G)
    print("  No validation issues found")

    default_root = args.root or next((n for n in G.nodes if is_person(n)), None)
    if default_root is None:
        raise FamilyTreeError("No people found in the family file")
    if args.view:
        session = Session.from_fragment(args.view, default_root)
        if ":" not in args.view:
            session = session.with_detail(Detail.parse(args.detail))
    else:
        session = Session(default_root, Detail.parse(args.detail))
    settings = LayoutSettings(line_height=args.line_height)
    photo_dir = args.photo_dir or args.family_file.parent / "photos"

    photos: dict = {}
    footprint_of = footprint_function(records, photos)

    # Lay out once before any photo loads so layout errors surface early
    layout = compute_layout(G, session, footprint_of, settings)
    print(f"Provisional layout of {len(layout)} nodes around {display_name(session.root)}")

    def redraw():
        final = compute_layout(G, session, footprint_of, settings)
        print(f"Drawing {len(final)} nodes ({session.fragment()})")
        draw_tree(G, records, session, final, photos, args.output, settings)

    barrier = LoadBarrier(on_ready=redraw)
    print(f"Loading photos from: {photo_dir}")
    photos.update(load_photos(G, records, photo_dir, barrier))
    barrier.seal()


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except FamilyTreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print("Done!")


if __name__ == "__main__":
    main()
