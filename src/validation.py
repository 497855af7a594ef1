"""Structural validation for the family tree graph."""

import networkx as nx

from errors import StructureError
from graph import is_person, is_union, left_union, right_union, union_above
from parsing import display_name


def validate_graph(G: nx.Graph) -> None:
    """
    Check that the graph can be laid out as one family tree:
    - Every node was defined (no dangling references)
    - Every union is joined to both of its members
    - No loops
    - A single connected component
    - Each person has at most one union per side and one set of parents

    Raises StructureError describing the first problem found.
    """
    for node, data in G.nodes(data=True):
        if "kind" not in data:
            neighbors = ", ".join(display_name(n) for n in G.neighbors(node))
            raise StructureError(f"{display_name(node)} is referenced by {neighbors} but never defined")
        if is_union(node):
            for member in node.members:
                if member not in G or not G.has_edge(node, member):
                    raise StructureError(
                        f"Union {display_name(node)} refers to missing member {display_name(member)}"
                    )

    try:
        cycle = nx.find_cycle(G)
    except nx.NetworkXNoCycle:
        pass
    else:
        loop = [display_name(edge[0]) for edge in cycle] + [display_name(cycle[0][0])]
        raise StructureError(f"Loop detected: {', '.join(loop)}")

    components = list(nx.connected_components(G))
    if len(components) > 1:
        msg = "Multiple connected components"
        for component in components:
            # Name each group by its earliest node in file order
            first = next(n for n in G.nodes if n in component)
            msg += f" | {len(component)} connected to {display_name(first)}"
        raise StructureError(msg)

    for node in G.nodes:
        if is_person(node):
            left_union(G, node)
            right_union(G, node)
            union_above(G, node)
