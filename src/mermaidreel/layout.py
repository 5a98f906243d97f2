"""
Graph ordering and leveling primitives using networkx.

Uses networkx for:
- Graph representation (multigraphs, so parallel edges count separately)
- In-degree bookkeeping for Kahn's topological sort
- Adjacency for breadth-first level assignment

Both algorithms keep node insertion order wherever a tie has to be broken,
so the same input always produces the same output.
"""

from collections import deque
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple

import networkx as nx

# Level given to states that cannot be reached from any start node
FALLBACK_LEVEL = 3


def build_graph(
    nodes: Iterable[Hashable], edges: Iterable[Tuple[Hashable, Hashable]]
) -> nx.MultiDiGraph:
    """
    Build a directed multigraph with nodes in the given order.

    Edge endpoints that are not in ``nodes`` are added after them.
    """
    graph = nx.MultiDiGraph()
    graph.add_nodes_from(nodes)
    graph.add_edges_from(edges)
    return graph


def topological_order(
    graph: nx.MultiDiGraph,
    sort_key: Optional[Callable[[Hashable], float]] = None,
) -> List[Hashable]:
    """
    Order nodes with Kahn's algorithm.

    The initial zero in-degree queue is sorted by ``sort_key``; nodes freed
    by each removal are sorted by ``sort_key`` and appended to the queue.
    Nodes left over because they only sit on cycles are appended in graph
    insertion order.

    Args:
        graph: Directed multigraph; parallel edges each contribute in-degree.
        sort_key: Tie-break key (flowcharts use the node's y coordinate).

    Returns:
        Every node of the graph exactly once.
    """
    key = sort_key or (lambda node: 0)
    in_degree: Dict[Hashable, int] = {node: graph.in_degree(node) for node in graph}

    queue = deque(sorted((n for n, d in in_degree.items() if d == 0), key=key))
    visited = set()
    order: List[Hashable] = []

    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        order.append(current)

        freed = []
        for _, neighbor in graph.out_edges(current):
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0 and neighbor not in visited:
                freed.append(neighbor)
        queue.extend(sorted(freed, key=key))

    # Cycle members never reach zero in-degree
    order.extend(node for node in graph if node not in visited)
    return order


def assign_levels(
    graph: nx.MultiDiGraph,
    extra_roots: Iterable[Hashable] = (),
    fallback_level: int = FALLBACK_LEVEL,
) -> Dict[Hashable, int]:
    """
    Assign a breadth-first depth to every node.

    Roots are the nodes with no incoming edges plus ``extra_roots``; they
    get level 0. Every other node gets its parent's level + 1 on first
    visit. Unreachable nodes (pure cycle members) get ``fallback_level``.

    Returns:
        Mapping of node to level, in assignment order.
    """
    forced = set(extra_roots)
    levels: Dict[Hashable, int] = {}
    queue: deque = deque()

    for node in graph:
        if graph.in_degree(node) == 0 or node in forced:
            levels[node] = 0
            queue.append(node)

    while queue:
        current = queue.popleft()
        for neighbor in graph.successors(current):
            if neighbor not in levels:
                levels[neighbor] = levels[current] + 1
                queue.append(neighbor)

    for node in graph:
        if node not in levels:
            levels[node] = fallback_level

    return levels


def group_by_level(levels: Dict[Hashable, int]) -> Dict[int, List[Hashable]]:
    """Group nodes by level, keeping the order of ``levels``."""
    groups: Dict[int, List[Hashable]] = {}
    for node, level in levels.items():
        groups.setdefault(level, []).append(node)
    return groups
