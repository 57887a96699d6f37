"""Cycle detection — exact cycle membership, then one witness cycle per walk."""

from __future__ import annotations

import logging

import networkx as nx

from wiregraph.analysis.graph_models import Cycle, DependencyGraph

logger = logging.getLogger(__name__)


def to_networkx(graph: DependencyGraph) -> nx.DiGraph:
    """Copy the graph into a networkx DiGraph, isolated nodes included."""
    digraph = nx.DiGraph()
    digraph.add_nodes_from(graph.nodes)
    digraph.add_edges_from((edge.source, edge.target) for edge in graph.edges())
    return digraph


def strongly_connected_components(graph: DependencyGraph) -> list[list[str]]:
    """Components and their members come back sorted."""
    digraph = to_networkx(graph)
    return sorted(sorted(component) for component in nx.strongly_connected_components(digraph))


def cycle_participants(graph: DependencyGraph) -> set[str]:
    """Nodes that lie on at least one directed cycle (self-loops included)."""
    digraph = to_networkx(graph)
    participants: set[str] = set()
    for component in nx.strongly_connected_components(digraph):
        if len(component) > 1:
            participants.update(component)
    participants.update(source for source, _ in nx.selfloop_edges(digraph))
    return participants


def canonical_cycle(cycle: Cycle) -> tuple[str, ...]:
    """Rotate so the smallest node comes first; rotations are the same cycle."""
    pivot = cycle.index(min(cycle))
    return tuple(cycle[pivot:] + cycle[:pivot])


def detect_cycles(graph: DependencyGraph) -> list[Cycle]:
    """Return representative cycles, deduplicated by content.

    This reconstructs at most one witness cycle per walk; it is not an
    enumeration of every elementary cycle in a strongly connected component.
    """
    participants = cycle_participants(graph)
    if not participants:
        return []

    component_of: dict[str, int] = {}
    for idx, component in enumerate(strongly_connected_components(graph)):
        for member in component:
            component_of[member] = idx

    cycles: list[Cycle] = []
    seen: set[tuple[str, ...]] = set()
    covered: set[str] = set()

    for start in sorted(participants):
        if start in covered:
            continue
        cycle = _walk_cycle(graph, start, participants, component_of)
        if cycle is None:
            logger.debug("No witness cycle reconstructed from %s", start)
            continue
        key = canonical_cycle(cycle)
        if key in seen:
            continue
        seen.add(key)
        covered.update(key)
        cycles.append(list(key))

    return cycles


def _walk_cycle(
    graph: DependencyGraph,
    start: str,
    participants: set[str],
    component_of: dict[str, int],
) -> Cycle | None:
    if graph.has_edge(start, start):
        return [start]

    path = [start]
    visited = {start}
    current = start

    while True:
        nxt = _next_step(graph, current, start, participants, component_of)
        if nxt is None:
            return None
        if nxt == start:
            return path
        if nxt in visited:
            return None
        path.append(nxt)
        visited.add(nxt)
        current = nxt


def _next_step(
    graph: DependencyGraph,
    current: str,
    start: str,
    participants: set[str],
    component_of: dict[str, int],
) -> str | None:
    candidates = sorted(t for t in graph.outgoing_of(current) if t in participants and t != current)
    if not candidates:
        return None
    if start in candidates:
        return start
    # Successors inside the start's component first; others can never lead back
    home = component_of.get(start)
    candidates.sort(key=lambda t: component_of.get(t) != home)
    return candidates[0]


class CycleDetector:
    """Object wrapper over the module functions, for callers that keep one around."""

    def __init__(self, graph: DependencyGraph):
        self.graph = graph

    def has_cycles(self) -> bool:
        return bool(cycle_participants(self.graph))

    def participants(self) -> set[str]:
        return cycle_participants(self.graph)

    def find_cycles(self) -> list[Cycle]:
        return detect_cycles(self.graph)
