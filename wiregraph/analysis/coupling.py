"""Coupling metrics — afferent/efferent coupling and instability per node."""

from __future__ import annotations

from wiregraph.analysis.graph_models import (
    STABLE_BELOW,
    UNSTABLE_ABOVE,
    CouplingMetric,
    DependencyGraph,
    classify,
)

__all__ = [
    "STABLE_BELOW",
    "UNSTABLE_ABOVE",
    "classify",
    "compute_coupling",
    "instability",
    "rank_by_coupling",
]


def instability(afferent: int, efferent: int) -> float:
    """I = Ce / (Ca + Ce); 0 = maximally stable, 1 = maximally unstable."""
    total = afferent + efferent
    if total == 0:
        return 0.0
    return efferent / total


def compute_coupling(graph: DependencyGraph) -> dict[str, CouplingMetric]:
    metrics: dict[str, CouplingMetric] = {}
    for node_id in graph.nodes:
        afferent = len(graph.incoming_of(node_id))  # how many depend on this
        efferent = len(graph.outgoing_of(node_id))  # how many this depends on
        metrics[node_id] = CouplingMetric(
            node=node_id,
            afferent=afferent,
            efferent=efferent,
            instability=instability(afferent, efferent),
        )
    return metrics


def rank_by_coupling(metrics: dict[str, CouplingMetric]) -> list[CouplingMetric]:
    """Most coupled first (Ca + Ce), ties broken by node id."""
    return sorted(metrics.values(), key=lambda m: (-(m.afferent + m.efferent), m.node))
