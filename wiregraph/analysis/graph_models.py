"""Data models for the dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from wiregraph.models import ComponentOrigin, InsertResult, NodeKind

Cycle = list[str]

STABLE_BELOW = 0.30
UNSTABLE_ABOVE = 0.70


def _check_id(node_id: str) -> str:
    if not isinstance(node_id, str) or not node_id:
        raise ValueError(f"Node identifier must be a non-empty string, got {node_id!r}")
    return node_id


@dataclass
class Node:
    id: str
    kind: NodeKind
    origin: ComponentOrigin | None = None
    implementation: str | None = None

    @property
    def is_defined(self) -> bool:
        """False for placeholders that were only ever referenced."""
        return self.kind is not NodeKind.COMPONENT or self.origin is not None


@dataclass(frozen=True, order=True)
class Edge:
    source: str
    target: str


@dataclass
class ComponentInfo:
    component_id: str
    implementation: str | None
    origin: ComponentOrigin

    @property
    def is_config_defined(self) -> bool:
        return self.origin is ComponentOrigin.CONFIG

    @property
    def is_declarative(self) -> bool:
        return self.origin is ComponentOrigin.DECLARATIVE


def classify(value: float) -> str:
    if value < STABLE_BELOW:
        return "stable"
    if value > UNSTABLE_ABOVE:
        return "unstable"
    return "moderate"


@dataclass
class CouplingMetric:
    node: str
    afferent: int   # Ca - incoming dependencies
    efferent: int   # Ce - outgoing dependencies
    instability: float  # I = Ce / (Ca + Ce)

    @property
    def classification(self) -> str:
        return classify(self.instability)

    def to_dict(self) -> dict:
        return {
            "node": self.node,
            "afferent": self.afferent,
            "efferent": self.efferent,
            "instability": round(self.instability, 4),
            "classification": self.classification,
        }


@dataclass
class DependencyGraph:
    """Directed graph with a deduplicated edge set, indexed both ways.

    Every edge endpoint is always a member of the node set: ``add_edge``
    creates missing endpoints and ``remove_node`` prunes touching edges.
    """
    default_kind: NodeKind = NodeKind.NAMESPACE
    _nodes: dict[str, Node] = field(default_factory=dict)
    _forward: dict[str, set[str]] = field(default_factory=dict)  # source -> {targets}
    _reverse: dict[str, set[str]] = field(default_factory=dict)  # target -> {sources}
    _edge_count: int = 0

    # ── Mutation ─────────────────────────────────────────────

    def add_node(self, node_id: str, kind: NodeKind | None = None) -> Node:
        _check_id(node_id)
        node = self._nodes.get(node_id)
        if node is None:
            node = Node(id=node_id, kind=kind or self.default_kind)
            self._nodes[node_id] = node
            self._forward[node_id] = set()
            self._reverse[node_id] = set()
        return node

    def add_edge(self, source: str, target: str, kind: NodeKind | None = None) -> InsertResult:
        _check_id(source)
        _check_id(target)
        self.add_node(source, kind)
        self.add_node(target, kind)
        if target in self._forward[source]:
            return InsertResult.ALREADY_PRESENT
        self._forward[source].add(target)
        self._reverse[target].add(source)
        self._edge_count += 1
        return InsertResult.INSERTED

    def remove_node(self, node_id: str) -> bool:
        _check_id(node_id)
        if node_id not in self._nodes:
            return False
        for target in self._forward.pop(node_id):
            self._reverse[target].discard(node_id)
            self._edge_count -= 1
        for source in self._reverse.pop(node_id):
            # A self-loop was already counted through the forward set
            if source != node_id:
                self._forward[source].discard(node_id)
                self._edge_count -= 1
        del self._nodes[node_id]
        return True

    # ── Queries ──────────────────────────────────────────────

    @property
    def nodes(self) -> Mapping[str, Node]:
        return MappingProxyType(self._nodes)

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(_check_id(node_id))

    def has_node(self, node_id: str) -> bool:
        return _check_id(node_id) in self._nodes

    def has_edge(self, source: str, target: str) -> bool:
        return _check_id(target) in self._forward.get(_check_id(source), ())

    def outgoing_of(self, node_id: str) -> frozenset[str]:
        return frozenset(self._forward.get(_check_id(node_id), ()))

    def incoming_of(self, node_id: str) -> frozenset[str]:
        return frozenset(self._reverse.get(_check_id(node_id), ()))

    def edges(self) -> list[Edge]:
        return sorted(
            Edge(source, target)
            for source, targets in self._forward.items()
            for target in targets
        )

    def node_count(self) -> int:
        return len(self._nodes)

    def edge_count(self) -> int:
        return self._edge_count
