"""Structural graph builder — namespace-level or type-level graphs from source-unit facts."""

from __future__ import annotations

import logging
from typing import Iterable

from wiregraph.models import AnalysisConfig, GraphLevel, NodeKind, SourceUnitFact
from wiregraph.analysis.graph_models import DependencyGraph

logger = logging.getLogger(__name__)


def is_wildcard(reference: str) -> bool:
    return reference == "*" or reference.endswith(".*")


def namespace_of(reference: str) -> str | None:
    """Strip the final path segment: ``a.b.C`` -> ``a.b``."""
    head, dot, _ = reference.rpartition(".")
    if not dot or not head:
        return None
    return head


class StructuralGraphBuilder:
    """Build a namespace- or type-level dependency graph from source-unit facts."""

    def __init__(self, level: GraphLevel = GraphLevel.NAMESPACE,
                 config: AnalysisConfig | None = None,
                 graph: DependencyGraph | None = None):
        self.level = level
        self.config = config or AnalysisConfig()
        self.graph = graph if graph is not None else DependencyGraph(default_kind=self.node_kind)

    @property
    def node_kind(self) -> NodeKind:
        return NodeKind.NAMESPACE if self.level is GraphLevel.NAMESPACE else NodeKind.TYPE

    def build(self, facts: Iterable[SourceUnitFact]) -> DependencyGraph:
        self.add_units(facts)
        return self.graph

    def add_units(self, facts: Iterable[SourceUnitFact]) -> int:
        """Add every fact; returns how many were accepted."""
        added = 0
        for fact in facts:
            try:
                if self.add_unit(fact):
                    added += 1
            except ValueError as e:
                logger.warning("Failed to add source unit %s to graph: %s", fact.path, e)
        return added

    def add_unit(self, fact: SourceUnitFact) -> bool:
        if not fact.namespace:
            logger.debug("Skipping source unit with no namespace: %s", fact.path)
            return False

        if self.level is GraphLevel.NAMESPACE:
            self._add_namespace_dependencies(fact)
        else:
            self._add_type_dependencies(fact)
        return True

    def resolve_target(self, reference: str) -> str | None:
        """Derive the node a reference points to, or None when it is filtered."""
        if not reference or self.config.is_excluded(reference) or is_wildcard(reference):
            return None
        if self.level is GraphLevel.NAMESPACE:
            return namespace_of(reference)
        return reference

    def _add_namespace_dependencies(self, fact: SourceUnitFact) -> None:
        source = fact.namespace
        self.graph.add_node(source, self.node_kind)

        for reference in fact.imports:
            target = self.resolve_target(reference)
            if target is None:
                continue
            self._link(source, target)

    def _add_type_dependencies(self, fact: SourceUnitFact) -> None:
        for type_fact in fact.types:
            source = fact.qualified_name(type_fact.name)
            self.graph.add_node(source, self.node_kind)

            for reference in fact.imports:
                target = self.resolve_target(reference)
                if target is None:
                    continue
                self._link(source, target)

    def _link(self, source: str, target: str) -> None:
        if target == source and not self.config.allow_self_loops:
            return
        self.graph.add_edge(source, target, self.node_kind)
