"""Read-only query facade over finished graphs, plus the one-shot analysis run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from wiregraph.models import AnalysisConfig, ComponentFact, GraphLevel, SourceUnitFact
from wiregraph.analysis.component_graph import ComponentGraphBuilder
from wiregraph.analysis.coupling import compute_coupling
from wiregraph.analysis.cycles import detect_cycles, strongly_connected_components
from wiregraph.analysis.dependency_graph import StructuralGraphBuilder
from wiregraph.analysis.diagram import (
    render_component_diagram,
    render_cycle_diagram,
    render_dependency_diagram,
)
from wiregraph.analysis.graph_models import (
    ComponentInfo,
    CouplingMetric,
    Cycle,
    DependencyGraph,
    Edge,
)

logger = logging.getLogger(__name__)


class GraphView:
    """Query surface for renderers and reporters; exposes no mutation."""

    def __init__(self, graph: DependencyGraph, component_info: dict[str, ComponentInfo] | None = None):
        self._graph = graph
        self._info = dict(component_info or {})

    def nodes(self) -> list[str]:
        return sorted(self._graph.nodes)

    def edges(self) -> list[Edge]:
        return self._graph.edges()

    def node_count(self) -> int:
        return self._graph.node_count()

    def edge_count(self) -> int:
        return self._graph.edge_count()

    def has_node(self, node_id: str) -> bool:
        return self._graph.has_node(node_id)

    def dependencies_of(self, node_id: str) -> frozenset[str]:
        return self._graph.outgoing_of(node_id)

    def dependents_of(self, node_id: str) -> frozenset[str]:
        return self._graph.incoming_of(node_id)

    def node_info(self, node_id: str) -> ComponentInfo | None:
        return self._info.get(node_id)

    def undefined_nodes(self) -> list[str]:
        """Referenced-but-undefined placeholders."""
        return sorted(n.id for n in self._graph.nodes.values() if not n.is_defined)

    def cycles(self) -> list[Cycle]:
        return detect_cycles(self._graph)

    def offending_components(self) -> list[list[str]]:
        return [
            c for c in strongly_connected_components(self._graph)
            if len(c) > 1 or self._graph.has_edge(c[0], c[0])
        ]

    def coupling(self) -> dict[str, CouplingMetric]:
        return compute_coupling(self._graph)

    def to_dict(self) -> dict:
        nodes = []
        for node_id in self.nodes():
            node = self._graph.nodes[node_id]
            entry = {"id": node_id, "kind": node.kind.value}
            if node.origin is not None:
                entry["origin"] = node.origin.value
                entry["implementation"] = node.implementation
            nodes.append(entry)
        return {
            "nodes": nodes,
            "edges": [{"source": e.source, "target": e.target} for e in self.edges()],
        }


@dataclass
class DependencyOptions:
    detect_circular: bool = True
    calculate_metrics: bool = True
    generate_diagrams: bool = True
    level: GraphLevel = GraphLevel.NAMESPACE


@dataclass
class DependencyAnalysisResult:
    structural: GraphView | None = None
    components: GraphView | None = None
    structural_cycles: list[Cycle] = field(default_factory=list)
    component_cycles: list[Cycle] = field(default_factory=list)
    coupling: dict[str, CouplingMetric] | None = None
    dependency_diagram: str | None = None
    component_diagram: str | None = None
    cycle_diagram: str | None = None

    def summary(self) -> dict:
        summary: dict[str, int] = {}
        if self.structural is not None:
            summary["total_nodes"] = self.structural.node_count()
            summary["dependencies"] = self.structural.edge_count()
            summary["circular_dependencies"] = len(self.structural_cycles)
        if self.components is not None:
            summary["total_components"] = self.components.node_count()
            summary["component_dependencies"] = self.components.edge_count()
            summary["component_circular_dependencies"] = len(self.component_cycles)
        return summary

    def to_dict(self) -> dict:
        return {
            "summary": self.summary(),
            "graph": self.structural.to_dict() if self.structural else None,
            "components": self.components.to_dict() if self.components else None,
            "cycles": self.structural_cycles,
            "component_cycles": self.component_cycles,
            "coupling": (
                [self.coupling[n].to_dict() for n in sorted(self.coupling)]
                if self.coupling is not None else None
            ),
            "diagrams": {
                "dependencies": self.dependency_diagram,
                "components": self.component_diagram,
                "cycles": self.cycle_diagram,
            },
        }


def analyze(
    source_units: Iterable[SourceUnitFact] = (),
    components: Iterable[ComponentFact] = (),
    options: DependencyOptions | None = None,
    config: AnalysisConfig | None = None,
) -> DependencyAnalysisResult:
    """Build the structural and component graphs, then run the requested queries."""
    options = options or DependencyOptions()
    config = config or AnalysisConfig()
    source_units = list(source_units)
    components = list(components)
    result = DependencyAnalysisResult()

    structural = StructuralGraphBuilder(options.level, config)
    accepted = structural.add_units(source_units)
    logger.info("Structural graph: %d/%d units accepted", accepted, len(source_units))
    result.structural = GraphView(structural.graph)

    if options.detect_circular:
        result.structural_cycles = result.structural.cycles()
    if options.calculate_metrics:
        result.coupling = result.structural.coupling()

    if components or source_units:
        component_builder = ComponentGraphBuilder(config)
        component_builder.build(components, source_units)
        result.components = GraphView(component_builder.graph, component_builder.all_component_info())
        if options.detect_circular:
            result.component_cycles = result.components.cycles()

    if options.generate_diagrams:
        result.dependency_diagram = render_dependency_diagram(result.structural, result.coupling)
        if result.components is not None and result.components.node_count():
            result.component_diagram = render_component_diagram(result.components)
        if result.structural_cycles:
            result.cycle_diagram = render_cycle_diagram(result.structural_cycles)

    return result
