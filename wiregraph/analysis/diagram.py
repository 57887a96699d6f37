"""Mermaid diagram rendering for dependency graphs, component graphs and cycles."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from wiregraph.analysis.graph_models import Cycle, CouplingMetric

if TYPE_CHECKING:
    from wiregraph.analysis.registry import GraphView


def sanitize_node_id(node_id: str) -> str:
    return re.sub(r'[^a-zA-Z0-9_]', '_', node_id)


def format_label(name: str) -> str:
    """Show at most the last three dotted segments."""
    parts = name.split(".")
    if len(parts) <= 3:
        return name
    return "..." + ".".join(parts[-3:])


def render_dependency_diagram(
    view: GraphView,
    metrics: dict[str, CouplingMetric] | None = None,
) -> str:
    lines = ["graph TD"]

    for node in view.nodes():
        style = ""
        if metrics is not None and node in metrics:
            style = f":::{metrics[node].classification}"
        lines.append(f'    {sanitize_node_id(node)}["{format_label(node)}"]{style}')

    for edge in view.edges():
        lines.append(f"    {sanitize_node_id(edge.source)} --> {sanitize_node_id(edge.target)}")

    if metrics is not None:
        lines.append("")
        lines.append("    classDef stable fill:#90EE90")
        lines.append("    classDef unstable fill:#FFB6C1")
        lines.append("    classDef moderate fill:#FFE4B5")

    return "\n".join(lines) + "\n"


def render_component_diagram(view: GraphView) -> str:
    lines = ["graph TD"]

    for component in view.nodes():
        info = view.node_info(component)
        style = ""
        if info is not None:
            style = ":::configComponent" if info.is_config_defined else ":::declarativeComponent"
        lines.append(f'    {sanitize_node_id(component)}["{component}"]{style}')

    for edge in view.edges():
        lines.append(f"    {sanitize_node_id(edge.source)} --> {sanitize_node_id(edge.target)}")

    lines.append("")
    lines.append("    classDef configComponent fill:#E0E0FF")
    lines.append("    classDef declarativeComponent fill:#FFE0E0")
    return "\n".join(lines) + "\n"


def render_cycle_diagram(cycles: list[Cycle]) -> str:
    lines = ["graph LR"]

    nodes: set[str] = set()
    edges: set[tuple[str, str]] = set()
    for cycle in cycles:
        nodes.update(cycle)
        for i, source in enumerate(cycle):
            edges.add((source, cycle[(i + 1) % len(cycle)]))

    for node in sorted(nodes):
        lines.append(f'    {sanitize_node_id(node)}["{format_label(node)}"]:::cycle')
    for source, target in sorted(edges):
        lines.append(f"    {sanitize_node_id(source)} --> {sanitize_node_id(target)}")

    lines.append("")
    lines.append("    classDef cycle fill:#FF6B6B,stroke:#C92A2A,stroke-width:3px")
    return "\n".join(lines) + "\n"
