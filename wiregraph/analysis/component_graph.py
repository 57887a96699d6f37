"""Component graph builder — wiring between DI components from configuration and declarative markers."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from wiregraph.models import (
    AnalysisConfig,
    ComponentFact,
    ComponentOrigin,
    MethodFact,
    NodeKind,
    SourceUnitFact,
    TypeFact,
)
from wiregraph.analysis.graph_models import ComponentInfo, DependencyGraph

logger = logging.getLogger(__name__)

_ALIAS_SPLIT = re.compile(r"[,;\s]+")


# ── Identity derivation (pure) ────────────────────────────────

def decapitalize(name: str) -> str:
    if not name:
        return name
    return name[0].lower() + name[1:]


def simple_name(type_name: str) -> str:
    """``com.example.Repo<User>`` -> ``Repo``; also strips array brackets."""
    base = type_name.split("<", 1)[0].strip()
    base = base.removesuffix("[]").removesuffix("...")
    return base.rsplit(".", 1)[-1]


def derive_config_id(fact: ComponentFact) -> str | None:
    """Explicit id, else the first name alias, else the implementation class."""
    if fact.id:
        return fact.id
    if fact.name:
        aliases = [a for a in _ALIAS_SPLIT.split(fact.name) if a]
        if aliases:
            return aliases[0]
    return fact.implementation or None


def derive_declarative_id(type_fact: TypeFact) -> str:
    if type_fact.component_name:
        return type_fact.component_name
    return decapitalize(type_fact.name)


def generic_argument(type_name: str) -> str | None:
    """Last top-level generic argument: ``Map<String, List<Foo>>`` -> ``List<Foo>``.

    Wildcard bounds are dropped (``? extends Foo`` -> ``Foo``); an unbounded
    ``?`` or a raw type gives None.
    """
    start = type_name.find("<")
    end = type_name.rfind(">")
    if start < 0 or end <= start:
        return None

    depth = 0
    last = start + 1
    inner = type_name[:end]
    for pos in range(start + 1, end):
        char = inner[pos]
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        elif char == "," and depth == 0:
            last = pos + 1

    argument = inner[last:].strip()
    for bound in ("? extends ", "? super "):
        argument = argument.removeprefix(bound)
    if argument in ("", "?"):
        return None
    return argument.strip()


def derive_id_from_type(
    type_name: str,
    builtin_types: Iterable[str] = (),
    container_types: Iterable[str] = (),
) -> str | None:
    """Default component id a typed injection point resolves to.

    Container wrappers (``Optional<Foo>``, ``List<Foo>``, ``Provider<Foo>``)
    resolve through their element type.
    """
    if not type_name:
        return None
    name = simple_name(type_name)
    containers = set(container_types)
    if name in containers:
        argument = generic_argument(type_name)
        if argument is None:
            return None
        return derive_id_from_type(argument, builtin_types, containers)
    if not name or name in set(builtin_types):
        return None
    return decapitalize(name)


# ── Builder ───────────────────────────────────────────────────

class ComponentGraphBuilder:
    """Build a component wiring graph plus its component metadata side table."""

    def __init__(self, config: AnalysisConfig | None = None):
        self.config = config or AnalysisConfig()
        self.graph = DependencyGraph(default_kind=NodeKind.COMPONENT)
        self.registry: dict[str, ComponentInfo] = {}

    def build(
        self,
        config_facts: Iterable[ComponentFact] = (),
        source_facts: Iterable[SourceUnitFact] = (),
    ) -> DependencyGraph:
        self.add_config_components(config_facts)
        self.add_source_units(source_facts)
        return self.graph

    def component_info(self, component_id: str) -> ComponentInfo | None:
        return self.registry.get(component_id)

    def all_component_info(self) -> dict[str, ComponentInfo]:
        return dict(self.registry)

    # ── Configuration origin ────────────────────────────────

    def add_config_components(self, facts: Iterable[ComponentFact]) -> list[str]:
        added: list[str] = []
        for fact in facts:
            component_id = self.add_config_component(fact)
            if component_id is not None:
                added.append(component_id)
        return added

    def add_config_component(self, fact: ComponentFact) -> str | None:
        component_id = derive_config_id(fact)
        if not component_id:
            logger.debug("Skipping configured component without id or class (%s)", fact.source)
            return None

        self._register(component_id, fact.implementation, ComponentOrigin.CONFIG)

        for prop in fact.properties:
            if prop.is_reference:
                self._link(component_id, prop.ref)
            else:
                logger.debug("Property %s on %s is a literal, not a dependency", prop.name, component_id)

        for arg in fact.constructor_args:
            if arg.is_reference:
                self._link(component_id, arg.ref)

        for dependency in fact.depends_on:
            self._link(component_id, dependency)

        return component_id

    # ── Declarative origin ──────────────────────────────────

    def add_source_units(self, facts: Iterable[SourceUnitFact]) -> list[str]:
        added: list[str] = []
        for fact in facts:
            added.extend(self.add_source_unit(fact))
        return added

    def add_source_unit(self, fact: SourceUnitFact) -> list[str]:
        added: list[str] = []
        for type_fact in fact.types:
            if not self._has_marker(type_fact.markers, self.config.component_markers):
                continue

            component_id = derive_declarative_id(type_fact)
            if not component_id:
                logger.debug("Skipping unnamed component type in %s", fact.path)
                continue

            self._register(component_id, fact.qualified_name(type_fact.name), ComponentOrigin.DECLARATIVE)
            self._add_declarative_dependencies(component_id, type_fact)
            added.append(component_id)
        return added

    def _add_declarative_dependencies(self, component_id: str, type_fact: TypeFact) -> None:
        # Injected fields
        for fld in type_fact.fields:
            if self._is_injection_point(fld.markers):
                self._link_type(component_id, fld.type)

        # Injected setters
        for method in type_fact.methods:
            if method.is_setter and self._is_injection_point(method.markers):
                self._link_type(component_id, method.parameters[0].type)

        # Constructor injection: the sole constructor, or any marked one
        for ctor in self._injected_constructors(type_fact.constructors):
            for param in ctor.parameters:
                if self._has_marker(param.markers, self.config.literal_injection_markers):
                    continue
                self._link_type(component_id, param.type)

    def _injected_constructors(self, constructors: list[MethodFact]) -> list[MethodFact]:
        if len(constructors) == 1:
            return constructors
        return [c for c in constructors if self._has_marker(c.markers, self.config.injection_markers)]

    # ── Helpers ─────────────────────────────────────────────

    def _register(self, component_id: str, implementation: str | None, origin: ComponentOrigin) -> None:
        node = self.graph.add_node(component_id, NodeKind.COMPONENT)
        existing = self.registry.get(component_id)
        if existing is not None:
            logger.warning(
                "Component %r defined more than once (%s, then %s); keeping the first definition",
                component_id, existing.origin.value, origin.value,
            )
            return

        node.origin = origin
        node.implementation = implementation
        self.registry[component_id] = ComponentInfo(component_id, implementation, origin)

    def _link(self, component_id: str, dependency: str | None) -> None:
        if not dependency:
            logger.debug("Dropping empty reference on %s", component_id)
            return
        self.graph.add_edge(component_id, dependency, NodeKind.COMPONENT)

    def _link_type(self, component_id: str, type_name: str) -> None:
        dependency = derive_id_from_type(
            type_name, self.config.builtin_types, self.config.container_types,
        )
        if dependency is None:
            logger.debug("Unresolvable injection type %r on %s", type_name, component_id)
            return
        self._link(component_id, dependency)

    def _is_injection_point(self, markers: list[str]) -> bool:
        if self._has_marker(markers, self.config.literal_injection_markers):
            return False
        return self._has_marker(markers, self.config.injection_markers)

    @staticmethod
    def _has_marker(markers: Iterable[str], wanted: Iterable[str]) -> bool:
        wanted_set = set(wanted)
        return any(marker.lstrip("@").rsplit(".", 1)[-1] in wanted_set for marker in markers)
