"""Data models for the facts fed into the dependency graph engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class NodeKind(enum.Enum):
    NAMESPACE = "namespace"
    TYPE = "type"
    COMPONENT = "component"


class ComponentOrigin(enum.Enum):
    CONFIG = "config"            # declared in configuration (XML-like) files
    DECLARATIVE = "declarative"  # marked on the implementation type


class GraphLevel(enum.Enum):
    NAMESPACE = "namespace"
    TYPE = "type"


class InsertResult(enum.Enum):
    INSERTED = "inserted"
    ALREADY_PRESENT = "already_present"


# ── Source-unit facts ─────────────────────────────────────────


@dataclass
class ParameterFact:
    name: str
    type: str
    markers: list[str] = field(default_factory=list)


@dataclass
class FieldFact:
    name: str
    type: str
    markers: list[str] = field(default_factory=list)


@dataclass
class MethodFact:
    name: str
    parameters: list[ParameterFact] = field(default_factory=list)
    markers: list[str] = field(default_factory=list)
    return_type: str | None = None

    @property
    def is_setter(self) -> bool:
        return self.name.startswith("set") and len(self.parameters) == 1


@dataclass
class TypeFact:
    """A type declared in a source unit, with its DI markers and members."""
    name: str
    kind: str = "class"  # class, interface, enum, record, annotation
    markers: list[str] = field(default_factory=list)
    fields: list[FieldFact] = field(default_factory=list)
    methods: list[MethodFact] = field(default_factory=list)
    constructors: list[MethodFact] = field(default_factory=list)
    component_name: str | None = None  # e.g. @Service("orders")


@dataclass
class SourceUnitFact:
    """Result of extracting one source file."""
    namespace: str | None
    imports: list[str] = field(default_factory=list)
    types: list[TypeFact] = field(default_factory=list)
    path: str | None = None

    def qualified_name(self, type_name: str) -> str:
        if self.namespace:
            return f"{self.namespace}.{type_name}"
        return type_name


# ── Configuration-origin component facts ─────────────────────


@dataclass
class PropertyRef:
    name: str
    value: str | None = None
    ref: str | None = None

    @property
    def is_reference(self) -> bool:
        return self.ref is not None


@dataclass
class ConstructorArgRef:
    index: int = -1  # -1 means not specified
    name: str | None = None
    value: str | None = None
    ref: str | None = None

    @property
    def is_reference(self) -> bool:
        return self.ref is not None


@dataclass
class ComponentFact:
    """A component declared in configuration."""
    implementation: str | None = None
    id: str | None = None
    name: str | None = None  # comma/space separated aliases
    properties: list[PropertyRef] = field(default_factory=list)
    constructor_args: list[ConstructorArgRef] = field(default_factory=list)
    depends_on: list[str] = field(default_factory=list)
    source: str | None = None


# ── Configuration ─────────────────────────────────────────────


@dataclass
class AnalysisConfig:
    """Configuration for a dependency analysis run."""
    excluded_prefixes: list[str] = field(default_factory=lambda: [
        "java.", "javax.", "jakarta.",
        "org.springframework.", "org.junit.", "org.mockito.",
    ])
    component_markers: list[str] = field(default_factory=lambda: [
        "Component", "Service", "Repository", "Controller", "RestController",
        "Configuration", "Bean",
    ])
    injection_markers: list[str] = field(default_factory=lambda: [
        "Autowired", "Inject", "Resource",
    ])
    # Markers that inject a literal value rather than another component
    literal_injection_markers: list[str] = field(default_factory=lambda: ["Value"])
    builtin_types: list[str] = field(default_factory=lambda: [
        "byte", "short", "int", "long", "float", "double", "boolean", "char",
        "Byte", "Short", "Integer", "Long", "Float", "Double", "Boolean",
        "Character", "String", "Object", "void", "Void",
    ])
    # Wrappers whose (last) generic argument names the injected component
    container_types: list[str] = field(default_factory=lambda: [
        "Optional", "List", "Set", "SortedSet", "Collection", "Iterable",
        "Map", "SortedMap", "Supplier", "Provider", "ObjectProvider",
        "ObjectFactory", "Lazy", "Instance",
    ])
    allow_self_loops: bool = False

    def is_excluded(self, reference: str) -> bool:
        return any(reference.startswith(prefix) for prefix in self.excluded_prefixes)
