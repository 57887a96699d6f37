"""Fact file loading — JSON documents validated with pydantic, converted to fact dataclasses."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ValidationError

from wiregraph.models import (
    ComponentFact,
    ConstructorArgRef,
    FieldFact,
    MethodFact,
    ParameterFact,
    PropertyRef,
    SourceUnitFact,
    TypeFact,
)


class FactFileError(ValueError):
    """Raised when a fact document cannot be read or does not validate."""


class ParameterModel(BaseModel):
    name: str = ""
    type: str
    markers: list[str] = []


class FieldModel(BaseModel):
    name: str
    type: str
    markers: list[str] = []


class MethodModel(BaseModel):
    name: str
    parameters: list[ParameterModel] = []
    markers: list[str] = []
    return_type: str | None = None


class TypeModel(BaseModel):
    name: str
    kind: str = "class"
    markers: list[str] = []
    fields: list[FieldModel] = []
    methods: list[MethodModel] = []
    constructors: list[MethodModel] = []
    component_name: str | None = None


class SourceUnitModel(BaseModel):
    namespace: str | None = None
    imports: list[str] = []
    types: list[TypeModel] = []
    path: str | None = None


class PropertyModel(BaseModel):
    name: str
    value: str | None = None
    ref: str | None = None


class ConstructorArgModel(BaseModel):
    index: int = -1
    name: str | None = None
    value: str | None = None
    ref: str | None = None


class ComponentModel(BaseModel):
    implementation: str | None = None
    id: str | None = None
    name: str | None = None
    properties: list[PropertyModel] = []
    constructor_args: list[ConstructorArgModel] = []
    depends_on: list[str] = []
    source: str | None = None


class FactDocument(BaseModel):
    source_units: list[SourceUnitModel] = []
    components: list[ComponentModel] = []

    def to_facts(self) -> tuple[list[SourceUnitFact], list[ComponentFact]]:
        return (
            [_to_source_unit(u) for u in self.source_units],
            [_to_component(c) for c in self.components],
        )


def _to_method(m: MethodModel) -> MethodFact:
    return MethodFact(
        name=m.name,
        parameters=[ParameterFact(p.name, p.type, list(p.markers)) for p in m.parameters],
        markers=list(m.markers),
        return_type=m.return_type,
    )


def _to_source_unit(u: SourceUnitModel) -> SourceUnitFact:
    return SourceUnitFact(
        namespace=u.namespace,
        imports=list(u.imports),
        path=u.path,
        types=[
            TypeFact(
                name=t.name,
                kind=t.kind,
                markers=list(t.markers),
                fields=[FieldFact(f.name, f.type, list(f.markers)) for f in t.fields],
                methods=[_to_method(m) for m in t.methods],
                constructors=[_to_method(c) for c in t.constructors],
                component_name=t.component_name,
            )
            for t in u.types
        ],
    )


def _to_component(c: ComponentModel) -> ComponentFact:
    return ComponentFact(
        implementation=c.implementation,
        id=c.id,
        name=c.name,
        properties=[PropertyRef(p.name, p.value, p.ref) for p in c.properties],
        constructor_args=[
            ConstructorArgRef(a.index, a.name, a.value, a.ref) for a in c.constructor_args
        ],
        depends_on=list(c.depends_on),
        source=c.source,
    )


def parse_facts(data: dict) -> tuple[list[SourceUnitFact], list[ComponentFact]]:
    try:
        document = FactDocument.model_validate(data)
    except ValidationError as e:
        raise FactFileError(f"Invalid fact document: {e}") from e
    return document.to_facts()


def load_facts(path: Path) -> tuple[list[SourceUnitFact], list[ComponentFact]]:
    """Read a JSON fact file: ``{"source_units": [...], "components": [...]}``."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise FactFileError(f"Cannot read fact file {path}: {e}") from e
    if not isinstance(data, dict):
        raise FactFileError(f"Fact file {path} must contain a JSON object")
    return parse_facts(data)
