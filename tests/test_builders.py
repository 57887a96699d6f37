"""Tests for the structural and component graph builders."""

import logging

import pytest

from wiregraph.models import (
    AnalysisConfig,
    ComponentFact,
    ComponentOrigin,
    ConstructorArgRef,
    FieldFact,
    GraphLevel,
    MethodFact,
    NodeKind,
    ParameterFact,
    PropertyRef,
    SourceUnitFact,
    TypeFact,
)
from wiregraph.analysis.component_graph import (
    ComponentGraphBuilder,
    derive_config_id,
    derive_declarative_id,
    derive_id_from_type,
)
from wiregraph.analysis.dependency_graph import StructuralGraphBuilder


# ── Helpers ───────────────────────────────────────────────────

def _unit(namespace, *imports, types=None, path=None):
    return SourceUnitFact(
        namespace=namespace,
        imports=list(imports),
        types=types or [],
        path=path or f"/src/{namespace}.java",
    )


def _component_type(name, *markers, fields=None, methods=None, constructors=None, component_name=None):
    return TypeFact(
        name=name,
        markers=list(markers) or ["Service"],
        fields=fields or [],
        methods=methods or [],
        constructors=constructors or [],
        component_name=component_name,
    )


def _edge_set(graph):
    return {(e.source, e.target) for e in graph.edges()}


# ── Structural builder: namespace level ───────────────────────

class TestNamespaceLevel:
    def test_two_way_scenario(self):
        builder = StructuralGraphBuilder()
        graph = builder.build([
            _unit("pkg.a", "pkg.b.X"),
            _unit("pkg.b", "pkg.a.Y"),
        ])
        assert set(graph.nodes) == {"pkg.a", "pkg.b"}
        assert _edge_set(graph) == {("pkg.a", "pkg.b"), ("pkg.b", "pkg.a")}

        from wiregraph.analysis.cycles import detect_cycles
        assert detect_cycles(graph) == [["pkg.a", "pkg.b"]]

    def test_nodes_are_namespaces(self):
        graph = StructuralGraphBuilder().build([_unit("com.shop.web", "com.shop.service.OrderService")])
        assert graph.nodes["com.shop.web"].kind is NodeKind.NAMESPACE
        assert graph.nodes["com.shop.service"].kind is NodeKind.NAMESPACE

    def test_excluded_prefixes(self):
        graph = StructuralGraphBuilder().build([
            _unit(
                "com.shop.web",
                "java.util.List",
                "javax.inject.Inject",
                "org.springframework.stereotype.Controller",
                "org.junit.jupiter.api.Test",
                "com.shop.service.OrderService",
            ),
        ])
        assert _edge_set(graph) == {("com.shop.web", "com.shop.service")}
        assert graph.node_count() == 2

    def test_custom_exclusions(self):
        config = AnalysisConfig(excluded_prefixes=["com.vendor."])
        graph = StructuralGraphBuilder(config=config).build([
            _unit("com.shop", "com.vendor.lib.Thing", "java.util.List"),
        ])
        assert _edge_set(graph) == {("com.shop", "java.util")}

    def test_wildcard_skipped(self):
        graph = StructuralGraphBuilder().build([_unit("com.shop.web", "com.shop.model.*")])
        assert graph.edge_count() == 0
        assert graph.node_count() == 1

    def test_same_namespace_import_is_not_an_edge(self):
        graph = StructuralGraphBuilder().build([_unit("com.shop", "com.shop.Helper")])
        assert graph.edge_count() == 0

    def test_undotted_import_has_no_target(self):
        graph = StructuralGraphBuilder().build([_unit("com.shop", "Helper")])
        assert graph.edge_count() == 0

    def test_missing_namespace_skipped(self, caplog):
        builder = StructuralGraphBuilder()
        with caplog.at_level(logging.DEBUG, logger="wiregraph.analysis.dependency_graph"):
            accepted = builder.add_units([_unit(None, "com.x.Y", path="Orphan.java"), _unit("", "com.x.Y")])
        assert accepted == 0
        assert builder.graph.node_count() == 0
        assert "Orphan.java" in caplog.text

    def test_duplicate_imports_single_edge(self):
        graph = StructuralGraphBuilder().build([
            _unit("com.a", "com.b.X", "com.b.Y"),
            _unit("com.a", "com.b.Z"),
        ])
        assert graph.edge_count() == 1

    def test_order_independent(self):
        facts = [_unit("pkg.a", "pkg.b.X", "pkg.c.Z"), _unit("pkg.b", "pkg.a.Y")]
        forward = StructuralGraphBuilder().build(facts)
        backward = StructuralGraphBuilder().build(list(reversed(facts)))
        assert set(forward.nodes) == set(backward.nodes)
        assert forward.edges() == backward.edges()


# ── Structural builder: type level ────────────────────────────

class TestTypeLevel:
    def test_type_nodes_and_edges(self):
        unit = _unit(
            "com.shop.web",
            "com.shop.service.OrderService",
            "java.util.List",
            types=[TypeFact(name="OrderController"), TypeFact(name="CartController")],
        )
        graph = StructuralGraphBuilder(GraphLevel.TYPE).build([unit])
        assert _edge_set(graph) == {
            ("com.shop.web.OrderController", "com.shop.service.OrderService"),
            ("com.shop.web.CartController", "com.shop.service.OrderService"),
        }
        assert graph.nodes["com.shop.web.OrderController"].kind is NodeKind.TYPE

    def test_wildcard_skipped(self):
        unit = _unit("com.shop", "com.shop.model.*", types=[TypeFact(name="App")])
        graph = StructuralGraphBuilder(GraphLevel.TYPE).build([unit])
        assert graph.edge_count() == 0
        assert set(graph.nodes) == {"com.shop.App"}

    def test_self_import_not_an_edge(self):
        unit = _unit("com.shop", "com.shop.App", types=[TypeFact(name="App")])
        graph = StructuralGraphBuilder(GraphLevel.TYPE).build([unit])
        assert graph.edge_count() == 0

    def test_self_loops_allowed_by_config(self):
        unit = _unit("com.shop", "com.shop.App", types=[TypeFact(name="App")])
        config = AnalysisConfig(allow_self_loops=True)
        graph = StructuralGraphBuilder(GraphLevel.TYPE, config).build([unit])
        assert _edge_set(graph) == {("com.shop.App", "com.shop.App")}


# ── Identity derivation ───────────────────────────────────────

class TestIdentity:
    def test_config_explicit_id(self):
        assert derive_config_id(ComponentFact(implementation="com.x.Foo", id="foo")) == "foo"

    def test_config_name_alias(self):
        fact = ComponentFact(implementation="com.x.Foo", name="primary, secondary")
        assert derive_config_id(fact) == "primary"

    def test_config_falls_back_to_class(self):
        assert derive_config_id(ComponentFact(implementation="com.x.Foo")) == "com.x.Foo"

    def test_config_without_anything(self):
        assert derive_config_id(ComponentFact()) is None

    def test_declarative_default(self):
        assert derive_declarative_id(TypeFact(name="UserService")) == "userService"

    def test_declarative_explicit(self):
        assert derive_declarative_id(TypeFact(name="UserService", component_name="users")) == "users"

    @pytest.mark.parametrize("type_name,expected", [
        ("UserRepository", "userRepository"),
        ("com.example.repo.UserRepository", "userRepository"),
        ("Repository<User>", "repository"),
        ("java.util.List<com.x.Y>", "y"),
        ("Optional<com.shop.OrderRepository>", "orderRepository"),
        ("Provider<PaymentGateway>", "paymentGateway"),
        ("Map<String, List<? extends Handler>>", "handler"),
        ("java.util.List", None),
        ("List<?>", None),
        ("Optional<String>", None),
        ("int", None),
        ("String", None),
        ("", None),
    ])
    def test_from_type(self, type_name, expected):
        config = AnalysisConfig()
        assert derive_id_from_type(type_name, config.builtin_types, config.container_types) == expected

    def test_containers_not_unwrapped_without_config(self):
        assert derive_id_from_type("List<Foo>") == "list"

    def test_deterministic(self):
        fact = ComponentFact(implementation="com.x.Foo", name="a b")
        assert derive_config_id(fact) == derive_config_id(fact)


# ── Component builder: configuration origin ───────────────────

class TestConfigComponents:
    def test_property_reference(self):
        builder = ComponentGraphBuilder()
        graph = builder.build([
            ComponentFact(
                id="userService",
                implementation="com.example.service.UserService",
                properties=[PropertyRef("userRepository", ref="userRepository")],
            ),
            ComponentFact(id="userRepository", implementation="com.example.repository.UserRepository"),
        ])
        assert set(graph.nodes) == {"userService", "userRepository"}
        assert graph.edge_count() == 1
        assert graph.outgoing_of("userService") == {"userRepository"}
        info = builder.component_info("userService")
        assert info.origin is ComponentOrigin.CONFIG
        assert info.implementation == "com.example.service.UserService"

    def test_literal_property_not_an_edge(self):
        graph = ComponentGraphBuilder().build([
            ComponentFact(id="pool", implementation="com.x.Pool",
                          properties=[PropertyRef("size", value="10")]),
        ])
        assert graph.edge_count() == 0

    def test_constructor_args_and_depends_on(self):
        graph = ComponentGraphBuilder().build([
            ComponentFact(
                id="orders",
                implementation="com.x.Orders",
                constructor_args=[
                    ConstructorArgRef(index=0, ref="db"),
                    ConstructorArgRef(index=1, value="42"),
                ],
                depends_on=["migrations"],
            ),
        ])
        assert graph.outgoing_of("orders") == {"db", "migrations"}

    def test_referenced_component_is_placeholder(self):
        builder = ComponentGraphBuilder()
        graph = builder.build([
            ComponentFact(id="a", implementation="com.x.A", properties=[PropertyRef("b", ref="b")]),
        ])
        assert graph.nodes["b"].is_defined is False
        assert graph.nodes["a"].is_defined is True
        assert builder.component_info("b") is None

    def test_placeholder_upgraded_when_defined_later(self):
        builder = ComponentGraphBuilder()
        graph = builder.build([
            ComponentFact(id="a", implementation="com.x.A", properties=[PropertyRef("b", ref="b")]),
            ComponentFact(id="b", implementation="com.x.B"),
        ])
        assert graph.nodes["b"].origin is ComponentOrigin.CONFIG
        assert graph.nodes["b"].implementation == "com.x.B"

    def test_missing_identity_skipped(self):
        builder = ComponentGraphBuilder()
        assert builder.add_config_component(ComponentFact(properties=[PropertyRef("x", ref="y")])) is None
        assert builder.graph.node_count() == 0

    def test_circular_config(self):
        from wiregraph.analysis.cycles import detect_cycles
        graph = ComponentGraphBuilder().build([
            ComponentFact(id="beanA", implementation="com.x.BeanA", properties=[PropertyRef("b", ref="beanB")]),
            ComponentFact(id="beanB", implementation="com.x.BeanB", properties=[PropertyRef("a", ref="beanA")]),
        ])
        assert detect_cycles(graph) == [["beanA", "beanB"]]

    def test_self_reference_is_one_node_cycle(self):
        from wiregraph.analysis.cycles import detect_cycles
        graph = ComponentGraphBuilder().build([
            ComponentFact(id="loop", implementation="com.x.Loop", properties=[PropertyRef("self", ref="loop")]),
        ])
        assert detect_cycles(graph) == [["loop"]]


# ── Component builder: declarative origin ─────────────────────

class TestDeclarativeComponents:
    def test_field_injection(self):
        builder = ComponentGraphBuilder()
        graph = builder.build(source_facts=[
            _unit("com.example.service", types=[
                _component_type("UserService", "Service", fields=[
                    FieldFact("userRepository", "UserRepository", ["Autowired"]),
                    FieldFact("cache", "CacheManager", []),
                ]),
            ]),
            _unit("com.example.repository", types=[_component_type("UserRepository", "Repository")]),
        ])
        assert graph.outgoing_of("userService") == {"userRepository"}
        info = builder.component_info("userService")
        assert info.origin is ComponentOrigin.DECLARATIVE
        assert info.implementation == "com.example.service.UserService"

    def test_marker_forms(self):
        builder = ComponentGraphBuilder()
        builder.build(source_facts=[
            _unit("com.x", types=[
                _component_type("MyComponent", "@Component"),
                _component_type("MyController", "org.springframework.stereotype.Controller"),
                _component_type("MyRestController", "RestController"),
                TypeFact(name="PlainOldObject"),
            ]),
        ])
        assert set(builder.graph.nodes) == {"myComponent", "myController", "myRestController"}

    def test_setter_injection(self):
        setter = MethodFact("setUserRepository", [ParameterFact("repo", "UserRepository")], ["Autowired"])
        not_setter = MethodFact("configure", [ParameterFact("cfg", "Config")], ["Autowired"])
        plain_setter = MethodFact("setClock", [ParameterFact("clock", "Clock")])
        graph = ComponentGraphBuilder().build(source_facts=[
            _unit("com.x", types=[
                _component_type("UserService", methods=[setter, not_setter, plain_setter]),
            ]),
        ])
        assert graph.outgoing_of("userService") == {"userRepository"}

    def test_single_constructor_injection(self):
        ctor = MethodFact("OrderService", [
            ParameterFact("repo", "com.x.OrderRepository"),
            ParameterFact("timeout", "int"),
            ParameterFact("name", "String", ["Value"]),
        ])
        graph = ComponentGraphBuilder().build(source_facts=[
            _unit("com.x", types=[_component_type("OrderService", constructors=[ctor])]),
        ])
        assert graph.outgoing_of("orderService") == {"orderRepository"}

    def test_container_injection_resolves_element_type(self):
        ctor = MethodFact("CheckoutService", [
            ParameterFact("repos", "java.util.List<com.x.OrderRepository>"),
            ParameterFact("gateway", "Optional<PaymentGateway>"),
        ])
        graph = ComponentGraphBuilder().build(source_facts=[
            _unit("com.x", types=[
                _component_type("CheckoutService", constructors=[ctor], fields=[
                    FieldFact("clock", "javax.inject.Provider<Clock>", ["Inject"]),
                ]),
            ]),
        ])
        assert graph.outgoing_of("checkoutService") == {"orderRepository", "paymentGateway", "clock"}
        assert not graph.has_node("list")
        assert not graph.has_node("optional")

    def test_marked_constructor_among_many(self):
        plain = MethodFact("Svc", [ParameterFact("a", "Alpha")])
        marked = MethodFact("Svc", [ParameterFact("b", "Beta")], ["Inject"])
        graph = ComponentGraphBuilder().build(source_facts=[
            _unit("com.x", types=[_component_type("Svc", constructors=[plain, marked])]),
        ])
        assert graph.outgoing_of("svc") == {"beta"}

    def test_value_injection_is_not_an_edge(self):
        graph = ComponentGraphBuilder().build(source_facts=[
            _unit("com.x", types=[
                _component_type("Svc", fields=[FieldFact("url", "Endpoint", ["Value"])]),
            ]),
        ])
        assert graph.edge_count() == 0

    def test_primitive_field_not_an_edge(self):
        graph = ComponentGraphBuilder().build(source_facts=[
            _unit("com.x", types=[
                _component_type("Svc", fields=[FieldFact("count", "int", ["Autowired"])]),
            ]),
        ])
        assert graph.edge_count() == 0

    def test_explicit_component_name(self):
        graph = ComponentGraphBuilder().build(source_facts=[
            _unit("com.x", types=[_component_type("UserService", component_name="users")]),
        ])
        assert set(graph.nodes) == {"users"}

    def test_mixed_origins(self):
        builder = ComponentGraphBuilder()
        builder.build(
            [ComponentFact(id="dataSource", implementation="com.zaxxer.HikariDataSource")],
            [_unit("com.x", types=[
                _component_type("UserRepository", "Repository", fields=[
                    FieldFact("dataSource", "javax.sql.DataSource", ["Autowired"]),
                ]),
            ])],
        )
        assert builder.graph.outgoing_of("userRepository") == {"dataSource"}
        assert builder.component_info("dataSource").is_config_defined
        assert builder.component_info("userRepository").is_declarative

    def test_duplicate_definition_keeps_first(self, caplog):
        builder = ComponentGraphBuilder()
        with caplog.at_level(logging.WARNING, logger="wiregraph.analysis.component_graph"):
            builder.build(
                [ComponentFact(id="userService", implementation="com.legacy.UserService")],
                [_unit("com.x", types=[_component_type("UserService")])],
            )
        assert builder.component_info("userService").origin is ComponentOrigin.CONFIG
        assert "more than once" in caplog.text

    def test_order_independent_graph(self):
        units = [
            _unit("com.a", types=[_component_type("A", fields=[FieldFact("b", "B", ["Autowired"])])]),
            _unit("com.b", types=[_component_type("B", fields=[FieldFact("a", "A", ["Inject"])])]),
        ]
        first = ComponentGraphBuilder().build(source_facts=units)
        second = ComponentGraphBuilder().build(source_facts=list(reversed(units)))
        assert set(first.nodes) == set(second.nodes) == {"a", "b"}
        assert first.edges() == second.edges()
