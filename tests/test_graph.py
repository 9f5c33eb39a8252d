"""Tests for the dependency graph builder."""

import pytest

from form_runtime.exceptions import SchemaError
from form_runtime.graph import DependencyGraph, GraphKind, build_graphs
from form_runtime.models.field_definitions import FieldSchema
from form_runtime.models.inner_field import InnerField


def make_fields(*schemas):
    return [
        InnerField.from_schema(FieldSchema.model_validate({"index": i, "component": "input", **schema}))
        for i, schema in enumerate(schemas)
    ]


def equals(field, value):
    return [[{"field": field, "operator": "=", "value": value}]]


class TestDependencyGraph:
    """Tests for DependencyGraph adjacency lists."""

    def test_link(self):
        graph = DependencyGraph(GraphKind.HIDE)
        graph.link("b", "a")
        graph.link("b", "a")
        graph.link("c", "a")
        assert graph.subscribers_of("a") == ("b", "c")
        assert graph.watchers_of("b") == ("a",)
        assert graph.watchers_of("a") == ()
        assert graph.edge_count == 2


class TestBuildGraphs:
    """Tests for build_graphs."""

    def test_hide_edges(self):
        fields = make_fields({"key": "a"}, {"key": "b", "hideWhen": equals("a", "x")})
        graphs, _ = build_graphs(fields, "create")

        assert graphs.hide.subscribers_of("a") == ("b",)
        assert graphs.hide.watchers_of("b") == ("a",)
        assert graphs.remove.subscribers_of("a") == ()
        assert graphs.disable.subscribers_of("a") == ()

    def test_graphs_are_independent(self):
        fields = make_fields(
            {"key": "a"},
            {"key": "b"},
            {
                "key": "c",
                "hideWhen": equals("a", 1),
                "removeWhen": equals("b", 2),
                "disableWhen": [[{"field": "a", "operator": "!=", "value": 0}, {"field": "b", "operator": "=", "value": 0}]],
            },
        )
        graphs, _ = build_graphs(fields, "create")

        assert graphs.hide.watchers_of("c") == ("a",)
        assert graphs.remove.watchers_of("c") == ("b",)
        assert graphs.disable.watchers_of("c") == ("a", "b")
        assert graphs.mirror("a") == {
            "hide_watchers": (),
            "hide_subscribers": ("c",),
            "remove_watchers": (),
            "remove_subscribers": (),
            "disabled_watchers": (),
            "disabled_subscribers": ("c",),
        }

    def test_watcher_subscriber_symmetry(self):
        fields = make_fields(
            {"key": "a"},
            {"key": "b", "hideWhen": equals("a", 1)},
            {"key": "c", "hideWhen": [[{"field": "a", "operator": "=", "value": 1}], [{"field": "b", "operator": "=", "value": 2}]]},
        )
        graphs, _ = build_graphs(fields, "create")
        for kind in GraphKind:
            graph = graphs.for_kind(kind)
            for dependent, watched in graph.watchers.items():
                for key in watched:
                    assert dependent in graph.subscribers_of(key)

    def test_one_hop_only(self):
        """Test that subscribers of subscribers are not linked."""
        fields = make_fields(
            {"key": "a"},
            {"key": "b", "hideWhen": equals("a", 1)},
            {"key": "c", "hideWhen": equals("b", 1)},
        )
        graphs, _ = build_graphs(fields, "create")
        assert graphs.hide.subscribers_of("a") == ("b",)
        assert graphs.hide.subscribers_of("b") == ("c",)

    def test_unknown_field(self):
        fields = make_fields({"key": "b", "removeWhen": equals("missing", 1)})
        with pytest.raises(SchemaError) as exc_info:
            build_graphs(fields, "create")
        assert exc_info.value.key == "b"

    def test_predicates(self):
        fields = make_fields(
            {"key": "a"},
            {"key": "b", "hideWhen": equals("a", "x"), "removeWhen": [[{"mode": "edit"}]]},
        )
        _, predicates = build_graphs(fields, "edit")

        assert predicates["a"].evaluate({"a": "x"}) == {
            "visible": True,
            "removed": False,
            "disabled": False,
        }
        assert predicates["b"].evaluate({"a": "x"}) == {
            "visible": False,
            "removed": True,
            "disabled": False,
        }
