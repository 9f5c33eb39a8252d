"""
Dependency graph builder.

Each field may be hidden, removed or disabled by conditions over other
fields. At mount the conditions are compiled once, and every condition that
references a field records an edge in the graph of its kind:

- watchers[dependent] lists the fields ``dependent`` reads
- subscribers[referenced] lists the fields to recompute when
  ``referenced`` changes

The three graphs are independent and one hop deep: a change only
recomputes the direct subscribers of the changed field.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from form_runtime.conditions import Predicate, compile_conditions
from form_runtime.exceptions import SchemaError
from form_runtime.models.field_definitions import FieldCondition, Mode
from form_runtime.models.inner_field import InnerField

logger = logging.getLogger(__name__)


class GraphKind(str, Enum):
    HIDE = "hide"
    REMOVE = "remove"
    DISABLE = "disable"


@dataclass
class DependencyGraph:
    """Adjacency lists for one kind of condition, keyed by field key."""

    kind: GraphKind
    watchers: dict[str, list[str]] = field(default_factory=dict)
    subscribers: dict[str, list[str]] = field(default_factory=dict)

    def add_node(self, key: str) -> None:
        self.watchers.setdefault(key, [])
        self.subscribers.setdefault(key, [])

    def link(self, dependent: str, referenced: str) -> None:
        """Record that ``dependent`` reads ``referenced``."""
        watchers = self.watchers.setdefault(dependent, [])
        if referenced not in watchers:
            watchers.append(referenced)
        subscribers = self.subscribers.setdefault(referenced, [])
        if dependent not in subscribers:
            subscribers.append(dependent)

    def watchers_of(self, key: str) -> tuple[str, ...]:
        return tuple(self.watchers.get(key, ()))

    def subscribers_of(self, key: str) -> tuple[str, ...]:
        return tuple(self.subscribers.get(key, ()))

    @property
    def edge_count(self) -> int:
        return sum(len(keys) for keys in self.watchers.values())


@dataclass
class FieldGraphs:
    hide: DependencyGraph = field(default_factory=lambda: DependencyGraph(GraphKind.HIDE))
    remove: DependencyGraph = field(default_factory=lambda: DependencyGraph(GraphKind.REMOVE))
    disable: DependencyGraph = field(default_factory=lambda: DependencyGraph(GraphKind.DISABLE))

    def for_kind(self, kind: GraphKind) -> DependencyGraph:
        return getattr(self, kind.value)

    def mirror(self, key: str) -> dict[str, tuple[str, ...]]:
        """Watcher/subscriber tuples of one field, as InnerField attributes."""
        return {
            "hide_watchers": self.hide.watchers_of(key),
            "hide_subscribers": self.hide.subscribers_of(key),
            "remove_watchers": self.remove.watchers_of(key),
            "remove_subscribers": self.remove.subscribers_of(key),
            "disabled_watchers": self.disable.watchers_of(key),
            "disabled_subscribers": self.disable.subscribers_of(key),
        }


@dataclass
class FieldPredicates:
    """Compiled hide/remove/disable predicates of one field."""

    check_hide: Predicate
    check_remove: Predicate
    check_disabled: Predicate

    def evaluate(self, data: Any) -> dict[str, bool]:
        """Derived flags, as InnerField attributes."""
        return {
            "visible": not self.check_hide(data),
            "removed": self.check_remove(data),
            "disabled": self.check_disabled(data),
        }


def _conditions_of(item: InnerField, kind: GraphKind):
    if kind is GraphKind.HIDE:
        return item.hide_when
    if kind is GraphKind.REMOVE:
        return item.remove_when
    return item.disable_when


def build_graphs(
    fields: Iterable[InnerField],
    mode: Mode,
) -> tuple[FieldGraphs, dict[str, FieldPredicates]]:
    """
    Compile every field's conditions and build the three graphs.

    Args:
        fields: Mounted fields.
        mode: Form mode used by mode conditions.

    Returns:
        The graphs and the compiled predicates keyed by field key.

    Raises:
        SchemaError: If a condition references a key no field declares.
    """
    fields = list(fields)
    keys = {item.key for item in fields}
    graphs = FieldGraphs()
    for item in fields:
        for kind in GraphKind:
            graphs.for_kind(kind).add_node(item.key)

    predicates: dict[str, FieldPredicates] = {}
    for item in fields:
        compiled = {}
        for kind in GraphKind:
            graph = graphs.for_kind(kind)

            def on_condition(condition: FieldCondition, dependent: str = item.key, graph: DependencyGraph = graph) -> None:
                if condition.field not in keys:
                    raise SchemaError(
                        f"{graph.kind.value} condition of '{dependent}' references unknown field '{condition.field}'",
                        key=dependent,
                    )
                graph.link(dependent, condition.field)

            compiled[kind] = compile_conditions(_conditions_of(item, kind), mode, on_condition)
        predicates[item.key] = FieldPredicates(
            check_hide=compiled[GraphKind.HIDE],
            check_remove=compiled[GraphKind.REMOVE],
            check_disabled=compiled[GraphKind.DISABLE],
        )

    logger.debug(
        f"Built dependency graphs: hide={graphs.hide.edge_count} "
        f"remove={graphs.remove.edge_count} disable={graphs.disable.edge_count} edges"
    )
    return graphs, predicates
