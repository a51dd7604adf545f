from __future__ import annotations

import logging
from collections.abc import Iterable

import networkx as nx

from js_to_ts.core.errors import HierarchyCycleError, MissingSuperclassError
from js_to_ts.inference.models import ClassUsageRecord

logger = logging.getLogger(__name__)

RECORD_ATTR = "record"


class ClassHierarchyGraph:
    """Subclass -> superclass graph over ClassUsageRecord ids.

    Records live on the nodes; replacing a record is an attribute update,
    edges are never touched after construction.
    """

    def __init__(self) -> None:
        self.graph = nx.DiGraph()

    @classmethod
    def build(cls, records: Iterable[ClassUsageRecord]) -> "ClassHierarchyGraph":
        hierarchy = cls()
        records = list(records)
        for record in records:
            hierarchy._add_record(record)
        for record in records:
            hierarchy._link(record)
        logger.info(
            f"Built class hierarchy with {hierarchy.graph.number_of_nodes()} classes "
            f"and {hierarchy.graph.number_of_edges()} superclass links"
        )
        return hierarchy

    def _add_record(self, record: ClassUsageRecord) -> None:
        if record.id in self.graph:
            logger.warning(f"Duplicate class id {record.id}; keeping the last definition")
        self.graph.add_node(record.id, **{RECORD_ATTR: record})

    def _link(self, record: ClassUsageRecord) -> None:
        superclass_id = record.superclass_id
        if superclass_id is None:
            return
        if superclass_id not in self.graph:
            known = "\n    ".join(sorted(self.graph.nodes))
            raise MissingSuperclassError(
                f"Superclass {superclass_id} of {record.id} was resolved to "
                f"{record.superclass_path}, but no class with that name was found there. "
                f"Known classes:\n    {known}",
                missing_path=str(record.superclass_path),
                subclass_id=record.id,
                superclass_id=superclass_id,
            )
        self.graph.add_edge(record.id, superclass_id)

    def __contains__(self, class_id: object) -> bool:
        return class_id in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def get(self, class_id: str) -> ClassUsageRecord:
        return self.graph.nodes[class_id][RECORD_ATTR]

    def replace(self, record: ClassUsageRecord) -> None:
        self.graph.nodes[record.id][RECORD_ATTR] = record

    def superclass_of(self, class_id: str) -> str | None:
        successors = list(self.graph.successors(class_id))
        return successors[0] if successors else None

    def ancestors(self, class_id: str) -> list[str]:
        """Superclass chain of a class, nearest first."""
        chain = []
        current = self.superclass_of(class_id)
        while current is not None and current not in chain:
            chain.append(current)
            current = self.superclass_of(current)
        return chain

    def superclass_first_order(self) -> list[str]:
        """Class ids ordered so every superclass precedes its subclasses."""
        try:
            order = list(nx.topological_sort(self.graph))
        except nx.NetworkXUnfeasible as e:
            cycle = [edge[0] for edge in nx.find_cycle(self.graph)]
            raise HierarchyCycleError(
                f"Class hierarchy contains a cycle: {' -> '.join([*cycle, cycle[0]])}",
                cycle=cycle,
            ) from e
        order.reverse()
        return order
