from __future__ import annotations

import logging
from dataclasses import replace

from js_to_ts.inference.hierarchy import ClassHierarchyGraph
from js_to_ts.inference.models import ClassUsageRecord

logger = logging.getLogger(__name__)


class PropertyCorrector:
    """Removes members a subclass inherits from its in-set superclasses.

    Classes are processed superclass first, so each ancestor's record is
    already corrected when a subclass reads it.
    """

    def __init__(self, hierarchy: ClassHierarchyGraph):
        self.hierarchy = hierarchy

    def correct(self) -> list[ClassUsageRecord]:
        corrected = []
        for class_id in self.hierarchy.superclass_first_order():
            record = self.hierarchy.get(class_id)
            ancestors = self.hierarchy.ancestors(class_id)
            if ancestors:
                record = self._without_inherited(record, ancestors)
                self.hierarchy.replace(record)
            corrected.append(record)
        return corrected

    def _without_inherited(self, record: ClassUsageRecord, ancestors: list[str]) -> ClassUsageRecord:
        inherited: set[str] = set()
        for ancestor_id in ancestors:
            inherited |= self.hierarchy.get(ancestor_id).members

        properties = tuple(name for name in record.properties if name not in inherited)
        removed = [name for name in record.properties if name in inherited]
        if removed:
            logger.debug(f"{record.id}: dropping inherited members {removed}")
        return replace(record, properties=properties)


def correct_properties(records: list[ClassUsageRecord]) -> list[ClassUsageRecord]:
    """Build the hierarchy for `records` and return the corrected records."""
    return PropertyCorrector(ClassHierarchyGraph.build(records)).correct()
