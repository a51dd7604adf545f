from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from js_to_ts.core.types import SyntaxKind
from js_to_ts.inference.models import ClassUsageRecord
from js_to_ts.inference.superclass import SuperclassResolver
from js_to_ts.parsing.nodes import CLASS_TYPES, enclosing_this_scope, is_same_node, iter_descendants, safe_decode_text
from js_to_ts.source.classes import FIELD_TYPES, ClassView, is_static

if TYPE_CHECKING:
    from tree_sitter import Node

    from js_to_ts.source.project import Project

logger = logging.getLogger(__name__)

EXCLUDED_PROPERTY_NAMES = frozenset({"constructor"})


def _append_unique(names: list[str], name: str | None) -> None:
    if name and name not in names:
        names.append(name)


class UsageCollector:
    """Builds a ClassUsageRecord from one class body.

    Properties are gathered in four passes and concatenated in pass order:
    declared fields, `this.x` accesses, `{ x } = this` destructuring, and
    accesses through receiver aliases left after normalization.
    """

    def __init__(self, project: Project, superclasses: SuperclassResolver | None = None):
        self.project = project
        self.superclasses = superclasses or SuperclassResolver(project)

    def collect_project(self) -> list[ClassUsageRecord]:
        records = []
        for source_file in self.project:
            for class_node in source_file.get_classes():
                records.append(self.collect(ClassView(source_file, class_node)))
        logger.info(f"Collected usage for {len(records)} classes")
        return records

    def collect(self, view: ClassView) -> ClassUsageRecord:
        superclass_name, superclass_path = self.superclasses.resolve(view)
        methods = frozenset(view.method_names())

        declared = view.declared_field_names()
        accessed: list[str] = []
        destructured: list[str] = []
        aliased: list[str] = []

        body = view.body
        if body is not None:
            aliases = self._receiver_aliases(view)
            for node in iter_descendants(body, stop_types=CLASS_TYPES):
                match SyntaxKind.classify(node):
                    case SyntaxKind.MEMBER_ACCESS:
                        self._visit_member_access(view, node, aliases, accessed, aliased)
                    case SyntaxKind.VARIABLE_BINDING:
                        if self._is_instance_receiver(view, node.child_by_field_name("value")):
                            for key in self._destructured_keys(node.child_by_field_name("name")):
                                _append_unique(destructured, key)
                    case (
                        SyntaxKind.DESTRUCTURING_ELEMENT
                        | SyntaxKind.INDEXED_ACCESS
                        | SyntaxKind.CALL
                        | SyntaxKind.NEW
                    ):
                        # computed access is never collected
                        continue
                    case None:
                        if node.type == "assignment_expression" and self._is_instance_receiver(
                            view, node.child_by_field_name("right")
                        ):
                            for key in self._destructured_keys(node.child_by_field_name("left")):
                                _append_unique(destructured, key)

        properties: list[str] = []
        for name in [*declared, *accessed, *destructured, *aliased]:
            if name in methods or name in EXCLUDED_PROPERTY_NAMES:
                continue
            _append_unique(properties, name)

        record = ClassUsageRecord(
            path=view.source_file.path,
            name=view.name,
            superclass_name=superclass_name,
            superclass_path=superclass_path,
            methods=methods,
            properties=tuple(properties),
        )
        logger.debug(f"Class {record.id}: properties {list(record.properties)}, superclass {record.superclass_id}")
        return record

    def _visit_member_access(
        self,
        view: ClassView,
        node: Node,
        aliases: dict[str, list[Node]],
        accessed: list[str],
        aliased: list[str],
    ) -> None:
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if obj is None or prop is None or prop.type != "property_identifier":
            return
        if obj.type == "this":
            if self._is_instance_receiver(view, obj):
                _append_unique(accessed, safe_decode_text(prop))
        elif obj.type == "identifier":
            methods = aliases.get(safe_decode_text(obj) or "", [])
            if any(self._inside(node, method) for method in methods):
                _append_unique(aliased, safe_decode_text(prop))

    def _is_instance_receiver(self, view: ClassView, node: Node | None) -> bool:
        """Whether `node` is a `this` that refers to an instance of the class."""
        if node is None or node.type != "this":
            return False
        scope = enclosing_this_scope(node)
        if scope is None:
            return False
        if scope.type == "method_definition":
            return is_same_node(scope.parent, view.body) and not is_static(scope)
        if scope.type == "class_body":
            if not is_same_node(scope, view.body):
                return False
            member = next(
                (m for m in scope.named_children if m.start_byte <= node.start_byte < m.end_byte),
                None,
            )
            return member is not None and member.type in FIELD_TYPES and not is_static(member)
        return False

    def _destructured_keys(self, pattern: Node | None) -> list[str]:
        if pattern is None or pattern.type != "object_pattern":
            return []
        keys: list[str] = []
        for element in pattern.named_children:
            match SyntaxKind.classify(element):
                case SyntaxKind.DESTRUCTURING_ELEMENT:
                    if element.type == "shorthand_property_identifier_pattern":
                        _append_unique(keys, safe_decode_text(element))
                    elif element.type == "pair_pattern":
                        key = element.child_by_field_name("key")
                        if key is not None and key.type == "property_identifier":
                            _append_unique(keys, safe_decode_text(key))
                    elif element.type == "object_assignment_pattern":
                        _append_unique(keys, safe_decode_text(element.child_by_field_name("left")))
                case _:
                    # rest elements and computed keys are not collected
                    continue
        return keys

    def _receiver_aliases(self, view: ClassView) -> dict[str, list[Node]]:
        """Alias name -> methods declaring it, for `const self = this` still present."""
        aliases: dict[str, list[Node]] = {}
        for method in view.methods(include_static=False):
            body = method.child_by_field_name("body")
            if body is None:
                continue
            for node in iter_descendants(body, stop_types=CLASS_TYPES):
                if SyntaxKind.classify(node) != SyntaxKind.VARIABLE_BINDING:
                    continue
                name = node.child_by_field_name("name")
                value = node.child_by_field_name("value")
                if name is not None and name.type == "identifier" and self._is_instance_receiver(view, value):
                    aliases.setdefault(safe_decode_text(name) or "", []).append(method)
        return aliases

    @staticmethod
    def _inside(node: Node, container: Node) -> bool:
        return container.start_byte <= node.start_byte and node.end_byte <= container.end_byte
