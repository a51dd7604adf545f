from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING

from js_to_ts.core.errors import ReferenceResolutionError
from js_to_ts.core.types import CallableKind
from js_to_ts.inference.models import CallSiteFact
from js_to_ts.parsing.nodes import safe_decode_text
from js_to_ts.source.classes import member_name, method_kind
from js_to_ts.source.edits import TextEdit
from js_to_ts.source.parameters import Parameter, parameters
from js_to_ts.source.references import ReferenceResolver

if TYPE_CHECKING:
    from tree_sitter import Node

    from js_to_ts.source.project import Project
    from js_to_ts.source.source_file import SourceFile

logger = logging.getLogger(__name__)


def callable_kind(node: Node) -> CallableKind:
    if node.type == "method_definition":
        return method_kind(node)
    return CallableKind.FUNCTION


def callable_name(node: Node) -> str:
    if node.type == "method_definition":
        return member_name(node) or "<computed>"
    return safe_decode_text(node.child_by_field_name("name")) or "<anonymous>"


class CallSiteArityAnalyzer:
    """Marks trailing parameters optional when some call site omits them.

    Facts for every callable are gathered before any file is edited, so all
    call sites are resolved against the same trees.
    """

    def __init__(self, project: Project, references: ReferenceResolver | None = None):
        self.project = project
        self.references = references or ReferenceResolver(project)

    def analyze_project(self) -> int:
        planned: dict[Path, list[TextEdit]] = defaultdict(list)
        facts = []
        for source_file in self.project:
            for node in source_file.get_functions():
                fact = self.collect_fact(source_file, node)
                if fact is None:
                    continue
                facts.append(fact)
                planned[source_file.path].extend(self.optional_edits(node, fact))

        total = 0
        for path, edits in planned.items():
            if edits:
                self.project.get_file_or_raise(path).apply_edits(edits)
                total += len(edits)

        with_sites = sum(1 for fact in facts if fact.has_call_sites)
        logger.info(f"Analyzed {len(facts)} callables ({with_sites} with call sites); marked {total} parameters optional")
        return total

    def collect_fact(self, source_file: SourceFile, node: Node) -> CallSiteFact | None:
        """The call-site fact for one callable; None when nothing can be inferred."""
        declared = len(parameters(node))
        if declared == 0:
            return None
        try:
            sites = self.references.find_call_sites(source_file, node)
        except ReferenceResolutionError as e:
            logger.warning(f"Leaving parameters of {callable_name(node)} unchanged: {e}")
            return None
        if not sites:
            return None

        min_args = min(declared, min(site.arg_count for site in sites))
        fact = CallSiteFact(
            path=source_file.path,
            name=callable_name(node),
            kind=callable_kind(node),
            declared_params=declared,
            call_sites=len(sites),
            min_args=min_args,
        )
        logger.debug(f"{fact.kind.value} {fact.name} in {fact.path}: {fact.call_sites} call sites, min {min_args} args")
        return fact

    def optional_edits(self, node: Node, fact: CallSiteFact) -> list[TextEdit]:
        params = parameters(node)
        start = fact.first_optional_index

        # a required binding pattern cannot follow an optional parameter
        for index in range(len(params) - 1, start - 1, -1):
            if params[index].is_binding_pattern and not params[index].has_default:
                start = index + 1
                break

        edits = []
        for param in params[start:]:
            if not self._can_mark(param):
                continue
            edits.append(TextEdit.insert(param.optional_marker_offset, "?"))
        return edits

    @staticmethod
    def _can_mark(param: Parameter) -> bool:
        return not (param.is_rest or param.has_default or param.is_optional or param.is_binding_pattern)
