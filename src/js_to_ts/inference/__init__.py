"""Usage-based inference of class fields, signature types and optional parameters."""

from js_to_ts.inference.alias_normalizer import AliasNormalizer
from js_to_ts.inference.arity import CallSiteArityAnalyzer
from js_to_ts.inference.corrector import PropertyCorrector, correct_properties
from js_to_ts.inference.emitter import DeclarationEmitter, FieldDeclaration
from js_to_ts.inference.hierarchy import ClassHierarchyGraph
from js_to_ts.inference.models import CallSiteFact, ClassUsageRecord
from js_to_ts.inference.signatures import SignatureTyper
from js_to_ts.inference.usage_collector import UsageCollector

__all__ = [
    "AliasNormalizer",
    "CallSiteArityAnalyzer",
    "CallSiteFact",
    "ClassHierarchyGraph",
    "ClassUsageRecord",
    "DeclarationEmitter",
    "FieldDeclaration",
    "PropertyCorrector",
    "SignatureTyper",
    "UsageCollector",
    "correct_properties",
]
