from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from js_to_ts.core.types import CallableKind

ANONYMOUS_CLASS_NAME = "default"


def make_class_id(path: Path | str, name: str | None) -> str:
    return f"{path}::{name or ANONYMOUS_CLASS_NAME}"


@dataclass(frozen=True)
class ClassUsageRecord:
    """What one class declares and uses on its receiver.

    `properties` keeps first-seen order; `superclass_path` is None when the
    superclass lives outside the analyzed set.
    """

    path: Path
    name: str | None
    superclass_name: str | None = None
    superclass_path: Path | None = None
    methods: frozenset[str] = field(default_factory=frozenset)
    properties: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return make_class_id(self.path, self.name)

    @property
    def superclass_id(self) -> str | None:
        if self.superclass_name is None or self.superclass_path is None:
            return None
        return make_class_id(self.superclass_path, self.superclass_name)

    @property
    def members(self) -> frozenset[str]:
        return self.methods | frozenset(self.properties)

    @property
    def has_superclass(self) -> bool:
        return self.superclass_name is not None


@dataclass(frozen=True)
class CallSiteFact:
    path: Path
    name: str
    kind: CallableKind
    declared_params: int
    call_sites: int
    min_args: int

    @property
    def has_call_sites(self) -> bool:
        return self.call_sites > 0

    @property
    def first_optional_index(self) -> int:
        return min(self.min_args, self.declared_params)
