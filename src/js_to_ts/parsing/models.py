from pathlib import Path

from pydantic import BaseModel

from js_to_ts.core.types import Language

DEFAULT_EXPORT = "default"
NAMESPACE_IMPORT = "*"


class FileInfo(BaseModel):
    path: Path
    relative_path: str
    language: Language
    content_hash: str
    size_bytes: int
    line_count: int


class ImportBinding(BaseModel):
    """One local name introduced by an import or require."""

    local_name: str
    imported_name: str
    specifier: str
    resolved_path: Path | None = None
    is_external: bool = True
    line_number: int

    @property
    def is_default(self) -> bool:
        return self.imported_name == DEFAULT_EXPORT

    @property
    def is_namespace(self) -> bool:
        return self.imported_name == NAMESPACE_IMPORT
