import hashlib
import logging
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path

from js_to_ts.config import get_settings
from js_to_ts.core.types import Language
from js_to_ts.parsing.models import FileInfo

logger = logging.getLogger(__name__)


@dataclass
class ScanStatistics:
    file_count: int = 0
    total_lines: int = 0
    total_size: int = 0
    languages: Counter = field(default_factory=Counter)


class FileScanner:
    """Finds the JavaScript and TypeScript sources under a directory.

    Ignore patterns are matched against every path component, so `dist`
    drops a whole folder and `*.d.ts` drops declaration files anywhere.
    Exclude patterns are user globs matched against the relative path.
    """

    def __init__(
        self,
        root_path: str | Path,
        extensions: list[str] | None = None,
        ignore_patterns: list[str] | None = None,
        exclude_patterns: list[str] | None = None,
    ):
        settings = get_settings()
        self.root_path = Path(root_path).resolve()
        if not self.root_path.exists():
            raise ValueError(f"Path does not exist: {self.root_path}")
        if not self.root_path.is_dir():
            raise ValueError(f"Path is not a directory: {self.root_path}")

        self.extensions = {ext.lower() for ext in (extensions or settings.supported_extensions)}
        self.ignore_patterns = ignore_patterns if ignore_patterns is not None else settings.ignore_patterns
        self.exclude_patterns = exclude_patterns if exclude_patterns is not None else settings.exclude_patterns

    def _skip_reason(self, relative: Path) -> str | None:
        if any(fnmatch(part, pattern) for part in relative.parts for pattern in self.ignore_patterns):
            return "ignored"
        posix = relative.as_posix()
        if any(fnmatch(posix, pattern) or relative.match(pattern) for pattern in self.exclude_patterns):
            return "excluded"
        if relative.suffix.lower() not in self.extensions:
            return "unsupported"
        return None

    def scan(self) -> Iterator[FileInfo]:
        for file_path in sorted(self.root_path.rglob("*")):
            if not file_path.is_file():
                continue

            relative = file_path.relative_to(self.root_path)
            reason = self._skip_reason(relative)
            if reason == "excluded":
                logger.debug(f"Excluded by pattern: {relative}")
            if reason is not None:
                continue

            language = Language.from_extension(file_path.suffix.lower())
            if language is None:
                continue

            file_info = self._file_info(file_path, relative, language)
            if file_info is not None:
                yield file_info

    def _file_info(self, file_path: Path, relative: Path, language: Language) -> FileInfo | None:
        try:
            content = file_path.read_bytes()
        except OSError as e:
            logger.warning(f"Skipping unreadable file {relative}: {e}")
            return None

        return FileInfo(
            path=file_path,
            relative_path=relative.as_posix(),
            language=language,
            content_hash=hashlib.sha256(content).hexdigest(),
            size_bytes=len(content),
            line_count=content.count(b"\n") + 1,
        )

    def scan_all(self) -> list[FileInfo]:
        return list(self.scan())

    def get_statistics(self, files: list[FileInfo] | None = None) -> ScanStatistics:
        stats = ScanStatistics()
        for file_info in files if files is not None else self.scan():
            stats.file_count += 1
            stats.total_lines += file_info.line_count
            stats.total_size += file_info.size_bytes
            stats.languages[file_info.language.value] += 1
        return stats
