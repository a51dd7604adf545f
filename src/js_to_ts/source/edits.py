"""Byte-range text edits applied bottom-up against one snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from js_to_ts.core.errors import EditConflictError

if TYPE_CHECKING:
    from tree_sitter import Node


@dataclass(frozen=True)
class TextEdit:
    start: int
    end: int
    text: str

    @classmethod
    def insert(cls, offset: int, text: str) -> "TextEdit":
        return cls(offset, offset, text)

    @classmethod
    def replace(cls, node: Node, text: str) -> "TextEdit":
        return cls(node.start_byte, node.end_byte, text)

    @classmethod
    def delete(cls, start: int, end: int) -> "TextEdit":
        return cls(start, end, "")

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


def apply_edits(content: bytes, edits: list[TextEdit]) -> bytes:
    """Apply edits computed against `content`, last position first.

    Insertions at the same offset keep their submission order. An edit that
    overlaps another raises EditConflictError.
    """
    ordered = sorted(enumerate(edits), key=lambda item: (item[1].start, item[1].end, item[0]))

    previous: TextEdit | None = None
    for _, edit in ordered:
        if edit.start > edit.end or edit.end > len(content):
            raise EditConflictError(f"Edit out of range: {edit.start}-{edit.end}")
        if previous is not None and edit.start < previous.end:
            raise EditConflictError(
                f"Overlapping edits at {previous.start}-{previous.end} and {edit.start}-{edit.end}"
            )
        previous = edit

    result = content
    for _, edit in reversed(ordered):
        result = result[: edit.start] + edit.text.encode("utf-8") + result[edit.end :]
    return result
