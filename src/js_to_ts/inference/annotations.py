"""Type hints embedded in comments.

Two sources are recognised:

- trailing comments carrying the micro-syntax
  ``[`type` #default# @nullable@ ^auxType^ ~auxFormat~]``, where every
  delimited segment is optional and an empty segment counts as absent;
- JSDoc blocks with ``@param``/``@property`` tags, ``@returns`` and ``@type``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

BRACKETED = re.compile(r"\[(.*)\]", re.DOTALL)
SEGMENT_PATTERNS: dict[str, re.Pattern[str]] = {
    "type": re.compile(r"`([^`]*)`"),
    "default": re.compile(r"#([^#]*)#"),
    "nullable": re.compile(r"@([^@]*)@"),
    "aux_type": re.compile(r"\^([^^]*)\^"),
    "aux_format": re.compile(r"~([^~]*)~"),
}

PARAM_TAGS = frozenset({"param", "arg", "argument", "property", "prop"})
RETURN_TAGS = frozenset({"returns", "return"})
TAG_START = re.compile(r"@(\w+)")
ARRAY_GENERIC = re.compile(r"^Array\.?<(.+)>$")
OBJECT_GENERIC = re.compile(r"^Object\.?<\s*([^,]+?)\s*,\s*(.+)>$")


@dataclass(frozen=True)
class CommentAnnotation:
    type: str | None = None
    default: str | None = None
    nullable: str | None = None
    aux_type: str | None = None
    aux_format: str | None = None

    @property
    def is_optional(self) -> bool:
        return (self.nullable or "").lower() == "true"

    @property
    def is_empty(self) -> bool:
        return self.type is None and self.default is None and self.nullable is None


def parse_comment_annotation(comment: str) -> CommentAnnotation | None:
    """Parse the micro-syntax out of a comment; None when nothing is present."""
    bracketed = BRACKETED.search(comment)
    text = bracketed.group(1) if bracketed else comment

    segments: dict[str, str | None] = {}
    for segment, pattern in SEGMENT_PATTERNS.items():
        match = pattern.search(text)
        value = match.group(1).strip() if match else ""
        segments[segment] = value or None

    annotation = CommentAnnotation(**segments)
    if annotation.is_empty and annotation.aux_type is None and annotation.aux_format is None:
        return None
    return annotation


@dataclass(frozen=True)
class JsDocTag:
    tag: str
    name: str | None = None
    type: str | None = None
    optional: bool = False
    default: str | None = None


@dataclass
class JsDoc:
    description: str = ""
    tags: list[JsDocTag] = field(default_factory=list)

    def param(self, name: str) -> JsDocTag | None:
        for tag in self.tags:
            if tag.tag in PARAM_TAGS and tag.name == name:
                return tag
        return None

    @property
    def returns(self) -> str | None:
        for tag in self.tags:
            if tag.tag in RETURN_TAGS and tag.type:
                return tag.type
        return None

    @property
    def type(self) -> str | None:
        for tag in self.tags:
            if tag.tag == "type" and tag.type:
                return tag.type
        return None


def is_jsdoc(comment: str) -> bool:
    return comment.startswith("/**") and not comment.startswith("/***")


def parse_jsdoc(comment: str) -> JsDoc | None:
    if not is_jsdoc(comment):
        return None

    body = comment[3:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = [re.sub(r"^\s*\*?\s?", "", line) for line in body.splitlines()]
    text = "\n".join(lines).strip()

    first_tag = TAG_START.search(text)
    description = text[: first_tag.start()].strip() if first_tag else text
    doc = JsDoc(description=description)
    if first_tag is None:
        return doc

    # split on tags at the start of a line or after whitespace
    chunks = re.split(r"(?:^|\s)(?=@\w)", text[first_tag.start() :])
    for chunk in chunks:
        chunk = chunk.strip()
        if chunk.startswith("@"):
            tag = _parse_tag(chunk)
            if tag is not None:
                doc.tags.append(tag)
    return doc


def _parse_tag(chunk: str) -> JsDocTag | None:
    match = TAG_START.match(chunk)
    if match is None:
        return None
    tag = match.group(1)
    rest = chunk[match.end() :].lstrip()

    raw_type = None
    if rest.startswith("{"):
        raw_type, rest = _read_braced(rest)
        rest = rest.lstrip()

    if tag not in PARAM_TAGS:
        type_text, optional = normalize_type(raw_type) if raw_type else (None, False)
        return JsDocTag(tag=tag, type=type_text, optional=optional)

    name, optional_name, default = _read_param_name(rest)
    type_text, optional_type = normalize_type(raw_type) if raw_type else (None, False)
    return JsDocTag(
        tag=tag,
        name=name,
        type=type_text,
        optional=optional_name or optional_type,
        default=default,
    )


def _read_braced(text: str) -> tuple[str | None, str]:
    depth = 0
    for index, char in enumerate(text):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[1:index].strip(), text[index + 1 :]
    return None, text


def _read_param_name(text: str) -> tuple[str | None, bool, str | None]:
    if text.startswith("["):
        end = text.find("]")
        if end == -1:
            return None, False, None
        inner = text[1:end]
        name, _, default = inner.partition("=")
        return name.strip() or None, True, default.strip() or None
    match = re.match(r"[\w$.]+", text)
    return (match.group(0) if match else None), False, None


def normalize_type(raw: str) -> tuple[str, bool]:
    """Convert a JSDoc type expression to TypeScript; returns (type, optional)."""
    text = raw.strip()
    optional = False
    if text.startswith("?"):
        optional = True
        text = text[1:]
    if text.endswith("="):
        optional = True
        text = text[:-1]
    if text.startswith("!"):
        text = text[1:]
    return _convert_type(text.strip()), optional


def _convert_type(text: str) -> str:
    if text in ("*", ""):
        return "any"
    if text.startswith("..."):
        return f"{_convert_type(text[3:])}[]"
    union = _split_top_level(text, "|")
    if len(union) > 1:
        return " | ".join(_convert_type(part.strip()) for part in union)
    if text.startswith("(") and text.endswith(")"):
        return f"({_convert_type(text[1:-1])})"

    array = ARRAY_GENERIC.match(text)
    if array:
        inner = _convert_type(array.group(1))
        return f"({inner})[]" if "|" in inner else f"{inner}[]"
    mapping = OBJECT_GENERIC.match(text)
    if mapping:
        return f"Record<{_convert_type(mapping.group(1))}, {_convert_type(mapping.group(2))}>"

    builtins = {"Object": "object", "String": "string", "Number": "number", "Boolean": "boolean"}
    return builtins.get(text, text)


def _split_top_level(text: str, separator: str) -> list[str]:
    parts = []
    depth = 0
    current = []
    for char in text:
        if char in "<({[":
            depth += 1
        elif char in ">)}]":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts
