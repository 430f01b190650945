"""Single-purpose markup optimizers.

Each optimizer is a pure `str -> str` function. Most of them only look at one
tag at a time; those are `TagRewriter` objects so the transform compiler can
run several of them in a single walk over the document's tags.

These are regex rewrites, not a parser: attribute values containing `>` or
mixed quotes are handled best-effort.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .constants import (
    BOOLEAN_ATTRIBUTES,
    DEFAULT_ATTRIBUTES,
    EMPTY_VALUE_ATTRIBUTES,
    HTML_WHITESPACE,
    PROTOCOL_ATTRIBUTES,
    QUOTED_URL_ATTRIBUTES,
    URL_ATTRIBUTES,
    WHITESPACE_PRESERVING_ELEMENTS,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    TagFunc = Callable[[str], str]


# `script`, `style`, `textarea`, `pre` and `code` bodies are not rewritten:
# only their start tag is.
_RAW_ELEMENT = (
    r"(?P<open><(?P<raw>%s)(?=[ \t\n\r\f/>])[^>]*>)(?P<body>.*?</(?P=raw)[ \t\n\r\f]*>)"
    % "|".join(WHITESPACE_PRESERVING_ELEMENTS)
)
_TAG_RE = re.compile(_RAW_ELEMENT + r"|<[^>]+>", re.IGNORECASE | re.DOTALL)
_WS_RUN_RE = re.compile(r"[ \t\n\r\f]+")


def rewrite_tags(content: str, *funcs: TagFunc, changed: list[bool] | None = None) -> str:
    """Apply `funcs` in order to every tag in `content`.

    Comments, doctypes and other `<!...>` constructs are skipped. Only the
    start tag of a `script`, `style`, `textarea`, `pre` or `code` element is
    rewritten; its body and end tag pass through unchanged.

    If `changed` is given it must have one slot per func; a slot is set to
    True when that func altered at least one tag.
    """

    if not funcs:
        return content

    def _rewrite(match: re.Match[str]) -> str:
        body = match.group("body")
        tag = match.group(0) if body is None else match.group("open")
        if tag.startswith("<!"):
            return tag
        for i, func in enumerate(funcs):
            out = func(tag)
            if changed is not None and out != tag:
                changed[i] = True
            tag = out
        return tag if body is None else tag + body

    return _TAG_RE.sub(_rewrite, content)


@dataclass(frozen=True, slots=True)
class TagRewriter:
    """A per-tag optimizer that can also be called on a whole document."""

    name: str
    func: TagFunc

    def __call__(self, content: str) -> str:
        return rewrite_tags(content, self.func)


# -----------------
# Document-level
# -----------------


_COMMENT_RE = re.compile(_RAW_ELEMENT + r"|<!--.*?-->", re.IGNORECASE | re.DOTALL)
_DOCTYPE_RE = re.compile(r"<!DOCTYPE[^>]*>", re.IGNORECASE)


def remove_comments(content: str) -> str:
    """Drop every `<!-- ... -->` comment, conditional comments included.

    Comment-like text inside `script`, `style`, `textarea`, `pre` and `code`
    is content and stays.
    """

    return _COMMENT_RE.sub(lambda m: m.group(0) if m.group("raw") else "", content)


def simplify_doctype(content: str) -> str:
    """Replace any doctype declarations with a single leading `<!DOCTYPE html>`."""

    if not _DOCTYPE_RE.search(content):
        return content
    return "<!DOCTYPE html>" + _DOCTYPE_RE.sub("", content)


# -----------------
# Tag-level
# -----------------


_ATTRIBUTE_RE = re.compile(r"""\s([^\s=/>]+)(?:=["']([^"']*)["'])?""")
_QUOTED_ATTRIBUTE_RE = re.compile(r"""\s([^\s=/>]+)=["']([^"']*)["']""")
_EMPTY_ATTRIBUTE_RE = re.compile(r"""[ \t\n\r\f]+([^\s=/>"']+)=(["'])[ \t\n\r\f]*\2""")
_DATA_ATTRIBUTE_RE = re.compile(r"""\s(data-[^\s=/>]+)=(["'])(.*?)\2""", re.DOTALL)
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_TAG_NAME_RE = re.compile(r"<([^\s>/]+)")
_QUOTED_VALUE_RE = re.compile(r"""("[^"]*"|'[^']*')""")
_AROUND_EQUALS_RE = re.compile(r" ?= ?")
_PROTOCOL_RE = re.compile(
    r"""(\s(?:%s)=["'])https?://([^"']+)(["'])""" % "|".join(PROTOCOL_ATTRIBUTES),
    re.IGNORECASE,
)
_UNQUOTABLE_RE = re.compile(r"""(\s)([\w-]+)=(["'])([^"'<>`\s{}()\[\]?=]+)\3(?!/)""")


def _is_end_tag(tag: str) -> bool:
    return tag.startswith("</")


def _remove_empty_attributes(tag: str) -> str:
    if _is_end_tag(tag):
        return tag

    def _attr(match: re.Match[str]) -> str:
        if match.group(1).lower() in EMPTY_VALUE_ATTRIBUTES:
            return match.group(0)
        return ""

    return _EMPTY_ATTRIBUTE_RE.sub(_attr, tag)


def _normalize_boolean_attributes(tag: str) -> str:
    if _is_end_tag(tag):
        return tag

    def _attr(match: re.Match[str]) -> str:
        name, value = match.group(1), match.group(2)
        if name.lower() not in BOOLEAN_ATTRIBUTES or value is None:
            return match.group(0)
        if value == "false":
            return ""
        if value in ("true", "") or value.lower() == name.lower():
            return f" {name}"
        return match.group(0)

    return _ATTRIBUTE_RE.sub(_attr, tag)


def _clean_srcset(value: str) -> str:
    candidates = (_WS_RUN_RE.sub(" ", c).strip(HTML_WHITESPACE) for c in value.split(","))
    return ",".join(c for c in candidates if c)


def _clean_url_attributes(tag: str) -> str:
    if _is_end_tag(tag):
        return tag

    def _attr(match: re.Match[str]) -> str:
        name, value = match.group(1), match.group(2)
        lowered = name.lower()
        if lowered not in URL_ATTRIBUTES:
            return match.group(0)
        # srcset separates URL and descriptor with whitespace.
        if lowered == "srcset":
            return f' {name}="{_clean_srcset(value)}"'
        return f' {name}="{_WS_RUN_RE.sub("", value)}"'

    return _QUOTED_ATTRIBUTE_RE.sub(_attr, tag)


def _clean_data_attributes(tag: str) -> str:
    if _is_end_tag(tag):
        return tag

    def _attr(match: re.Match[str]) -> str:
        name, quote, value = match.group(1), match.group(2), match.group(3)
        trimmed = value.strip(HTML_WHITESPACE)
        if not trimmed:
            return ""

        if trimmed[0] in "{[":
            try:
                parsed = json.loads(trimmed)
            except ValueError:
                pass
            else:
                dumped = json.dumps(parsed, separators=(",", ":"), ensure_ascii=False)
                if not any(ch in dumped for ch in "'<>"):
                    return f" {name}='{dumped}'"
                return match.group(0)

        if _NUMBER_RE.fullmatch(trimmed):
            return f' {name}="{trimmed}"'

        if trimmed.lower() in ("true", "false"):
            return f' {name}="{trimmed.lower()}"'

        collapsed = _WS_RUN_RE.sub(" ", trimmed)
        if '"' in collapsed:
            return f" {name}={quote}{collapsed}{quote}"
        return f' {name}="{collapsed}"'

    return _DATA_ATTRIBUTE_RE.sub(_attr, tag)


def _remove_tag_spaces(tag: str) -> str:
    parts = _QUOTED_VALUE_RE.split(tag[1:-1])
    # Even indices are outside quotes; quoted values are left alone.
    for i in range(0, len(parts), 2):
        parts[i] = _AROUND_EQUALS_RE.sub("=", _WS_RUN_RE.sub(" ", parts[i]))
    return "<" + "".join(parts).strip(HTML_WHITESPACE) + ">"


def _remove_default_attributes(tag: str) -> str:
    if _is_end_tag(tag):
        return tag
    m = _TAG_NAME_RE.match(tag)
    if m is None:
        return tag
    defaults = DEFAULT_ATTRIBUTES.get(m.group(1).lower())
    if not defaults:
        return tag
    for attr, value in defaults.items():
        tag = re.sub(rf"""\s{attr}=["']{re.escape(value)}["']""", "", tag, count=1, flags=re.IGNORECASE)
    return tag


def _remove_protocols(tag: str) -> str:
    if 'rel="external"' in tag:
        return tag
    return _PROTOCOL_RE.sub(r"\1//\2\3", tag)


def _safe_remove_attribute_quotes(tag: str) -> str:
    def _attr(match: re.Match[str]) -> str:
        space, name, _quote, value = match.groups()
        if name.lower() in QUOTED_URL_ATTRIBUTES and (value.startswith("//") or ":" in value):
            return match.group(0)
        return f"{space}{name}={value}"

    return _UNQUOTABLE_RE.sub(_attr, tag)


remove_empty_attributes = TagRewriter("remove_empty_attributes", _remove_empty_attributes)
normalize_boolean_attributes = TagRewriter("normalize_boolean_attributes", _normalize_boolean_attributes)
clean_url_attributes = TagRewriter("clean_url_attributes", _clean_url_attributes)
clean_data_attributes = TagRewriter("clean_data_attributes", _clean_data_attributes)
remove_tag_spaces = TagRewriter("remove_tag_spaces", _remove_tag_spaces)
remove_default_attributes = TagRewriter("remove_default_attributes", _remove_default_attributes)
remove_protocols = TagRewriter("remove_protocols", _remove_protocols)
safe_remove_attribute_quotes = TagRewriter("safe_remove_attribute_quotes", _safe_remove_attribute_quotes)


__all__ = [
    "TagRewriter",
    "clean_data_attributes",
    "clean_url_attributes",
    "normalize_boolean_attributes",
    "remove_comments",
    "remove_default_attributes",
    "remove_empty_attributes",
    "remove_protocols",
    "remove_tag_spaces",
    "rewrite_tags",
    "safe_remove_attribute_quotes",
    "simplify_doctype",
]
