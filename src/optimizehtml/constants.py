"""Fixed tag and attribute sets shared by the transforms."""

from __future__ import annotations

# HTML's own whitespace set. Unlike `str.split()`/`\s`, this leaves U+00A0
# (no-break space) and other Unicode spaces alone.
HTML_WHITESPACE = " \t\n\r\f"

# Elements whose interior must survive byte-for-byte.
WHITESPACE_PRESERVING_ELEMENTS: tuple[str, ...] = ("pre", "code", "textarea", "script", "style")

# Elements that do not force a line break; whitespace around them decides
# whether neighbouring words render joined or separated.
INLINE_ELEMENTS: tuple[str, ...] = (
    "a",
    "span",
    "em",
    "strong",
    "b",
    "i",
    "u",
    "s",
    "small",
    "mark",
    "sub",
    "sup",
    "time",
    "cite",
    "abbr",
    "label",
    "svg",
)

BOOLEAN_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "allowfullscreen",
        "async",
        "autofocus",
        "autoplay",
        "checked",
        "controls",
        "default",
        "defer",
        "disabled",
        "formnovalidate",
        "hidden",
        "ismap",
        "itemscope",
        "loop",
        "multiple",
        "muted",
        "nomodule",
        "novalidate",
        "open",
        "playsinline",
        "readonly",
        "required",
        "reversed",
        "selected",
        "truespeed",
    }
)

# Attribute values browsers assume when the attribute is absent.
DEFAULT_ATTRIBUTES: dict[str, dict[str, str]] = {
    "script": {"type": "text/javascript"},
    "style": {"type": "text/css"},
    "link": {"type": "text/css"},
    "form": {"method": "get"},
    "input": {"type": "text"},
}

# Attributes whose whitespace is insignificant URL text.
URL_ATTRIBUTES: frozenset[str] = frozenset({"href", "src", "action", "srcset", "data"})

# Attributes that may carry an absolute http(s) URL worth shortening.
PROTOCOL_ATTRIBUTES: tuple[str, ...] = ("href", "src", "content", "action")

# URL-ish attributes that keep their quotes when the value looks like a URL.
QUOTED_URL_ATTRIBUTES: frozenset[str] = frozenset(
    {"href", "src", "action", "content", "srcset", "xmlns", "xlink:href"}
)

# Empty values that still carry meaning.
EMPTY_VALUE_ATTRIBUTES: frozenset[str] = frozenset({"alt", "value"})
