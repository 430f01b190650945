"""Whitespace collapsing that understands preserve and inline elements.

This is a small regex-driven structural pass over markup text, not a parser:

1. Elements whose content must stay byte-for-byte (`pre`, `code`, `textarea`,
   `script`, `style` and any caller-supplied tags) are swapped for PRESERVE
   placeholders.
2. Inline elements are swapped for INLINE placeholders, innermost first,
   until nothing matches. Their interior whitespace is collapsed, and the
   whitespace around them shrinks to at most one space so "word <b>x</b>
   word" keeps its word breaks.
3. Every text run between the remaining tags is collapsed and trimmed.
4. Placeholders are restored.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, cast

from .constants import HTML_WHITESPACE, INLINE_ELEMENTS, WHITESPACE_PRESERVING_ELEMENTS
from .placeholders import PlaceholderKind, PlaceholderStore, placeholder_pattern

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

# Each pass removes at least one literal inline start tag, so real documents
# finish in (max nesting depth + 1) passes.
MAX_INLINE_PASSES = 256

_WS = r"[ \t\n\r\f]"
_WS_RUN_RE = re.compile(rf"{_WS}+")
_TAG_SPLIT_RE = re.compile(r"(<[^>]+>)")
_OWN_PLACEHOLDER_RE = placeholder_pattern((PlaceholderKind.PRESERVE, PlaceholderKind.INLINE))

_INLINE_NAMES = "|".join(INLINE_ELEMENTS)
_INLINE_OPEN = rf"<(?P<tag>{_INLINE_NAMES})(?=[ \t\n\r\f/>])[^>]*>"
# Lead whitespace only starts at the beginning of a run; otherwise every
# position inside a long run is retried.
_INLINE_LEAD = rf"(?P<lead>(?<![ \t\n\r\f]){_WS}*)"
_INLINE_TAIL = rf"(?P<close></(?P=tag){_WS}*>)(?P<trail>{_WS}*)"

# No literal inline start tag inside: nested ones are captured first.
_INLINE_ELEMENT_RE = re.compile(
    rf"{_INLINE_LEAD}(?P<open>{_INLINE_OPEN})"
    rf"(?P<content>(?:(?!<(?:{_INLINE_NAMES})(?=[ \t\n\r\f/>])).)*?)"
    rf"{_INLINE_TAIL}",
    re.IGNORECASE | re.DOTALL,
)

# Fallback once nothing above matches: any start tag left inside is unclosed,
# so only a start tag of the same name stops the match.
_INLINE_UNCLOSED_CHILD_RE = re.compile(
    rf"{_INLINE_LEAD}(?P<open>{_INLINE_OPEN})"
    rf"(?P<content>(?:(?!<(?P=tag)(?=[ \t\n\r\f/>])).)*?)"
    rf"{_INLINE_TAIL}",
    re.IGNORECASE | re.DOTALL,
)


def _collapse_runs(text: str) -> str:
    return _WS_RUN_RE.sub(" ", text)


def normalize_tag_names(tags: Iterable[str]) -> tuple[str, ...]:
    """Lowercase and strip tag names, dropping blanks and duplicates (order kept)."""

    out: list[str] = []
    for tag in tags:
        name = str(tag).strip().lower()
        if name and name not in out:
            out.append(name)
    return tuple(out)


def compile_element_pattern(tags: Iterable[str]) -> re.Pattern[str] | None:
    """Compile a pattern matching whole `<tag ...>...</tag>` elements.

    Tag names match case-insensitively and only as whole names (`pre` never
    matches `<prefix>`). The match runs to the nearest close tag of the same
    name. Returns None when `tags` is empty.
    """

    names = normalize_tag_names(tags)
    if not names:
        return None
    alternation = "|".join(re.escape(n) for n in names)
    return re.compile(
        rf"<(?P<tag>{alternation})(?=[ \t\n\r\f/>])[^>]*>.*?</(?P=tag){_WS}*>",
        re.IGNORECASE | re.DOTALL,
    )


def compile_preserve_pattern(preserve_tags: Iterable[str] = ()) -> re.Pattern[str]:
    """Compile the preserve-element pattern for the fixed tags plus `preserve_tags`."""

    return cast("re.Pattern[str]", compile_element_pattern((*WHITESPACE_PRESERVING_ELEMENTS, *preserve_tags)))


_DEFAULT_PRESERVE_RE = compile_preserve_pattern()


def extract_preserved(text: str, store: PlaceholderStore, preserve_pattern: re.Pattern[str] | None = None) -> str:
    """Swap every preserve element for a PRESERVE placeholder.

    Unclosed preserve elements do not match and stay in the text.
    """

    pattern = preserve_pattern or _DEFAULT_PRESERVE_RE
    return pattern.sub(lambda m: store.add(PlaceholderKind.PRESERVE, m.group(0)), text)


def normalize_inline_elements(text: str, store: PlaceholderStore) -> str:
    """Swap inline elements for INLINE placeholders, innermost first.

    The recorded element keeps its tags verbatim; its interior is collapsed
    and trimmed. Placeholders already inside the interior are opaque and are
    copied through.

    Once every remaining element holds an inline start tag, those children
    are unclosed (`<span>a <b>b</span>`) and the parent is taken with them
    as part of its interior.
    """

    def _replace(match: re.Match[str]) -> str:
        content = _collapse_runs(match.group("content")).strip(HTML_WHITESPACE)
        token = store.add(PlaceholderKind.INLINE, f"{match.group('open')}{content}{match.group('close')}")
        lead = " " if match.group("lead") else ""
        trail = " " if match.group("trail") else ""
        return f"{lead}{token}{trail}"

    for _ in range(MAX_INLINE_PASSES):
        text, count = _INLINE_ELEMENT_RE.subn(_replace, text)
        if count:
            continue
        text, count = _INLINE_UNCLOSED_CHILD_RE.subn(_replace, text)
        if not count:
            return text

    logger.warning(
        "Inline element normalization stopped after %d passes; remaining inline tags are left to block collapsing",
        MAX_INLINE_PASSES,
    )
    return text


def collapse_block_text(text: str) -> str:
    """Collapse and trim every text run between tags; tags pass through."""

    parts = _TAG_SPLIT_RE.split(text)
    # re.split with a capturing group alternates text, tag, text, ...
    for i in range(0, len(parts), 2):
        parts[i] = _collapse_runs(parts[i]).strip(HTML_WHITESPACE)
    return "".join(parts).strip(HTML_WHITESPACE)


def collapse_whitespace(
    text: str,
    *,
    preserve_tags: Iterable[str] = (),
    preserve_pattern: re.Pattern[str] | None = None,
) -> str:
    """Collapse insignificant whitespace in an HTML document.

    `preserve_tags` adds element names (beyond `pre`, `code`, `textarea`,
    `script` and `style`) whose content is left untouched. A precompiled
    `preserve_pattern` from `compile_preserve_pattern` takes precedence.

    Text that already contains PRESERVE/INLINE placeholders has been through
    this function before (or is being processed re-entrantly) and is returned
    unchanged.
    """

    if not text:
        return text

    if _OWN_PLACEHOLDER_RE.search(text):
        logger.debug("Input already contains whitespace placeholders; leaving it unchanged")
        return text

    if preserve_pattern is None:
        preserve_pattern = compile_preserve_pattern(preserve_tags) if preserve_tags else _DEFAULT_PRESERVE_RE

    store = PlaceholderStore()
    html = extract_preserved(text, store, preserve_pattern)
    html = normalize_inline_elements(html, store)
    html = collapse_block_text(html)
    return store.restore(html)


__all__ = [
    "MAX_INLINE_PASSES",
    "collapse_block_text",
    "collapse_whitespace",
    "compile_element_pattern",
    "compile_preserve_pattern",
    "extract_preserved",
    "normalize_inline_elements",
    "normalize_tag_names",
]
