"""Placeholder tokens standing in for extracted markup.

A placeholder looks like ``___PRESERVE_3___``: a triple-underscore marker, the
kind, an index unique within that kind, and the marker again. Extractors hand
the original text to a `PlaceholderStore` and splice the returned token into
the document; the store puts everything back in a single scan at the end.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class _StrEnum(str, Enum):
    """Backport of enum.StrEnum (Python 3.11+)."""


class PlaceholderKind(_StrEnum):
    PRESERVE = "PRESERVE"
    INLINE = "INLINE"
    EXCLUDE = "EXCLUDE"


PLACEHOLDER_RE = re.compile(r"___(?P<kind>PRESERVE|INLINE|EXCLUDE)_(?P<index>\d+)___")


def make_placeholder(kind: PlaceholderKind, index: int) -> str:
    return f"___{kind.value}_{index}___"


def placeholder_pattern(kinds: Iterable[PlaceholderKind]) -> re.Pattern[str]:
    """Compile a pattern that only recognizes the given kinds."""

    names = "|".join(sorted(k.value for k in kinds))
    return re.compile(rf"___(?:{names})_\d+___")


class PlaceholderStore:
    """Index-addressed records of extracted text, one list per kind.

    Records are scoped to a single processing call; create a new store per
    document.
    """

    __slots__ = ("_order", "_records")

    def __init__(self) -> None:
        self._records: dict[PlaceholderKind, list[str]] = {kind: [] for kind in PlaceholderKind}
        self._order: list[tuple[PlaceholderKind, int]] = []

    def __len__(self) -> int:
        return len(self._order)

    def add(self, kind: PlaceholderKind, value: str) -> str:
        """Record `value` and return the placeholder that stands in for it."""

        records = self._records[kind]
        index = len(records)
        records.append(value)
        self._order.append((kind, index))
        return make_placeholder(kind, index)

    def records(self, kind: PlaceholderKind) -> tuple[str, ...]:
        return tuple(self._records[kind])

    def restore(self, text: str, kinds: Iterable[PlaceholderKind] | None = None) -> str:
        """Replace every known placeholder in `text` with its recorded value.

        A record may itself contain placeholders (an inline element wrapping a
        nested one). Such references always point at records created earlier,
        so values are resolved once in creation order and the final scan over
        `text` never revisits substituted output.

        Placeholders this store never issued are left as-is.
        """

        if not self._order:
            return text

        wanted = frozenset(kinds) if kinds is not None else frozenset(PlaceholderKind)
        resolved: dict[str, str] = {}

        def _lookup(match: re.Match[str]) -> str:
            token = match.group(0)
            return resolved.get(token, token)

        for kind, index in self._order:
            if kind not in wanted:
                continue
            value = self._records[kind][index]
            if "___" in value:
                value = PLACEHOLDER_RE.sub(_lookup, value)
            resolved[make_placeholder(kind, index)] = value

        if not resolved:
            return text
        return PLACEHOLDER_RE.sub(_lookup, text)


@dataclass(frozen=True, slots=True)
class LeakedPlaceholder:
    placeholder: str
    context: str


def find_leaked_placeholders(text: str, *, context_chars: int = 20) -> list[LeakedPlaceholder]:
    """Return placeholders left in `text` that are not inside a quoted string.

    Whether a token sits in a string literal is guessed by counting quote
    characters before it: an odd count means "inside quotes". Unbalanced
    quotes elsewhere in the document (an apostrophe in prose, say) flip the
    guess, so treat the result as a diagnostic rather than a proof.
    """

    leaked: list[LeakedPlaceholder] = []
    quotes = 0
    pos = 0
    for match in PLACEHOLDER_RE.finditer(text):
        start = match.start()
        segment = text[pos:start]
        quotes += segment.count('"') + segment.count("'")
        pos = start
        if quotes % 2:
            continue
        before = text[max(0, start - context_chars) : start]
        after = text[match.end() : match.end() + context_chars]
        leaked.append(LeakedPlaceholder(placeholder=match.group(0), context=f"{before}{match.group(0)}{after}"))
    return leaked


__all__ = [
    "PLACEHOLDER_RE",
    "LeakedPlaceholder",
    "PlaceholderKind",
    "PlaceholderStore",
    "find_leaked_placeholders",
    "make_placeholder",
    "placeholder_pattern",
]
