"""Deciding which build files to touch, and reading them."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a glob pattern matched against `/`-separated relative paths.

    Supported syntax:
    - '**/' matches zero or more directories
    - '**' matches any sequence, including '/'
    - '*' matches any sequence within one path segment
    - '?' matches one character other than '/'
    - '{a,b}' matches either alternative (may nest)

    Raises ValueError for unbalanced braces.
    """

    out: list[str] = []
    depth = 0
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "*":
            if pattern.startswith("**/", i):
                out.append("(?:.*/)?")
                i += 3
                continue
            if pattern.startswith("**", i):
                out.append(".*")
                i += 2
                continue
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "{":
            out.append("(?:")
            depth += 1
        elif ch == "}" and depth:
            out.append(")")
            depth -= 1
        elif ch == "," and depth:
            out.append("|")
        else:
            out.append(re.escape(ch))
        i += 1

    if depth:
        raise ValueError(f"unbalanced '{{' in {pattern!r}")
    return re.compile("^(?:" + "".join(out) + ")$")


def normalize_filename(filename: str) -> str:
    name = filename.replace("\\", "/")
    while name.startswith("./"):
        name = name[2:]
    return name


def match_pattern(pattern: str | re.Pattern[str], filename: str) -> bool:
    regex = compile_glob(pattern) if isinstance(pattern, str) else pattern
    return regex.match(normalize_filename(filename)) is not None


def is_processable(contents: object) -> bool:
    """Return True if `contents` is non-empty text or UTF-8 bytes worth optimizing."""

    if isinstance(contents, str):
        text = contents
    elif isinstance(contents, (bytes, bytearray)):
        try:
            text = bytes(contents).decode("utf-8")
        except UnicodeDecodeError:
            return False
    else:
        return False

    if not text:
        return False
    return text.strip("\x00") != ""


def decode_contents(contents: bytes | bytearray | str) -> str:
    if isinstance(contents, str):
        return contents
    return bytes(contents).decode("utf-8")


def iter_files(root: Path) -> Iterator[tuple[str, Path]]:
    """Yield `(relative posix name, path)` for every file below `root`, sorted."""

    for path in sorted(root.rglob("*")):
        if path.is_file():
            yield path.relative_to(root).as_posix(), path


__all__ = [
    "compile_glob",
    "decode_contents",
    "is_processable",
    "iter_files",
    "match_pattern",
    "normalize_filename",
]
