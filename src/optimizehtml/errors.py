from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .placeholders import LeakedPlaceholder


class OptimizeHtmlError(Exception):
    """Base class for errors raised by optimizehtml."""


class OptionsError(OptimizeHtmlError, ValueError):
    """Invalid configuration. Aborts the whole build."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(format_validation_errors(self.errors))


class PlaceholderLeakError(OptimizeHtmlError):
    """A placeholder survived restoration, so the output markup is corrupt.

    This is always a bug in an extract/restore pair (or an optimizer that
    produced text matching the placeholder grammar), never a problem with the
    input document.
    """

    def __init__(self, placeholders: list[LeakedPlaceholder]) -> None:
        self.placeholders = list(placeholders)
        details = "\n  ".join(f'{p.placeholder} (context: "{p.context}")' for p in self.placeholders)
        super().__init__(f"Placeholder restoration failed.\n\nRemaining placeholders:\n  {details}")


@dataclass(frozen=True, slots=True)
class DocumentError:
    """A document that failed to optimize and was emitted unchanged."""

    filename: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.filename}: {type(self.error).__name__}: {self.error}"


def format_validation_errors(errors: list[str]) -> str:
    return "\n".join(["Invalid options for optimizehtml:", *(f"  - {err}" for err in errors)])
