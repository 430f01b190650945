"""Option validation and defaults.

Options arrive as a plain mapping (from a build script, a config file or the
command line). They are validated in one go so every problem is reported
together, then frozen into an `OptimizeOptions` that the pipeline reads.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from .errors import OptionsError
from .files import compile_glob
from .transforms_spec import (
    CleanDataAttributes,
    CleanUrlAttributes,
    CollapseWhitespace,
    NormalizeBooleanAttributes,
    RemoveComments,
    RemoveDefaultAttributes,
    RemoveEmptyAttributes,
    RemoveProtocols,
    RemoveTagSpaces,
    SafeRemoveAttributeQuotes,
    SimplifyDoctype,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .transforms import Transform
    from .transforms_spec import ReportCallback

DEFAULT_PATTERN = "**/*.html"

# Pipeline order. Whitespace collapsing always runs first.
_FLAG_TRANSFORMS = (
    RemoveComments,
    RemoveEmptyAttributes,
    NormalizeBooleanAttributes,
    CleanUrlAttributes,
    CleanDataAttributes,
    RemoveTagSpaces,
    RemoveDefaultAttributes,
    SimplifyDoctype,
    RemoveProtocols,
    SafeRemoveAttributeQuotes,
)

OPTIMIZER_FLAGS: tuple[str, ...] = tuple(cls.option for cls in _FLAG_TRANSFORMS)

# `aggressive` turns these on unless the caller set them explicitly.
AGGRESSIVE_FLAGS: frozenset[str] = frozenset(OPTIMIZER_FLAGS) - {"remove_empty_attributes"}


def _type_name(value: object) -> str:
    return type(value).__name__


def _validate_bool(value: Any, name: str) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    return f'Option "{name}" must be a boolean, got {_type_name(value)}: {value!r}'


def _validate_pattern(value: Any, name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return f'Option "{name}" must be a string, got {_type_name(value)}: {value!r}'
    try:
        compile_glob(value)
    except ValueError as exc:
        return f'Option "{name}" is not a valid glob pattern: {exc}'
    return None


def _validate_string_list(value: Any, name: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        return f'Option "{name}" must be a list, got {_type_name(value)}: {value!r}'
    for i, item in enumerate(value):
        if not isinstance(item, str):
            return f'Option "{name}" must contain only strings, item at index {i} is {_type_name(item)}: {item!r}'
    return None


VALIDATORS: dict[str, Callable[[Any, str], str | None]] = {
    "pattern": _validate_pattern,
    "exclude_tags": _validate_string_list,
    "aggressive": _validate_bool,
    **{flag: _validate_bool for flag in OPTIMIZER_FLAGS},
}


def validate_options(options: object) -> list[str]:
    """Return every problem with `options`; an empty list means valid."""

    if not isinstance(options, Mapping):
        return ["Options must be a mapping"]

    errors = [f'Unknown option "{key}"' for key in options if key not in VALIDATORS]
    for name, validator in VALIDATORS.items():
        if name in options:
            error = validator(options[name], name)
            if error:
                errors.append(error)
    return errors


@dataclass(frozen=True, slots=True)
class OptimizeOptions:
    """Resolved, immutable configuration for one build."""

    pattern: str = DEFAULT_PATTERN
    exclude_tags: tuple[str, ...] = ()
    aggressive: bool = False
    remove_comments: bool = False
    remove_empty_attributes: bool = False
    normalize_boolean_attributes: bool = False
    clean_url_attributes: bool = False
    clean_data_attributes: bool = False
    remove_tag_spaces: bool = False
    remove_default_attributes: bool = False
    simplify_doctype: bool = False
    remove_protocols: bool = False
    safe_remove_attribute_quotes: bool = False

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None = None) -> OptimizeOptions:
        """Validate user options and merge them over the defaults.

        Raises OptionsError listing every invalid or unknown key.
        """

        user: Mapping[str, Any] = {} if options is None else options
        errors = validate_options(user)
        if errors:
            raise OptionsError(errors)

        aggressive = bool(user.get("aggressive"))
        values: dict[str, Any] = {"aggressive": aggressive}
        if user.get("pattern") is not None:
            values["pattern"] = user["pattern"]
        if user.get("exclude_tags") is not None:
            values["exclude_tags"] = tuple(user["exclude_tags"])
        for flag in OPTIMIZER_FLAGS:
            explicit = user.get(flag)
            if explicit is not None:
                values[flag] = explicit
            elif aggressive and flag in AGGRESSIVE_FLAGS:
                values[flag] = True
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def enabled_flags(self) -> tuple[str, ...]:
        return tuple(flag for flag in OPTIMIZER_FLAGS if getattr(self, flag))

    def build_transforms(self, *, report: ReportCallback | None = None) -> list[Transform]:
        """Return the transform specs these options enable, in pipeline order."""

        specs: list[Transform] = [CollapseWhitespace(preserve_tags=self.exclude_tags, report=report)]
        specs.extend(cls(report=report) for cls in _FLAG_TRANSFORMS if getattr(self, cls.option))
        return specs


__all__ = [
    "AGGRESSIVE_FLAGS",
    "DEFAULT_PATTERN",
    "OPTIMIZER_FLAGS",
    "OptimizeOptions",
    "validate_options",
]
