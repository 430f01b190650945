"""Running the transform pipeline over documents and build files.

`HtmlOptimizer` is built once per build: it validates options, compiles the
transform list and the file/exclusion patterns, and is then read-only, so a
single instance can be shared by threads processing different documents.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import DocumentError, PlaceholderLeakError
from .files import compile_glob, decode_contents, is_processable, normalize_filename
from .options import OptimizeOptions
from .placeholders import PlaceholderKind, PlaceholderStore, find_leaked_placeholders, placeholder_pattern
from .transforms import apply_compiled_transforms, compile_transforms
from .whitespace import compile_element_pattern

if TYPE_CHECKING:
    import re
    from collections.abc import Iterable, Mapping, MutableMapping

    from .transforms import CompiledTransform, Transform
    from .transforms_spec import ReportCallback

logger = logging.getLogger(__name__)

_EXCLUDE_PLACEHOLDER_RE = placeholder_pattern((PlaceholderKind.EXCLUDE,))


def process_content(
    content: str,
    compiled: list[CompiledTransform],
    *,
    exclude_tags: Iterable[str] = (),
    exclude_pattern: re.Pattern[str] | None = None,
) -> str:
    """Run `compiled` over one document.

    Elements named in `exclude_tags` are cut out before any transform runs
    and put back afterwards, so they pass through the whole pipeline
    untouched.

    Raises PlaceholderLeakError if a placeholder is left in the output
    outside a quoted string.
    """

    if exclude_pattern is None:
        exclude_pattern = compile_element_pattern(exclude_tags)

    store: PlaceholderStore | None = None
    if exclude_pattern is not None:
        if _EXCLUDE_PLACEHOLDER_RE.search(content):
            # Restoring would be ambiguous; excluded tags still get the
            # whitespace core's preserve treatment.
            logger.warning("Document already contains exclusion placeholders; excluded tags are not carved out")
        else:
            carve_out = PlaceholderStore()
            content = exclude_pattern.sub(lambda m: carve_out.add(PlaceholderKind.EXCLUDE, m.group(0)), content)
            store = carve_out

    result = apply_compiled_transforms(content, compiled)

    if store is not None:
        result = store.restore(result, (PlaceholderKind.EXCLUDE,))

    leaked = find_leaked_placeholders(result)
    if leaked:
        raise PlaceholderLeakError(leaked)
    return result


@dataclass(frozen=True, slots=True)
class BuildReport:
    """What happened to each matching file in one `process_files` call."""

    processed: tuple[str, ...]
    skipped: tuple[str, ...]
    errors: tuple[DocumentError, ...]

    @property
    def ok(self) -> bool:
        return not self.errors


class HtmlOptimizer:
    """Optimize HTML documents with one validated, precompiled configuration.

    `options` is a mapping of user options (validated; raises OptionsError)
    or an already resolved `OptimizeOptions`. `transforms` replaces the
    option-derived transform list entirely, which is mostly useful for
    plugging in `EditDocument` callbacks.
    """

    __slots__ = ("_exclude_pattern", "_file_pattern", "compiled", "options")

    def __init__(
        self,
        options: Mapping[str, Any] | OptimizeOptions | None = None,
        *,
        transforms: list[Transform] | tuple[Transform, ...] | None = None,
        report: ReportCallback | None = None,
    ) -> None:
        if not isinstance(options, OptimizeOptions):
            options = OptimizeOptions.from_mapping(options)
        self.options = options

        specs = transforms if transforms is not None else options.build_transforms(report=report)
        self.compiled = compile_transforms(specs)
        self._exclude_pattern = compile_element_pattern(options.exclude_tags)
        self._file_pattern = compile_glob(options.pattern)

        logger.debug("Running with options: %r", options)

    def matches(self, filename: str) -> bool:
        return self._file_pattern.match(normalize_filename(filename)) is not None

    def optimize(self, text: str) -> str:
        return process_content(text, self.compiled, exclude_pattern=self._exclude_pattern)

    def process_files(self, files: MutableMapping[str, Any]) -> BuildReport:
        """Optimize every matching file in `files` in place.

        Values are `bytes` (written back as UTF-8 bytes) or `str`. A document
        whose optimization raises keeps its original contents; the failure is
        logged and recorded in the report and the remaining files are still
        processed.
        """

        processed: list[str] = []
        skipped: list[str] = []
        errors: list[DocumentError] = []

        for filename, contents in list(files.items()):
            if not self.matches(filename):
                continue
            if not is_processable(contents):
                logger.debug("Skipping %s: no processable contents", filename)
                skipped.append(filename)
                continue

            try:
                optimized = self.optimize(decode_contents(contents))
            except Exception as exc:
                logger.warning("Failed to optimize %s; leaving it unchanged", filename, exc_info=True)
                errors.append(DocumentError(filename=filename, error=exc))
                continue

            files[filename] = optimized if isinstance(contents, str) else optimized.encode("utf-8")
            processed.append(filename)

        return BuildReport(processed=tuple(processed), skipped=tuple(skipped), errors=tuple(errors))

    __call__ = process_files


def optimize_html(text: str, **options: Any) -> str:
    """Optimize a single document with the given options."""

    return HtmlOptimizer(options).optimize(text)


__all__ = [
    "BuildReport",
    "HtmlOptimizer",
    "optimize_html",
    "process_content",
]
