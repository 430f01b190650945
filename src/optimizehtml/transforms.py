"""Text transforms over whole HTML documents.

Transforms are described by the dataclasses in `optimizehtml.transforms_spec`
and compiled once per build into a flat list of callables. Compilation
resolves option-independent work up front (preserve patterns, optimizer
lookup) and fuses adjacent per-tag optimizers into a single walk over the
document's tags.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Literal, cast

from .optimizers import (
    TagRewriter,
    clean_data_attributes,
    clean_url_attributes,
    normalize_boolean_attributes,
    remove_comments,
    remove_default_attributes,
    remove_empty_attributes,
    remove_protocols,
    remove_tag_spaces,
    rewrite_tags,
    safe_remove_attribute_quotes,
    simplify_doctype,
)
from .transforms_spec import (
    CleanDataAttributes,
    CleanUrlAttributes,
    CollapseWhitespace,
    EditDocument,
    NormalizeBooleanAttributes,
    RemoveComments,
    RemoveDefaultAttributes,
    RemoveEmptyAttributes,
    RemoveProtocols,
    RemoveTagSpaces,
    SafeRemoveAttributeQuotes,
    SimplifyDoctype,
)
from .whitespace import collapse_whitespace, compile_preserve_pattern

if TYPE_CHECKING:
    from collections.abc import Callable

    from .optimizers import TagFunc
    from .transforms_spec import ReportCallback


Transform = (
    CollapseWhitespace
    | EditDocument
    | RemoveComments
    | RemoveEmptyAttributes
    | NormalizeBooleanAttributes
    | CleanUrlAttributes
    | CleanDataAttributes
    | RemoveTagSpaces
    | RemoveDefaultAttributes
    | SimplifyDoctype
    | RemoveProtocols
    | SafeRemoveAttributeQuotes
)


_TRANSFORM_CLASSES: tuple[type[object], ...] = (
    CollapseWhitespace,
    EditDocument,
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

_TEXT_OPTIMIZERS: dict[type[object], Callable[[str], str]] = {
    RemoveComments: remove_comments,
    SimplifyDoctype: simplify_doctype,
}

_TAG_OPTIMIZERS: dict[type[object], TagRewriter] = {
    RemoveEmptyAttributes: remove_empty_attributes,
    NormalizeBooleanAttributes: normalize_boolean_attributes,
    CleanUrlAttributes: clean_url_attributes,
    CleanDataAttributes: clean_data_attributes,
    RemoveTagSpaces: remove_tag_spaces,
    RemoveDefaultAttributes: remove_default_attributes,
    RemoveProtocols: remove_protocols,
    SafeRemoveAttributeQuotes: safe_remove_attribute_quotes,
}


# -----------------
# Compilation
# -----------------


@dataclass(frozen=True, slots=True)
class _CompiledTextTransform:
    kind: Literal["text"]
    name: str
    func: Callable[[str], str]
    report: ReportCallback | None


@dataclass(frozen=True, slots=True)
class _CompiledTagTransform:
    kind: Literal["tag"]
    name: str
    func: TagFunc
    report: ReportCallback | None


class _CompiledTagChain:
    """Adjacent per-tag optimizers run in one walk over the tags.

    N separate tag optimizers would scan the document N times; the chain scans
    it once and applies each function to each tag in order, which gives the
    same result because none of them changes where a tag starts or ends.
    """

    __slots__ = ("funcs", "kind", "names", "reports")

    kind: Literal["tag_chain"]
    names: list[str]
    funcs: list[TagFunc]
    reports: list[ReportCallback | None]

    def __init__(
        self,
        names: list[str],
        funcs: list[TagFunc],
        reports: list[ReportCallback | None],
    ) -> None:
        self.kind = "tag_chain"
        self.names = names
        self.funcs = funcs
        self.reports = reports


CompiledTransform = _CompiledTextTransform | _CompiledTagTransform | _CompiledTagChain


def compile_transforms(transforms: list[Transform] | tuple[Transform, ...]) -> list[CompiledTransform]:
    if not transforms:
        return []

    compiled: list[CompiledTransform] = []

    def _append_compiled(item: CompiledTransform) -> None:
        # Optimization: fuse adjacent per-tag transforms into a flat chain so
        # the document's tags are scanned once instead of once per transform.
        if compiled and isinstance(item, _CompiledTagTransform):
            prev = compiled[-1]
            # Extend existing chain
            if isinstance(prev, _CompiledTagChain):
                prev.names.append(item.name)
                prev.funcs.append(item.func)
                prev.reports.append(item.report)
                return
            # Start new chain from two single transforms
            if isinstance(prev, _CompiledTagTransform):
                compiled[-1] = _CompiledTagChain(
                    names=[prev.name, item.name],
                    funcs=[prev.func, item.func],
                    reports=[prev.report, item.report],
                )
                return

        compiled.append(item)

    for t in transforms:
        if not isinstance(t, _TRANSFORM_CLASSES):
            raise TypeError(f"Unsupported transform: {type(t).__name__}")
        if not t.enabled:
            continue

        if isinstance(t, CollapseWhitespace):
            _append_compiled(
                _CompiledTextTransform(
                    kind="text",
                    name="collapse_whitespace",
                    func=partial(collapse_whitespace, preserve_pattern=compile_preserve_pattern(t.preserve_tags)),
                    report=t.report,
                )
            )
            continue

        if isinstance(t, EditDocument):
            _append_compiled(_CompiledTextTransform(kind="text", name=t.name, func=t.func, report=t.report))
            continue

        text_func = _TEXT_OPTIMIZERS.get(type(t))
        if text_func is not None:
            _append_compiled(
                _CompiledTextTransform(kind="text", name=type(t).option, func=text_func, report=t.report)
            )
            continue

        rewriter = _TAG_OPTIMIZERS[type(t)]
        _append_compiled(_CompiledTagTransform(kind="tag", name=rewriter.name, func=rewriter.func, report=t.report))

    return compiled


# -----------------
# Application
# -----------------


def apply_compiled_transforms(text: str, compiled: list[CompiledTransform]) -> str:
    """Run compiled transforms over `text` in order and return the result.

    Exceptions raised by a transform propagate; isolating a failing document
    is the caller's job (see `optimizehtml.pipeline`).
    """

    for t in compiled:
        # Dispatch on 'kind' rather than isinstance; the list is tiny but
        # this runs once per document per transform.
        k: str = t.kind

        if k == "text":
            if TYPE_CHECKING:
                t = cast("_CompiledTextTransform", t)
            out = t.func(text)
            if out != text and t.report is not None:
                t.report(f"Applied {t.name}", transform=t.name)
            text = out
            continue

        if k == "tag":
            if TYPE_CHECKING:
                t = cast("_CompiledTagTransform", t)
            out = rewrite_tags(text, t.func)
            if out != text and t.report is not None:
                t.report(f"Applied {t.name}", transform=t.name)
            text = out
            continue

        if k == "tag_chain":
            if TYPE_CHECKING:
                t = cast("_CompiledTagChain", t)
            changed = [False] * len(t.funcs)
            text = rewrite_tags(text, *t.funcs, changed=changed)
            for name, report, did_change in zip(t.names, t.reports, changed):
                if did_change and report is not None:
                    report(f"Applied {name}", transform=name)
            continue

        raise TypeError(f"Unsupported compiled transform: {type(t).__name__}")

    return text


__all__ = [
    "CleanDataAttributes",
    "CleanUrlAttributes",
    "CollapseWhitespace",
    "CompiledTransform",
    "EditDocument",
    "NormalizeBooleanAttributes",
    "RemoveComments",
    "RemoveDefaultAttributes",
    "RemoveEmptyAttributes",
    "RemoveProtocols",
    "RemoveTagSpaces",
    "SafeRemoveAttributeQuotes",
    "SimplifyDoctype",
    "Transform",
    "apply_compiled_transforms",
    "compile_transforms",
]
