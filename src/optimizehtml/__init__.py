from .errors import DocumentError, OptimizeHtmlError, OptionsError, PlaceholderLeakError
from .options import OptimizeOptions, validate_options
from .pipeline import BuildReport, HtmlOptimizer, optimize_html, process_content
from .transforms import (
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
    apply_compiled_transforms,
    compile_transforms,
)
from .whitespace import collapse_whitespace

__all__ = [
    "BuildReport",
    "CleanDataAttributes",
    "CleanUrlAttributes",
    "CollapseWhitespace",
    "DocumentError",
    "EditDocument",
    "HtmlOptimizer",
    "NormalizeBooleanAttributes",
    "OptimizeHtmlError",
    "OptimizeOptions",
    "OptionsError",
    "PlaceholderLeakError",
    "RemoveComments",
    "RemoveDefaultAttributes",
    "RemoveEmptyAttributes",
    "RemoveProtocols",
    "RemoveTagSpaces",
    "SafeRemoveAttributeQuotes",
    "SimplifyDoctype",
    "apply_compiled_transforms",
    "collapse_whitespace",
    "compile_transforms",
    "optimize_html",
    "process_content",
    "validate_options",
]
