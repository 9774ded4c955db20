"""Public API surface for amdbridge.processing."""
__all__ = [
    "dependencies",
    "edits",
    "module_cache",
    "nested_eval",
    "rewriter",
    "string_interpolator",
]
