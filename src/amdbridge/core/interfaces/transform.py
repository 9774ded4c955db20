from __future__ import annotations
"""Per-file transform protocols."""

from typing import MutableSet, Optional, Protocol, runtime_checkable


@runtime_checkable
class FileTransformProtocol(Protocol):
    """A composable build step over one output file.

    ``transform`` returns the new content, or None when the file is not handled
    by this step (excluded path, non-script file).
    """

    def transform(self, path: str, content: str) -> Optional[str]:
        ...


@runtime_checkable
class SourceRewriterProtocol(Protocol):
    """Rewrites reserved globals in a single source and reports external modules."""

    def rewrite(self, code: str, modules: Optional[MutableSet[str]] = None, *, path: Optional[str] = None) -> str:
        ...
