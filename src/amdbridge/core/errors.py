from __future__ import annotations

"""Exception taxonomy shared by the rewriting engine and its build plumbing."""

from typing import Optional, Sequence


class AmdBridgeError(Exception):
    """Base class for every error raised by amdbridge."""


class ConfigurationError(AmdBridgeError, ValueError):
    """Raised before any file is processed when the options cannot produce a working bootstrap."""


class TransformError(AmdBridgeError):
    """A single file could not be transformed; siblings are unaffected."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def with_path(self, path: str) -> 'TransformError':
        if self.path is None:
            self.path = path
        return self

    def __str__(self) -> str:
        if self.path:
            return f'{self.path}: {self.message}'
        return self.message


class ParseError(TransformError):
    """The input is not syntactically valid JavaScript."""

    def __init__(self, message: str, *, path: Optional[str] = None,
                 line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message, path=path)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        where = self.path or '<source>'
        if self.line is not None:
            where = f'{where}:{self.line}:{self.column}'
        return f'{where}: {self.message}'


class RenameCollisionError(TransformError):
    """A synonym is already bound locally where a free reference would be renamed to it."""


class SourceEncodingError(TransformError):
    """A script on disk is not valid UTF-8 and was not rewritten."""


class MissingArtifact(AmdBridgeError, FileNotFoundError):
    """An expected build artifact (e.g. tests/index.html) is absent."""


class BuildError(AmdBridgeError):
    """A build pass finished with one or more per-file failures."""

    def __init__(self, failures: Sequence[TransformError]) -> None:
        self.failures = list(failures)
        paths = ', '.join(sorted({f.path or '<unknown>' for f in self.failures}))
        super().__init__(f'{len(self.failures)} file(s) failed to transform: {paths}')
