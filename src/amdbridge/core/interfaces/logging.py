from __future__ import annotations
"""Logging seams: anything with the stdlib level methods, and the factory the CLI configures."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LoggerLikeProtocol(Protocol):
    """A ``logging.Logger`` or ``logging.LoggerAdapter`` (e.g. the per-file adapter)."""

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...


@runtime_checkable
class LoggerFactoryProtocol(Protocol):
    """Configures the 'amdbridge' handler once and returns loggers below it."""

    def configure(self) -> LoggerLikeProtocol:
        ...

    def get_logger(self, name: str) -> LoggerLikeProtocol:
        ...
