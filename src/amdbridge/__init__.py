from __future__ import annotations

import logging
from typing import Optional, Sequence

from amdbridge.cli import AmdBridge
from amdbridge.core.errors import (
    AmdBridgeError,
    BuildError,
    ConfigurationError,
    MissingArtifact,
    ParseError,
    RenameCollisionError,
    SourceEncodingError,
    TransformError,
)
from amdbridge.core.models import AmdOptions, ModuleSet, RenameTable, ScriptRef
from amdbridge.core.report import BuildReport
from amdbridge.logging.helpers import get_logger
from amdbridge.processing.module_cache import ExternalModuleCache
from amdbridge.processing.rewriter import IdentifierRewriter
from amdbridge.rendering.bootstrap import BootstrapSynthesizer
from amdbridge.rendering.html_writer import IndexHtmlWriter
from amdbridge.runtime.runner import BuildRunner
from amdbridge.runtime.session import BuildSession, PassResult

__version__ = '0.3.0'


def rewriter_factory(
    *,
    packages: Sequence[str] = (),
    renames: Optional[RenameTable] = None,
    rewrite_computed_members: bool = False,
    logger: Optional[logging.Logger] = None,
) -> IdentifierRewriter:
    """Factory helper that returns a ready-to-use IdentifierRewriter.

    Falls back to the default require/define rename table when none is given.
    """
    lg = logger or get_logger('processing.rewriter')
    return IdentifierRewriter(
        renames=renames or RenameTable.default(),
        packages=packages,
        rewrite_computed_members=rewrite_computed_members,
        logger=lg,
    )


def session_factory(options: AmdOptions | dict, *, max_workers: int = 1) -> BuildSession:
    """Factory helper accepting either AmdOptions or a raw option mapping."""
    if not isinstance(options, AmdOptions):
        options = AmdOptions.from_mapping(options)
    return BuildSession(options, max_workers=max_workers)


__all__ = [
    'AmdBridge',
    'AmdOptions',
    'BuildRunner',
    'BuildSession',
    'PassResult',
    'BuildReport',
    'ModuleSet',
    'RenameTable',
    'ScriptRef',
    'IdentifierRewriter',
    'ExternalModuleCache',
    'BootstrapSynthesizer',
    'IndexHtmlWriter',
    'rewriter_factory',
    'session_factory',
    # errors
    'AmdBridgeError',
    'BuildError',
    'ConfigurationError',
    'MissingArtifact',
    'ParseError',
    'RenameCollisionError',
    'SourceEncodingError',
    'TransformError',
    '__version__',
]
