from __future__ import annotations

"""Public surface for amdbridge.core.

Stable import location for the configuration/value types, the error
taxonomy and the build report:

    from amdbridge.core import AmdOptions, ParseError, BuildReport
"""

from amdbridge.core.errors import (
    AmdBridgeError,
    BuildError,
    ConfigurationError,
    MissingArtifact,
    ParseError,
    RenameCollisionError,
    TransformError,
)
from amdbridge.core.models import AmdOptions, ModuleSet, RenameTable, ScriptRef
from amdbridge.core.report import BuildReport, StageTimer

__all__ = [
    # Errors
    "AmdBridgeError",
    "BuildError",
    "ConfigurationError",
    "MissingArtifact",
    "ParseError",
    "RenameCollisionError",
    "TransformError",
    # Models
    "AmdOptions",
    "ModuleSet",
    "RenameTable",
    "ScriptRef",
    # Reporting
    "BuildReport",
    "StageTimer",
]
