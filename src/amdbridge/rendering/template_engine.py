"""
template_engine – TemplateEngineProtocol implementation for generated scripts.

Renders ``<%= name %>`` markers through :class:`MarkerInterpolator`. A marker
without a value renders empty and is logged, so a broken template shows up in
the build log rather than as a silent no-op at runtime.
"""

import logging
from typing import Mapping, Optional

from amdbridge.core.interfaces.templating import TemplateEngineProtocol
from amdbridge.processing.string_interpolator import MarkerInterpolator


class ScriptTemplateEngine(TemplateEngineProtocol):
    def __init__(
        self,
        *,
        interpolator: Optional[MarkerInterpolator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._interp = interpolator or MarkerInterpolator()
        self._log = logger or logging.getLogger("amdbridge.templates")

    def render(self, template: str, variables: Mapping[str, str]) -> str:  # type: ignore[override]
        """Render *template* replacing markers via *variables*."""
        text, missing = self._interp.interpolate(template, dict(variables))
        for name in missing:
            self._log.warning("⚠  template variable %r has no value", name)
        return text
