from __future__ import annotations
from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class TemplateEngineProtocol(Protocol):
    """Renders generated-script templates; every variable value is already JavaScript text."""

    def render(self, template: str, variables: Mapping[str, str]) -> str:
        ...
