from __future__ import annotations
"""
bootstrap – synthesis of the AMD loading script.

The generated script asks the AMD loader for every external module, binds
each loaded object to a positional placeholder (``mod0``, ``mod1``...), and
hands an adoption table of ``{name, obj}`` pairs to the bundler's registry
as soon as its (renamed) ``define`` exists. Deferred application scripts are
then appended one by one, each after the previous one has loaded.

With no external module the loader is not called at all and the deferred
scripts start immediately.
"""

import json
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

from amdbridge.constants import REGISTRATION_NAME
from amdbridge.core.interfaces.templating import TemplateEngineProtocol
from amdbridge.core.models import RenameTable, ScriptRef
from amdbridge.logging.helpers import get_logger
from amdbridge.rendering.template_engine import ScriptTemplateEngine

BOOTSTRAP_TEMPLATE = """\
(function () {
  'use strict';

  var modules = [<%= names %>];
  var scripts = [<%= scripts %>];

  function adopt(adoptables) {
    var register = window.<%= register %>;
    if (typeof register !== 'function') {
      return false;
    }
    adoptables.forEach(function (adoptable) {
      register(adoptable.name, [], function () {
        return adoptable.obj;
      });
    });
    return true;
  }

  function start(adoptables) {
    var pending = adoptables.length > 0;

    function next(index) {
      if (pending && adopt(adoptables)) {
        pending = false;
      }
      if (index >= scripts.length) {
        return;
      }
      var entry = scripts[index];
      var script = document.createElement('script');
      if (entry.src) {
        script.src = entry.src;
        script.async = false;
        script.onload = function () {
          next(index + 1);
        };
        script.onerror = function () {
          console.error('Failed to load ' + entry.src);
        };
        document.body.appendChild(script);
      } else {
        script.text = entry.code;
        document.body.appendChild(script);
        next(index + 1);
      }
    }

    next(0);
  }

  if (modules.length === 0) {
    start([]);
  } else {
    require(modules, function (<%= objects %>) {
      start([<%= adoptables %>]);
    });
  }
}());
"""


def _js_json(value: object) -> str:
    """JSON text that is also safe inside an inline <script> element."""
    text = json.dumps(value, ensure_ascii=False, sort_keys=True)
    return text.replace('</', '<\\/').replace('\u2028', '\\u2028').replace('\u2029', '\\u2029')


@dataclass(frozen=True)
class BootstrapContext:
    """Template inputs; ``placeholders[i]`` receives the object loaded for ``modules[i]``."""
    modules: Tuple[str, ...]
    placeholders: Tuple[str, ...]
    adoptables: Tuple[Tuple[str, str], ...]
    scripts: Tuple[ScriptRef, ...]

    @classmethod
    def build(cls, modules: Iterable[str], scripts: Sequence[ScriptRef]) -> 'BootstrapContext':
        ordered = tuple(dict.fromkeys(modules))
        placeholders = tuple(f'mod{i}' for i in range(len(ordered)))
        return cls(
            modules=ordered,
            placeholders=placeholders,
            adoptables=tuple(zip(ordered, placeholders)),
            scripts=tuple(scripts),
        )

    def variables(self, *, register: str) -> Dict[str, str]:
        return {
            'names': ', '.join(_js_json(m) for m in self.modules),
            'objects': ', '.join(self.placeholders),
            'adoptables': ', '.join(f'{{name: {_js_json(name)}, obj: {obj}}}' for name, obj in self.adoptables),
            'scripts': ', '.join(_js_json(s.to_payload()) for s in self.scripts),
            'register': register,
        }


class BootstrapSynthesizer:
    def __init__(
        self,
        *,
        renames: Optional[RenameTable] = None,
        template: str = BOOTSTRAP_TEMPLATE,
        engine: Optional[TemplateEngineProtocol] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._renames = renames or RenameTable.default()
        self._template = template
        self._log = logger or get_logger('rendering.bootstrap')
        self._engine = engine or ScriptTemplateEngine(logger=self._log)

    def context(self, modules: Iterable[str], scripts: Sequence[ScriptRef]) -> BootstrapContext:
        return BootstrapContext.build(modules, scripts)

    def synthesize(self, modules: Iterable[str], scripts: Sequence[ScriptRef] = ()) -> str:
        """Return the loading script for *modules* followed by *scripts*."""
        ctx = self.context(modules, scripts)
        register = self._renames.identifiers.get(REGISTRATION_NAME, REGISTRATION_NAME)
        self._log.debug('bootstrap: %d external module(s), %d deferred script(s)', len(ctx.modules), len(ctx.scripts))
        return self._engine.render(self._template, ctx.variables(register=register))
