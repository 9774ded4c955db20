"""
string_interpolator – Minimal ``<%= name %>`` template interpolation.

JavaScript templates are full of braces, so placeholders use lodash-style
markers instead:

  • <%= name %>  → replaced by mapping["name"]
  • <%%          → rendered as a literal "<%"

Whitespace inside a marker is ignored. Unknown names are reported back to the
caller instead of being silently dropped.
"""

import re
from typing import Dict, List, Tuple

_OPEN = "<%="
_CLOSE = "%>"


class MarkerInterpolator:
    """Streaming interpolator for ``<%= name %>`` markers."""

    _IDENT_RX = re.compile(r"[A-Za-z_]\w*")

    def interpolate(self, tpl: str, mapping: Dict[str, str]) -> Tuple[str, List[str]]:
        """Interpolate *tpl* using *mapping*.

        Returns
        -------
        tuple
            The rendered text and the list of marker names missing from
            *mapping* (rendered as empty strings), in order of appearance.
        """
        out: list[str] = []
        missing: list[str] = []
        i = 0
        n = len(tpl)

        while i < n:
            if tpl.startswith("<%%", i):
                out.append("<%")
                i += 3
                continue
            if tpl.startswith(_OPEN, i):
                j = tpl.find(_CLOSE, i + len(_OPEN))
                if j != -1:
                    var = tpl[i + len(_OPEN):j].strip()
                    if self._IDENT_RX.fullmatch(var):
                        if var in mapping:
                            out.append(mapping[var])
                        else:
                            missing.append(var)
                        i = j + len(_CLOSE)
                        continue
            out.append(tpl[i])
            i += 1

        return "".join(out), missing
