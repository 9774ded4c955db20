from __future__ import annotations
"""Position-stable text patching.

Edits are collected against the original byte offsets during a read-only
walk and applied in a single pass, sorted by offset, into a fresh buffer.
Offsets are never shifted because no edit is applied before all of them are
known.
"""

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True, order=True)
class Edit:
    start: int
    end: int
    text: str


class OverlappingEditError(ValueError):
    """Two different edits claim intersecting spans."""


def apply_edits(source: bytes, edits: Iterable[Edit]) -> bytes:
    """Return *source* with every edit applied.

    Identical duplicate edits are collapsed. Distinct edits whose spans
    intersect raise :class:`OverlappingEditError`.
    """
    ordered = sorted(set(edits))
    if not ordered:
        return source

    out: List[bytes] = []
    cursor = 0
    for edit in ordered:
        if edit.start < cursor:
            raise OverlappingEditError(
                f'edit {edit.start}-{edit.end} overlaps a previous edit ending at {cursor}'
            )
        if edit.end < edit.start or edit.end > len(source):
            raise ValueError(f'edit span {edit.start}-{edit.end} is outside the source')
        out.append(source[cursor:edit.start])
        out.append(edit.text.encode('utf-8'))
        cursor = edit.end
    out.append(source[cursor:])
    return b''.join(out)
