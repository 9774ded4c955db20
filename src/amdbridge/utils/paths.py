# src/amdbridge/utils/paths.py
"""
paths – Small, centralized path helpers for amdbridge.

Provides:
  • is_hidden_path(Path)             – dot-segment detection
  • to_posix_relpath(path, root)     – stable '/'-separated relative path
  • normalize_prefix(str)            – canonical form of an exclusion prefix
  • matches_prefix(path, prefixes)   – exclusion test used by the session
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable


def is_hidden_path(p: Path) -> bool:
    """Return True if *p* has any hidden segment (leading-dot component)."""
    return any(part.startswith(".") and part not in (".", "..") for part in p.parts)


def to_posix_relpath(path: Path, root: Path) -> str:
    """Return *path* relative to *root* with forward slashes."""
    return Path(os.path.relpath(path, root)).as_posix()


def normalize_path(path: str) -> str:
    """Canonical '/'-separated relative form of an output path."""
    text = path.replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    return text.lstrip("/")


def normalize_prefix(prefix: str) -> str:
    return normalize_path(prefix)


def matches_prefix(path: str, prefixes: Iterable[str]) -> bool:
    """Return True if *path* starts with any of *prefixes* (plain string prefix match)."""
    rel = normalize_path(path)
    return any(rel.startswith(normalize_prefix(p)) for p in prefixes if p)
