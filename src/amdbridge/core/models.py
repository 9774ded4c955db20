from __future__ import annotations

import re
from collections.abc import MutableSet
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from amdbridge.constants import DEFAULT_IDENTIFIER_RENAMES, DEFAULT_LOADING_PATH, REGISTRATION_NAME
from amdbridge.core.errors import ConfigurationError

_IDENT_RX = re.compile(r'[A-Za-z_$][\w$]*')


class ModuleSet(MutableSet):
    """Set of external module specifiers that remembers insertion order."""

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items: Dict[str, None] = {}
        for item in items:
            self.add(item)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: str) -> None:
        self._items.setdefault(item, None)

    def discard(self, item: str) -> None:
        self._items.pop(item, None)

    def __repr__(self) -> str:
        return f'ModuleSet({list(self._items)!r})'


@dataclass(frozen=True)
class RenameTable:
    """Fixed mapping from reserved globals to their non-conflicting synonyms.

    ``literals`` covers string data that spells a reserved name, either bare
    (``'require'``) or parenthesized (``'(require)'``).
    """
    identifiers: Mapping[str, str]
    literals: Mapping[str, str]

    @classmethod
    def from_identifiers(cls, identifiers: Mapping[str, str]) -> 'RenameTable':
        literals: Dict[str, str] = {}
        for name, synonym in identifiers.items():
            literals[name] = synonym
            literals[f'({name})'] = f'({synonym})'
        return cls(identifiers=dict(identifiers), literals=literals)

    @classmethod
    def default(cls) -> 'RenameTable':
        return cls.from_identifiers(DEFAULT_IDENTIFIER_RENAMES)

    @property
    def synonyms(self) -> Tuple[str, ...]:
        return tuple(self.identifiers.values())

    def synonym(self, name: str) -> str:
        return self.identifiers[name]

    def registration_names(self) -> Tuple[str, ...]:
        """Callee names that denote the registry's module-registration function."""
        synonym = self.identifiers.get(REGISTRATION_NAME)
        return (REGISTRATION_NAME, synonym) if synonym else (REGISTRATION_NAME,)

    def validate(self) -> None:
        seen: Dict[str, str] = {}
        for name, synonym in self.identifiers.items():
            if not _IDENT_RX.fullmatch(synonym):
                raise ConfigurationError(f'synonym {synonym!r} for {name!r} is not a valid identifier')
            if synonym in self.identifiers:
                raise ConfigurationError(f'synonym {synonym!r} is itself a reserved name')
            if synonym in seen:
                raise ConfigurationError(f'{name!r} and {seen[synonym]!r} share the synonym {synonym!r}')
            seen[synonym] = name


@dataclass(frozen=True)
class ScriptRef:
    """A deferred application script: either an URL (``src``) or inline ``code``."""
    src: Optional[str] = None
    code: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.src is None) == (self.code is None):
            raise ValueError('ScriptRef needs exactly one of src or code')

    def to_payload(self) -> Dict[str, str]:
        return {'src': self.src} if self.src is not None else {'code': self.code or ''}


_OPTION_ALIASES = {
    'loaderURL': 'loader',
    'loaderUrl': 'loader',
    'externalPackageNames': 'packages',
    'excludedPathPrefixes': 'exclude_paths',
    'excludePaths': 'exclude_paths',
    'outputDirectory': 'output_directory',
    'loadingFilePath': 'loading_path',
    'rootURL': 'root_url',
    'configPath': 'config_script',
}


@dataclass(frozen=True)
class AmdOptions:
    """Build configuration for one amdbridge run."""
    loader: str = ''
    packages: Tuple[str, ...] = ()
    exclude_paths: Tuple[str, ...] = ()
    inline: bool = True
    output_directory: Optional[Path] = None
    loading_path: str = DEFAULT_LOADING_PATH
    root_url: str = ''
    config_script: Optional[Path] = None
    track_modules: bool = True
    renames: RenameTable = field(default_factory=RenameTable.default)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> 'AmdOptions':
        """Merge user options over the defaults.

        Accepts both snake_case keys and the camelCase names used by build-tool
        configuration files (``loaderURL``, ``externalPackageNames``...).
        """
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            values[_OPTION_ALIASES.get(key, key)] = value
        unknown = set(values) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f'unknown option(s): {", ".join(sorted(unknown))}')

        for key in ('packages', 'exclude_paths'):
            if key in values:
                value = values[key]
                values[key] = (value,) if isinstance(value, str) else tuple(value or ())
        for key in ('output_directory', 'config_script'):
            if values.get(key) is not None:
                values[key] = Path(values[key])
        if isinstance(values.get('renames'), Mapping):
            values['renames'] = RenameTable.from_identifiers(values['renames'])
        if 'loading_path' in values:
            values['loading_path'] = str(values['loading_path'] or DEFAULT_LOADING_PATH).strip('/')
        return cls(**values)

    def validate(self) -> 'AmdOptions':
        if not (self.loader or '').strip():
            raise ConfigurationError('a loader URL is required (e.g. --loader https://js.arcgis.com/4.30/)')
        if self.track_modules and not self.packages:
            raise ConfigurationError('at least one external package name is required to track AMD modules')
        if any(not p for p in self.packages):
            raise ConfigurationError('external package names must be non-empty')
        if self.config_script is not None and not Path(self.config_script).is_file():
            raise ConfigurationError(f'config script {self.config_script} does not exist')
        self.renames.validate()
        return self
