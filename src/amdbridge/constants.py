from __future__ import annotations

"""Project-wide constants used across modules.

This module isolates public constants to reduce cross-module coupling.
"""

# Reserved globals claimed by both the bundler registry and the AMD loader.
DEFAULT_IDENTIFIER_RENAMES: dict[str, str] = {
    'require': 'eriuqer',
    'define': 'enifed',
}

# Name of the module-registration function whose dependency lists are scanned.
REGISTRATION_NAME: str = 'define'
EVAL_NAME: str = 'eval'

SCRIPT_SUFFIXES: tuple[str, ...] = ('.js',)

# HTML integration
AMD_MARKER_ATTR: str = 'data-amd'
APP_INDEX: str = 'index.html'
TEST_INDEX: str = 'tests/index.html'
DEFAULT_LOADING_PATH: str = 'assets'
LOADING_SCRIPT_NAMES: dict[str, str] = {
    APP_INDEX: 'amd-loading.js',
    TEST_INDEX: 'amd-loading-tests.js',
}
CONFIG_SCRIPT_NAME: str = 'amd-config.js'
