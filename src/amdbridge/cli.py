from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence

from amdbridge.core.errors import AmdBridgeError, ConfigurationError
from amdbridge.core.models import AmdOptions
from amdbridge.core.report import BuildReport
from amdbridge.logging.factory import DefaultLoggerFactory
from amdbridge.logging.helpers import get_logger
from amdbridge.parsing.parser import _build_parser
from amdbridge.runtime.runner import BuildRunner


logger = get_logger('amdbridge')


def _configure_logging(enable_json: bool) -> None:
    """Configure process-wide logging once, either JSON or plain text."""
    prev = getattr(_configure_logging, '_configured_mode', None)
    if prev is not None and prev == bool(enable_json):
        return
    factory = DefaultLoggerFactory(json_logs=enable_json)
    lg = factory.get_logger('amdbridge')
    global logger
    logger = lg
    setattr(_configure_logging, '_configured_mode', bool(enable_json))


def options_from_namespace(ns: argparse.Namespace) -> AmdOptions:
    """Map parsed CLI flags onto AmdOptions (AMDBRIDGE_LOADER fills a missing --loader)."""
    return AmdOptions.from_mapping({
        'loader': ns.loader or os.getenv('AMDBRIDGE_LOADER', ''),
        'packages': ns.packages,
        'exclude_paths': ns.exclude_paths,
        'inline': ns.inline,
        'output_directory': ns.output_directory,
        'loading_path': ns.loading_path,
        'root_url': ns.root_url,
        'config_script': ns.config_script,
        'track_modules': ns.track_modules,
    })


class AmdBridge:
    """Top-level façade for command-style execution."""

    @staticmethod
    def run(argv: Sequence[str]) -> BuildReport:
        """Run one full build for an argv-like sequence and return its report.

        Raises:
            ConfigurationError: invalid options; nothing was read or written.
            BuildError: one or more scripts failed to transform.
        """
        json_logs = '--json-logs' in argv or os.getenv('AMDBRIDGE_JSON_LOGS') == '1'
        _configure_logging(json_logs)

        ns = _build_parser().parse_args(list(argv))
        options = options_from_namespace(ns)
        root = Path(ns.dist)
        if not root.is_dir():
            raise ConfigurationError(f'{root} is not a directory')

        runner = BuildRunner(options, max_workers=ns.workers)
        try:
            report = runner.build(root)
        finally:
            if ns.report and runner.last_report is not None:
                sys.stdout.write(runner.last_report.to_json() + '\n')
        return report


def main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Entry point for `amdbridge` and `python -m amdbridge`."""
    try:
        AmdBridge.run(sys.argv[1:] if argv is None else argv)
        raise SystemExit(0)
    except KeyboardInterrupt:
        logger.error('Interrupted by user.')
        raise SystemExit(130)
    except BrokenPipeError:
        raise SystemExit(0)
    except AmdBridgeError as exc:
        logger.error('✘ %s', exc)
        raise SystemExit(1)
    except Exception as exc:
        if os.getenv('DEBUG') == '1':
            raise
        logger.error('Unexpected error: %s', exc)
        raise SystemExit(1)


if __name__ == '__main__':
    main()
