# amdbridge/parsing/parser.py
from __future__ import annotations

import argparse


def _build_parser() -> argparse.ArgumentParser:
    """
    Build the CLI argument parser.

    Notes:
        - Options mirror AmdOptions one to one; omitted flags keep the
          AmdOptions defaults.
        - The loader URL may come from AMDBRIDGE_LOADER instead of --loader.
    """
    p = argparse.ArgumentParser(
        prog="amdbridge",
        formatter_class=argparse.RawTextHelpFormatter,
        usage="%(prog)s DIST --loader URL (-p PKG [-p PKG …] | --no-track-modules) [OPTIONS]",
        description=(
            "amdbridge – make a bundler's output coexist with an AMD loader\n"
            "Renames the bundler's global require/define, collects the external "
            "AMD modules the bundle depends on and rewrites index.html and "
            "tests/index.html so that those modules load first."
        ),
    )

    g_in = p.add_argument_group("Input")
    g_amd = p.add_argument_group("AMD loading")
    g_out = p.add_argument_group("Output")
    g_misc = p.add_argument_group("Miscellaneous")

    # -----------------------
    # Input
    # -----------------------
    g_in.add_argument(
        "dist",
        metavar="DIST",
        help="Bundler output directory to rewrite in place.",
    )
    g_in.add_argument(
        "-e",
        "--exclude",
        metavar="PREFIX",
        dest="exclude_paths",
        action="append",
        default=[],
        help=(
            "Relative path prefix whose scripts are left untouched "
            "(e.g. assets/vendor-amd/). Repeatable."
        ),
    )

    # -----------------------
    # AMD loading
    # -----------------------
    g_amd.add_argument(
        "-l",
        "--loader",
        metavar="URL",
        dest="loader",
        help="URL of the AMD loader script (env: AMDBRIDGE_LOADER).",
    )
    g_amd.add_argument(
        "-p",
        "--package",
        metavar="PKG",
        dest="packages",
        action="append",
        default=[],
        help=(
            "External package name. A dependency equal to PKG or starting with "
            "'PKG/' is loaded through the AMD loader. Repeatable."
        ),
    )
    g_amd.add_argument(
        "--no-track-modules",
        dest="track_modules",
        action="store_false",
        help=(
            "Only rename require/define; do not collect external modules. "
            "The bootstrap then loads the bundle alone and -p is optional."
        ),
    )
    g_amd.add_argument(
        "--config-script",
        metavar="FILE",
        dest="config_script",
        help="Script that configures the AMD loader; injected before the loader.",
    )

    # -----------------------
    # Output
    # -----------------------
    g_out.add_argument(
        "-o",
        "--output",
        metavar="DIR",
        dest="output_directory",
        help="Write results here instead of rewriting DIST in place.",
    )
    g_out.add_argument(
        "--no-inline",
        dest="inline",
        action="store_false",
        help="Write the bootstrap to a file instead of inlining it in the page.",
    )
    g_out.add_argument(
        "--loading-path",
        metavar="DIR",
        dest="loading_path",
        default="assets",
        help="Directory (relative to the output) of generated scripts. Default: assets.",
    )
    g_out.add_argument(
        "--root-url",
        metavar="URL",
        dest="root_url",
        default="",
        help="Prefix of generated script URLs (the application's rootURL).",
    )

    # -----------------------
    # Miscellaneous
    # -----------------------
    g_misc.add_argument(
        "-j",
        "--workers",
        metavar="N",
        dest="workers",
        type=int,
        default=1,
        help="Transform scripts on N threads. Default: 1.",
    )
    g_misc.add_argument(
        "--json-logs",
        dest="json_logs",
        action="store_true",
        help="Emit logs as JSON lines (env: AMDBRIDGE_JSON_LOGS=1).",
    )
    g_misc.add_argument(
        "--report",
        dest="report",
        action="store_true",
        help="Print the build report as JSON on stdout.",
    )
    return p
