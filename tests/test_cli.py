from __future__ import annotations

import contextlib
import io
import json
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from amdbridge.cli import AmdBridge, main  # noqa: E402
from amdbridge.core.errors import BuildError, ConfigurationError  # noqa: E402
from amdbridge.parsing.parser import _build_parser  # noqa: E402
from amdbridge.runtime.runner import BuildRunner  # noqa: E402
from amdbridge.core.models import AmdOptions  # noqa: E402

LOADER = "https://js.arcgis.com/4.30/"


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


class _DistFixture(unittest.TestCase):
    def setUp(self) -> None:
        self.dist = Path(tempfile.mkdtemp(prefix="amdbridge-dist-"))
        _write(self.dist / "index.html",
               "<!DOCTYPE html><html><head></head><body>"
               "<script src=\"/assets/vendor.js\"></script>"
               "<script src=\"/assets/app.js\"></script></body></html>")
        _write(self.dist / "assets" / "vendor.js",
               "var define, require;\n(function () { define = function (n, d, f) {}; require = define; })();\n")
        _write(self.dist / "assets" / "app.js",
               "define('app/map', ['exports', 'esri/Map', 'esri/views/MapView'], function (e, M, V) {});\n")
        _write(self.dist / "assets" / "amd" / "skip.js", "define(['esri/ignored'], f);\n")

    def tearDown(self) -> None:
        shutil.rmtree(self.dist, ignore_errors=True)

    def _argv(self, *extra: str):
        return [str(self.dist), "--loader", LOADER, "-p", "esri", "-e", "assets/amd/", *extra]


class ParserTests(unittest.TestCase):
    def test_defaults(self):
        ns = _build_parser().parse_args(["dist", "-p", "esri", "-p", "dojo"])
        self.assertEqual(ns.packages, ["esri", "dojo"])
        self.assertTrue(ns.inline)
        self.assertEqual(ns.loading_path, "assets")
        self.assertEqual(ns.workers, 1)
        self.assertIsNone(ns.loader)

    def test_no_inline(self):
        self.assertFalse(_build_parser().parse_args(["dist", "--no-inline"]).inline)

    def test_module_tracking_can_be_disabled(self):
        self.assertTrue(_build_parser().parse_args(["dist"]).track_modules)
        self.assertFalse(_build_parser().parse_args(["dist", "--no-track-modules"]).track_modules)


class RunTests(_DistFixture):
    def test_full_build_in_place(self):
        report = AmdBridge.run(self._argv())
        self.assertEqual(report.modules, ["esri/Map", "esri/views/MapView"])
        self.assertEqual(report.pages_written, ["index.html"])

        app = (self.dist / "assets" / "app.js").read_text(encoding="utf-8")
        self.assertTrue(app.startswith("enifed('app/map'"))
        vendor = (self.dist / "assets" / "vendor.js").read_text(encoding="utf-8")
        self.assertIn("var enifed, eriuqer;", vendor)
        skipped = (self.dist / "assets" / "amd" / "skip.js").read_text(encoding="utf-8")
        self.assertEqual(skipped, "define(['esri/ignored'], f);\n")
        index = (self.dist / "index.html").read_text(encoding="utf-8")
        self.assertIn('data-amd="true"', index)
        self.assertIn(LOADER, index)

    def test_second_run_is_stable(self):
        AmdBridge.run(self._argv())
        app = (self.dist / "assets" / "app.js").read_text(encoding="utf-8")
        report = AmdBridge.run(self._argv())
        self.assertEqual((self.dist / "assets" / "app.js").read_text(encoding="utf-8"), app)
        self.assertEqual(report.files_rewritten, 0)
        self.assertEqual(report.modules, ["esri/Map", "esri/views/MapView"])

    def test_loader_from_environment(self):
        argv = [str(self.dist), "-p", "esri"]
        with patch.dict(os.environ, {"AMDBRIDGE_LOADER": LOADER}):
            report = AmdBridge.run(argv)
        self.assertIn("esri/Map", report.modules)

    def test_missing_loader_is_a_configuration_error(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("AMDBRIDGE_LOADER", None)
            with self.assertRaises(ConfigurationError):
                AmdBridge.run([str(self.dist), "-p", "esri"])
        self.assertFalse((self.dist / "assets" / "app.js").read_text(encoding="utf-8").startswith("enifed"))

    def test_untracked_build_needs_no_packages(self):
        report = AmdBridge.run([str(self.dist), "--loader", LOADER, "--no-track-modules"])
        self.assertEqual(report.modules, [])
        self.assertTrue((self.dist / "assets" / "app.js").read_text(encoding="utf-8").startswith("enifed("))
        index = (self.dist / "index.html").read_text(encoding="utf-8")
        self.assertIn("var modules = [];", index)

    def test_report_flag_prints_json(self):
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            AmdBridge.run(self._argv("--report"))
        data = json.loads(buf.getvalue())
        self.assertEqual(data["modules"], ["esri/Map", "esri/views/MapView"])
        self.assertEqual(data["files_excluded"], 1)

    def test_syntax_error_fails_build_and_leaves_pages(self):
        _write(self.dist / "assets" / "broken.js", "function (\n")
        with self.assertRaises(BuildError) as ctx:
            AmdBridge.run(self._argv())
        self.assertEqual([f.path for f in ctx.exception.failures], ["assets/broken.js"])
        self.assertNotIn("data-amd", (self.dist / "index.html").read_text(encoding="utf-8"))
        self.assertEqual((self.dist / "assets" / "broken.js").read_text(encoding="utf-8"), "function (\n")


class MainTests(_DistFixture):
    def test_exit_codes(self):
        with self.assertRaises(SystemExit) as ok:
            main(self._argv())
        self.assertEqual(ok.exception.code, 0)

        with self.assertRaises(SystemExit) as bad:
            main([str(self.dist / "missing"), "--loader", LOADER, "-p", "esri"])
        self.assertEqual(bad.exception.code, 1)

    def test_interrupt(self):
        with patch.object(AmdBridge, "run", side_effect=KeyboardInterrupt):
            with self.assertRaises(SystemExit) as ctx:
                main(self._argv())
        self.assertEqual(ctx.exception.code, 130)


class RunnerTests(_DistFixture):
    def test_partial_rebuild_drops_stale_module(self):
        runner = BuildRunner(AmdOptions(loader=LOADER, packages=("esri",), exclude_paths=("assets/amd/",)))
        runner.build(self.dist)
        _write(self.dist / "assets" / "app.js", "define('app/map', ['esri/Map'], function (M) {});\n")
        report = runner.build(self.dist, changed=["assets/app.js"])
        self.assertEqual(report.modules, ["esri/Map"])
        self.assertEqual(report.pages_written, ["index.html"])

    def test_removed_file(self):
        runner = BuildRunner(AmdOptions(loader=LOADER, packages=("esri",), exclude_paths=("assets/amd/",)))
        runner.build(self.dist)
        (self.dist / "assets" / "app.js").unlink()
        report = runner.build(self.dist, changed=[], removed=["assets/app.js"])
        self.assertEqual(report.modules, [])

    def test_full_rebuild_drops_deleted_file(self):
        runner = BuildRunner(AmdOptions(loader=LOADER, packages=("esri",), exclude_paths=("assets/amd/",)))
        _write(self.dist / "assets" / "extra.js", "define('extra', ['esri/Graphic'], f);\n")
        self.assertIn("esri/Graphic", runner.build(self.dist).modules)
        (self.dist / "assets" / "extra.js").unlink()
        report = runner.build(self.dist)
        self.assertEqual(report.modules, ["esri/Map", "esri/views/MapView"])
        self.assertEqual(report.files_removed, 1)

    def test_undecodable_script_fails_the_pass(self):
        runner = BuildRunner(AmdOptions(loader=LOADER, packages=("esri",), exclude_paths=("assets/amd/",)))
        runner.build(self.dist)
        pages = (self.dist / "index.html").read_text(encoding="utf-8")
        (self.dist / "assets" / "app.js").write_bytes(b"var s = '\xff';")
        with self.assertRaises(BuildError):
            runner.build(self.dist, changed=["assets/app.js"])
        self.assertEqual(runner.last_report.files_failed, 1)
        self.assertEqual(runner.last_report.modules, [])
        self.assertEqual((self.dist / "index.html").read_text(encoding="utf-8"), pages)

    def test_separate_output_second_pass_keeps_pages(self):
        out = Path(tempfile.mkdtemp(prefix="amdbridge-out-"))
        self.addCleanup(shutil.rmtree, out, True)
        runner = BuildRunner(AmdOptions(loader=LOADER, packages=("esri",), output_directory=out))
        self.assertEqual(runner.build(self.dist).pages_written, ["index.html"])
        self.assertEqual(runner.build(self.dist).pages_written, [])

    def test_separate_output_directory(self):
        out = Path(tempfile.mkdtemp(prefix="amdbridge-out-"))
        self.addCleanup(shutil.rmtree, out, True)
        runner = BuildRunner(AmdOptions(loader=LOADER, packages=("esri",), output_directory=out, inline=False))
        runner.build(self.dist)
        self.assertTrue((out / "assets" / "app.js").read_text(encoding="utf-8").startswith("enifed("))
        self.assertTrue((out / "assets" / "amd-loading.js").is_file())
        self.assertTrue((out / "index.html").is_file())
        self.assertFalse((self.dist / "assets" / "app.js").read_text(encoding="utf-8").startswith("enifed("))


if __name__ == "__main__":
    unittest.main()
