from __future__ import annotations

import io
import json
import logging
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

from amdbridge.core.interfaces import LoggerFactoryProtocol, LoggerLikeProtocol  # noqa: E402
from amdbridge.io.walker import OutputTreeWalker  # noqa: E402
from amdbridge.io.writer import OutputWriter  # noqa: E402
from amdbridge.logging.factory import DefaultLoggerFactory  # noqa: E402
from amdbridge.logging.helpers import JsonLogFormatter, for_file, get_logger, trace_io  # noqa: E402
from amdbridge.utils.paths import matches_prefix, normalize_path  # noqa: E402


class LoggingTests(unittest.TestCase):
    def test_namespacing(self):
        self.assertEqual(get_logger("processing.rewriter").name, "amdbridge.processing.rewriter")
        self.assertEqual(get_logger("amdbridge.cli").name, "amdbridge.cli")
        self.assertEqual(get_logger().name, "amdbridge")

    def test_factory_satisfies_protocols(self):
        factory = DefaultLoggerFactory(stream=io.StringIO())
        self.assertIsInstance(factory, LoggerFactoryProtocol)
        self.assertIsInstance(factory.get_logger("x"), LoggerLikeProtocol)

    def test_json_formatter_schema(self):
        record = logging.LogRecord("amdbridge.t", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.context = {"path": "a.js"}
        payload = json.loads(JsonLogFormatter().format(record))
        self.assertEqual(payload["msg"], "hello world")
        self.assertEqual(payload["level"], "INFO")
        self.assertEqual(payload["module"], "amdbridge.t")
        self.assertEqual(payload["ctx"], {"path": "a.js"})
        self.assertTrue(payload["ts"].endswith("Z"))

    def test_file_adapter_adds_path(self):
        lg = logging.getLogger("amdbridge.test.files")
        with self.assertLogs(lg, level="INFO") as cm:
            for_file(lg, "assets/app.js").info("rewritten")
        self.assertEqual(cm.records[0].getMessage(), "assets/app.js: rewritten")
        self.assertEqual(cm.records[0].context, {"path": "assets/app.js"})

    def test_trace_io_is_gated(self):
        lg = logging.getLogger("amdbridge.test.trace")
        lg.setLevel(logging.DEBUG)
        with patch.dict(os.environ, {"AMDBRIDGE_TRACE_IO": "1"}):
            with self.assertLogs(lg, level="DEBUG") as cm:
                trace_io(lg, "read script", path="a.js")
        self.assertIn("read script", cm.output[0])
        seen = []
        handler = logging.Handler()
        handler.emit = seen.append
        lg.addHandler(handler)
        try:
            with patch.dict(os.environ, {"AMDBRIDGE_TRACE_IO": "0"}):
                trace_io(lg, "silent")
        finally:
            lg.removeHandler(handler)
        self.assertEqual(seen, [])


class PathTests(unittest.TestCase):
    def test_normalize_and_prefix(self):
        self.assertEqual(normalize_path(".\\assets\\app.js"), "assets/app.js")
        self.assertEqual(normalize_path("/assets/app.js"), "assets/app.js")
        self.assertTrue(matches_prefix("assets/amd/x.js", ["./assets/amd/"]))
        self.assertFalse(matches_prefix("assets/app.js", ["assets/amd/", ""]))


class IoTests(unittest.TestCase):
    def setUp(self) -> None:
        self.root = Path(tempfile.mkdtemp(prefix="amdbridge-io-"))

    def tearDown(self) -> None:
        shutil.rmtree(self.root, ignore_errors=True)

    def test_walker_lists_scripts_sorted_and_skips_hidden(self):
        for rel in ("b.js", "a/c.js", "a/readme.md", ".cache/x.js", "a/.hidden.js", "z.JS"):
            p = self.root / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text("var x;", encoding="utf-8")
        files = OutputTreeWalker().gather_files(self.root)
        self.assertEqual(list(files), ["a/c.js", "b.js", "z.JS"])

    def test_snapshot_subset(self):
        (self.root / "a.js").write_text("1;", encoding="utf-8")
        (self.root / "b.js").write_text("2;", encoding="utf-8")
        self.assertEqual(OutputTreeWalker().read_snapshot(self.root, ["b.js", "gone.js"]), {"b.js": "2;"})

    def test_snapshot_lists_undecodable_scripts(self):
        (self.root / "a.js").write_bytes(b"var s = '\xff';")
        (self.root / "b.js").write_text("2;", encoding="utf-8")
        snapshot = OutputTreeWalker().read_snapshot(self.root)
        self.assertEqual(snapshot, {"b.js": "2;"})
        self.assertEqual(list(snapshot.unreadable), ["a.js"])
        self.assertIn("UTF-8", snapshot.unreadable["a.js"])

    def test_writer_replaces_atomically(self):
        target = self.root / "deep" / "out.js"
        OutputWriter().write_text(target, "first")
        OutputWriter().write_text(target, "second\r\n")
        self.assertEqual(target.read_bytes(), b"second\r\n")
        self.assertEqual(sorted(p.name for p in target.parent.iterdir()), ["out.js"])


if __name__ == "__main__":
    unittest.main()
