from __future__ import annotations

import sys
import unittest
from pathlib import Path

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from amdbridge.core.models import ModuleSet  # noqa: E402
from amdbridge.processing.module_cache import ExternalModuleCache  # noqa: E402


class ExternalModuleCacheTests(unittest.TestCase):
    def test_union_follows_reprocessing(self):
        cache = ExternalModuleCache()
        cache.record("a.js", ["s1"])
        cache.record("b.js", ["s2"])
        self.assertEqual(set(cache.union()), {"s1", "s2"})

        cache.record("a.js", [])
        self.assertEqual(list(cache.union()), ["s2"])
        self.assertNotIn("a.js", cache)

    def test_record_replaces_wholesale(self):
        cache = ExternalModuleCache()
        cache.record("a.js", ["s1", "s2"])
        cache.record("a.js", ["s3"])
        self.assertEqual(cache.modules_for("a.js"), ("s3",))

    def test_union_order_is_path_then_discovery_order(self):
        cache = ExternalModuleCache()
        cache.record("vendor.js", ["esri/Map", "esri/views/MapView"])
        cache.record("app.js", ["esri/views/MapView", "esri/config"])
        self.assertEqual(list(cache.union()), ["esri/views/MapView", "esri/config", "esri/Map"])

    def test_forget_and_clear(self):
        cache = ExternalModuleCache()
        cache.record("a.js", ["s1"])
        self.assertTrue(cache.forget("a.js"))
        self.assertFalse(cache.forget("a.js"))
        cache.record("b.js", ModuleSet(["s2"]))
        cache.clear()
        self.assertEqual(len(cache), 0)
        self.assertEqual(len(cache.union()), 0)

    def test_duplicates_within_a_record_collapse(self):
        cache = ExternalModuleCache()
        cache.record("a.js", ["s1", "s1", "s2"])
        self.assertEqual(cache.modules_for("a.js"), ("s1", "s2"))
        self.assertEqual(cache.paths(), ("a.js",))


if __name__ == "__main__":
    unittest.main()
