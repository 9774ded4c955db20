from __future__ import annotations

import sys
import unittest
from pathlib import Path

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from amdbridge.processing.edits import Edit, OverlappingEditError, apply_edits  # noqa: E402


class ApplyEditsTests(unittest.TestCase):
    def test_no_edits_returns_source(self):
        self.assertEqual(apply_edits(b"define();", []), b"define();")

    def test_longer_and_shorter_replacements_do_not_shift_later_spans(self):
        src = b"define(require('x'), a);"
        edits = [Edit(0, 6, "enifed"), Edit(7, 14, "r"), Edit(21, 22, "longer_name")]
        self.assertEqual(apply_edits(src, edits), b"enifed(r('x'), longer_name);")

    def test_order_of_collection_is_irrelevant(self):
        src = b"aa bb cc"
        edits = [Edit(6, 8, "C"), Edit(0, 2, "A"), Edit(3, 5, "B")]
        self.assertEqual(apply_edits(src, edits), b"A B C")

    def test_identical_duplicates_collapse(self):
        self.assertEqual(apply_edits(b"abc", [Edit(0, 1, "x"), Edit(0, 1, "x")]), b"xbc")

    def test_overlap_raises(self):
        with self.assertRaises(OverlappingEditError):
            apply_edits(b"abcdef", [Edit(0, 3, "x"), Edit(2, 4, "y")])

    def test_out_of_range_raises(self):
        with self.assertRaises(ValueError):
            apply_edits(b"abc", [Edit(2, 9, "x")])

    def test_multibyte_text_uses_byte_offsets(self):
        src = "é = define;".encode("utf-8")
        self.assertEqual(apply_edits(src, [Edit(5, 11, "enifed")]).decode("utf-8"), "é = enifed;")


if __name__ == "__main__":
    unittest.main()
