from __future__ import annotations

import unittest
from pathlib import Path

from collator.errors import UnsafePathError
from collator.paths import normalize_relative_path, safe_join, strip_url


class TestPaths(unittest.TestCase):
    def test_strip_url_drops_host_query_and_fragment(self):
        self.assertEqual(strip_url("http://localhost:9292/js/app.js?v=3#top"), "/js/app.js")

    def test_strip_url_keeps_windows_drive(self):
        self.assertEqual(strip_url("C:\\assets\\app.js"), "C:/assets/app.js")

    def test_normalize_relative_path_strips_scheme(self):
        self.assertEqual(
            normalize_relative_path("file:///Users/me/project/index.js"),
            "Users/me/project/index.js",
        )

    def test_normalize_relative_path_strips_leading_slash_and_query(self):
        self.assertEqual(normalize_relative_path("/js/app.js?v=1"), "js/app.js")

    def test_normalize_relative_path_drops_dot_segments(self):
        self.assertEqual(normalize_relative_path("a/./b/../c.js"), "a/c.js")

    def test_normalize_relative_path_decodes_percent_escapes(self):
        self.assertEqual(normalize_relative_path("/css/my%20site.css"), "css/my site.css")

    def test_normalize_relative_path_rejects_empty(self):
        with self.assertRaises(UnsafePathError):
            normalize_relative_path("")

    def test_safe_join_stays_within_base(self):
        base = Path("/tmp/out")
        out = safe_join(base, "a/b/c.js")
        self.assertTrue(str(out).endswith("/tmp/out/a/b/c.js"))

    def test_safe_join_prevents_escape(self):
        base = Path("/tmp/out")
        with self.assertRaises(UnsafePathError):
            safe_join(base, "../../etc/passwd")

    def test_escape_after_descending_is_rejected(self):
        with self.assertRaises(UnsafePathError) as ctx:
            normalize_relative_path("js/../../secret.txt")
        self.assertIn("crawl root", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
