from __future__ import annotations

import unittest

from collator.mapping import clip_to_lines, identity_mapping, merge_mappings
from collator.types import Mapping, MappingEntry, Position


def _entry(gen_line: int, gen_col: int, source: str, orig_line: int, orig_col: int, name: str | None = None):
    return MappingEntry(Position(gen_line, gen_col), source, Position(orig_line, orig_col), name)


def _mapping(*entries: MappingEntry) -> Mapping:
    mapping = Mapping()
    for entry in entries:
        mapping.add_entry(entry)
    return mapping


class TestIdentityMapping(unittest.TestCase):
    def test_start_and_end_of_every_line(self):
        mapping = identity_mapping("b.js", "ab\nxyz")
        self.assertEqual(mapping.sources, ["b.js"])
        self.assertEqual(
            mapping.entries,
            [
                _entry(0, 0, "b.js", 0, 0),
                _entry(0, 2, "b.js", 0, 2),
                _entry(1, 0, "b.js", 1, 0),
                _entry(1, 3, "b.js", 1, 3),
            ],
        )

    def test_empty_lines_still_covered(self):
        mapping = identity_mapping("c.css", "a{}\n\nb{}")
        lines = {e.generated.line for e in mapping.entries}
        self.assertEqual(lines, {0, 1, 2})
        self.assertEqual([e for e in mapping.entries if e.generated.line == 1], [_entry(1, 0, "c.css", 1, 0)])

    def test_crlf_line_end_excludes_carriage_return(self):
        mapping = identity_mapping("w.js", "ab\r\ncd")
        self.assertEqual(
            mapping.entries,
            [
                _entry(0, 0, "w.js", 0, 0),
                _entry(0, 2, "w.js", 0, 2),
                _entry(1, 0, "w.js", 1, 0),
                _entry(1, 2, "w.js", 1, 2),
            ],
        )

    def test_empty_text_is_one_line(self):
        self.assertEqual(identity_mapping("e.js", "").entries, [_entry(0, 0, "e.js", 0, 0)])


class TestMergeMappings(unittest.TestCase):
    def test_tail_is_shifted_by_offset(self):
        head = _mapping(_entry(0, 0, "a.ts", 10, 0), _entry(1, 4, "a.ts", 11, 2, "foo"))
        tail = _mapping(_entry(0, 3, "b.ts", 0, 0, "bar"))

        merged = merge_mappings(head, tail, 2)

        self.assertEqual(merged.entries[-1], _entry(2, 3, "b.ts", 0, 0, "bar"))
        self.assertEqual(merged.entries[:2], head.entries)
        self.assertEqual(merged.sources, ["a.ts", "b.ts"])
        self.assertEqual(merged.names, ["foo", "bar"])

    def test_inputs_are_not_modified(self):
        head = _mapping(_entry(0, 0, "a.ts", 0, 0))
        tail = _mapping(_entry(0, 0, "b.ts", 0, 0))
        merge_mappings(head, tail, 1)
        self.assertEqual(len(head.entries), 1)
        self.assertEqual(tail.entries, [_entry(0, 0, "b.ts", 0, 0)])

    def test_shared_sources_are_listed_once(self):
        head = _mapping(_entry(0, 0, "shared.ts", 0, 0))
        tail = _mapping(_entry(0, 0, "shared.ts", 5, 0))
        self.assertEqual(merge_mappings(head, tail, 1).sources, ["shared.ts"])

    def test_grouping_does_not_matter(self):
        one = identity_mapping("1.js", "a\nb")
        two = identity_mapping("2.js", "c\nd\ne")
        three = identity_mapping("3.js", "f")

        left = merge_mappings(merge_mappings(one, two, 2), three, 5)
        right = merge_mappings(one, merge_mappings(two, three, 3), 2)

        self.assertEqual(left.entries, right.entries)
        self.assertEqual(left.sources, right.sources)
        self.assertEqual({e.generated.line for e in left.entries if e.source == "3.js"}, {5})


class TestMappingSources(unittest.TestCase):
    def test_many_assets_keep_order_without_duplicates(self):
        mapping = Mapping()
        urls = [f"asset{i}.js" for i in range(2000)]
        for offset, url in enumerate(urls):
            mapping.extend(identity_mapping(url, "x();"), offset)
            mapping.extend(identity_mapping(urls[0], ""), offset)

        self.assertEqual(mapping.sources, urls)
        self.assertEqual(mapping.max_generated_line, len(urls) - 1)

    def test_constructor_drops_duplicate_sources_and_names(self):
        mapping = Mapping(sources=["a.ts", "b.ts", "a.ts"], names=["x", "x"])
        mapping.add_source("b.ts")
        self.assertEqual(mapping.sources, ["a.ts", "b.ts"])
        self.assertEqual(mapping.names, ["x"])

    def test_copy_keeps_its_own_index(self):
        mapping = Mapping(sources=["a.ts"])
        copied = mapping.copy()
        copied.add_source("b.ts")
        mapping.add_source("b.ts")
        self.assertEqual(copied.sources, ["a.ts", "b.ts"])
        self.assertEqual(mapping.sources, ["a.ts", "b.ts"])


class TestClipToLines(unittest.TestCase):
    def test_drops_entries_past_last_line(self):
        mapping = _mapping(_entry(0, 0, "a.ts", 0, 0), _entry(3, 0, "a.ts", 9, 0))
        clipped = clip_to_lines(mapping, 2)
        self.assertEqual(clipped.entries, [_entry(0, 0, "a.ts", 0, 0)])
        self.assertEqual(len(mapping.entries), 2)

    def test_in_range_mapping_is_returned_as_is(self):
        mapping = _mapping(_entry(1, 0, "a.ts", 0, 0))
        self.assertIs(clip_to_lines(mapping, 2), mapping)


class TestLookup(unittest.TestCase):
    def test_nearest_preceding_column(self):
        mapping = identity_mapping("b.js", "hello")
        self.assertEqual(mapping.lookup(0, 3), _entry(0, 0, "b.js", 0, 0))
        self.assertEqual(mapping.lookup(0, 5), _entry(0, 5, "b.js", 0, 5))
        self.assertIsNone(mapping.lookup(1, 0))


if __name__ == "__main__":
    unittest.main()
