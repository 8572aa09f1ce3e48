from __future__ import annotations

"""Synthesizing and merging mappings.

Assets without a map of their own get an identity mapping so that every
generated line still resolves to a line of the asset itself. Splicing then
becomes a plain append: the next mapping is moved down by the number of
lines already emitted and added to the accumulated one.
"""

from .types import Mapping, MappingEntry, Position


def identity_mapping(source: str, text: str) -> Mapping:
    """Map every line of `text` onto itself in `source`.

    Each line gets an entry at its first column and, unless the line is
    empty, one at its end. A trailing carriage return is not counted.
    """

    mapping = Mapping(sources=[source])
    for lineno, line in enumerate(text.split("\n")):
        start = Position(lineno, 0)
        mapping.entries.append(MappingEntry(start, source, start))
        length = len(line.rstrip("\r"))
        if length:
            end = Position(lineno, length)
            mapping.entries.append(MappingEntry(end, source, end))
    return mapping


def merge_mappings(head: Mapping, tail: Mapping, line_offset: int) -> Mapping:
    """Return a new mapping with `tail` appended after `head`.

    `line_offset` is the line at which the text described by `tail` starts,
    i.e. the number of lines covered by `head`. Neither argument is modified.
    """

    merged = head.copy()
    merged.extend(tail, line_offset)
    return merged


def clip_to_lines(mapping: Mapping, line_count: int) -> Mapping:
    """Drop entries that point past the last generated line of a segment."""

    if mapping.max_generated_line < line_count:
        return mapping

    clipped = Mapping(
        sources=list(mapping.sources),
        names=list(mapping.names),
        sources_content=dict(mapping.sources_content),
    )
    clipped.entries = [e for e in mapping.entries if e.generated.line < line_count]
    return clipped
