from __future__ import annotations

"""Data model for spliced scripts and their source maps.

Positions are zero-based. A `Mapping` describes one contiguous run of
generated text; it starts out covering a single asset and grows as the
`Splicer` appends further assets to it.
"""

from collections.abc import Mapping as HeaderMap
from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class Position:
    line: int
    column: int

    def shifted(self, lines: int) -> "Position":
        return Position(self.line + lines, self.column)


@dataclass(frozen=True)
class MappingEntry:
    generated: Position
    source: str
    original: Position
    name: str | None = None

    def shifted(self, lines: int) -> "MappingEntry":
        return MappingEntry(self.generated.shifted(lines), self.source, self.original, self.name)


@dataclass
class Mapping:
    """Entries plus the ordered, distinct sources and names they reference."""

    entries: list[MappingEntry] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    sources_content: dict[str, str] = field(default_factory=dict)
    _source_index: dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)
    _name_index: dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        sources, names = self.sources, self.names
        self.sources, self.names = [], []
        for source in sources:
            self.add_source(source)
        for name in names:
            self.add_name(name)

    def add_source(self, source: str) -> None:
        if source not in self._source_index:
            self._source_index[source] = len(self.sources)
            self.sources.append(source)

    def add_name(self, name: str) -> None:
        if name not in self._name_index:
            self._name_index[name] = len(self.names)
            self.names.append(name)

    def add_entry(self, entry: MappingEntry) -> None:
        self.add_source(entry.source)
        if entry.name is not None:
            self.add_name(entry.name)
        self.entries.append(entry)

    def extend(self, other: "Mapping", line_offset: int = 0) -> None:
        """Append `other` in place, moving its generated lines down by `line_offset`."""

        for source in other.sources:
            self.add_source(source)
        for name in other.names:
            self.add_name(name)
        for source, content in other.sources_content.items():
            self.sources_content.setdefault(source, content)

        if line_offset:
            self.entries.extend(entry.shifted(line_offset) for entry in other.entries)
        else:
            self.entries.extend(other.entries)

    def copy(self) -> "Mapping":
        return Mapping(list(self.entries), list(self.sources), list(self.names), dict(self.sources_content))

    @property
    def max_generated_line(self) -> int:
        """Highest generated line referenced, or -1 for an empty mapping."""
        return max((e.generated.line for e in self.entries), default=-1)

    def lookup(self, line: int, column: int) -> MappingEntry | None:
        best: MappingEntry | None = None
        for entry in self.entries:
            if entry.generated.line != line or entry.generated.column > column:
                continue
            if best is None or entry.generated.column >= best.generated.column:
                best = entry
        return best


@dataclass(frozen=True)
class Asset:
    url: str
    body: str
    source_map: str | bytes | None = None


@dataclass(frozen=True)
class Segment:
    url: str
    body: str
    mapping: Mapping

    @property
    def line_count(self) -> int:
        return self.body.count("\n") + 1


@dataclass(frozen=True)
class CombinedOutput:
    script: str
    mapping: Mapping


@dataclass(frozen=True)
class Response:
    """What a crawler returns for one URL."""

    body: bytes
    headers: HeaderMap[str, str] = field(default_factory=dict)
