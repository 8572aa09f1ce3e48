from __future__ import annotations

"""Reading and writing Source Map revision 3 documents.

Only the subset needed for splicing is supported: a flat (non-indexed) map
with Base64 VLQ `mappings`. `sourceRoot` is folded into the source names and
`sourcesContent` is carried along when present.
"""

import json
from typing import Any

from .errors import MalformedMapError
from .types import Mapping, MappingEntry, Position

BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_VALUES = {c: i for i, c in enumerate(BASE64_CHARS)}

VLQ_SHIFT = 5
VLQ_CONTINUATION = 1 << VLQ_SHIFT
VLQ_MASK = VLQ_CONTINUATION - 1

# Some servers prefix JSON with this to defeat XSSI.
XSSI_PREFIX = ")]}'"


def encode_vlq(value: int) -> str:
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & VLQ_MASK
        vlq >>= VLQ_SHIFT
        if vlq:
            digit |= VLQ_CONTINUATION
        out.append(BASE64_CHARS[digit])
        if not vlq:
            return "".join(out)


def decode_vlq(segment: str) -> list[int]:
    """Decode every VLQ value packed into one `mappings` segment."""

    values: list[int] = []
    value = shift = 0
    for char in segment:
        digit = _BASE64_VALUES.get(char)
        if digit is None:
            raise MalformedMapError(f"Invalid base64 character {char!r} in mappings")
        value += (digit & VLQ_MASK) << shift
        if digit & VLQ_CONTINUATION:
            shift += VLQ_SHIFT
            continue
        values.append(-(value >> 1) if value & 1 else value >> 1)
        value = shift = 0

    if shift:
        raise MalformedMapError(f"Truncated VLQ value in segment {segment!r}")
    return values


def _load_json(raw: str | bytes) -> Any:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMapError(f"Source map is not valid UTF-8: {e}") from e

    if raw.startswith(XSSI_PREFIX):
        raw = raw.split("\n", 1)[1] if "\n" in raw else ""

    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedMapError(f"Source map is not valid JSON: {e}") from e


def _resolve_sources(doc: dict[str, Any]) -> list[str]:
    sources = doc.get("sources")
    if not isinstance(sources, list):
        raise MalformedMapError("Source map 'sources' must be a list")

    root = doc.get("sourceRoot") or ""
    if not isinstance(root, str):
        raise MalformedMapError("Source map 'sourceRoot' must be a string")

    resolved: list[str] = []
    for source in sources:
        if source is None:
            source = ""
        if not isinstance(source, str):
            raise MalformedMapError(f"Source map source {source!r} is not a string")
        if root:
            source = root.rstrip("/") + "/" + source.lstrip("/")
        resolved.append(source)
    return resolved


def parse_sourcemap(raw: str | bytes) -> Mapping:
    """Parse a JSON source map into a `Mapping`.

    Raises MalformedMapError when the payload isn't a usable v3 map.
    """

    doc = _load_json(raw)
    if not isinstance(doc, dict):
        raise MalformedMapError("Source map must be a JSON object")
    if "sections" in doc:
        raise MalformedMapError("Indexed source maps are not supported")
    if doc.get("version") != 3:
        raise MalformedMapError(f"Unsupported source map version: {doc.get('version')!r}")

    sources = _resolve_sources(doc)

    names = doc.get("names", [])
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise MalformedMapError("Source map 'names' must be a list of strings")

    mappings = doc.get("mappings")
    if not isinstance(mappings, str):
        raise MalformedMapError("Source map 'mappings' must be a string")

    mapping = Mapping()
    for source in sources:
        mapping.add_source(source)
    for name in names:
        mapping.add_name(name)

    contents = doc.get("sourcesContent")
    if isinstance(contents, list):
        for source, content in zip(sources, contents):
            if isinstance(content, str):
                mapping.sources_content.setdefault(source, content)

    source_idx = orig_line = orig_col = name_idx = 0
    for lineno, line in enumerate(mappings.split(";")):
        gen_col = 0
        for segment in line.split(","):
            if not segment:
                continue
            fields = decode_vlq(segment)
            if len(fields) not in (1, 4, 5):
                raise MalformedMapError(f"Segment {segment!r} has {len(fields)} fields")

            gen_col += fields[0]
            if len(fields) == 1:
                # Generated column only: nothing to attribute.
                continue

            source_idx += fields[1]
            orig_line += fields[2]
            orig_col += fields[3]
            if not 0 <= source_idx < len(sources):
                raise MalformedMapError(f"Source index {source_idx} out of range")

            name = None
            if len(fields) == 5:
                name_idx += fields[4]
                if not 0 <= name_idx < len(names):
                    raise MalformedMapError(f"Name index {name_idx} out of range")
                name = names[name_idx]

            mapping.entries.append(
                MappingEntry(
                    generated=Position(lineno, gen_col),
                    source=sources[source_idx],
                    original=Position(orig_line, orig_col),
                    name=name,
                )
            )

    return mapping


def _referenced(declared: list[str], used: list[str]) -> list[str]:
    """Distinct values of `used`, in `declared` order first."""

    used_set = set(used)
    ordered = [v for v in declared if v in used_set]
    seen = set(ordered)
    for value in used:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def encode_sourcemap(mapping: Mapping, file: str | None = None) -> dict[str, Any]:
    """Build the JSON-compatible v3 document for `mapping`."""

    entries = sorted(mapping.entries, key=lambda e: e.generated)

    sources = _referenced(mapping.sources, [e.source for e in entries])
    names = _referenced(mapping.names, [e.name for e in entries if e.name is not None])
    source_index = {s: i for i, s in enumerate(sources)}
    name_index = {n: i for i, n in enumerate(names)}

    lines: list[list[str]] = [[] for _ in range(mapping.max_generated_line + 1)]
    prev_source = prev_line = prev_col = prev_name = 0
    prev_gen_line, prev_gen_col = -1, 0
    for entry in entries:
        if entry.generated.line != prev_gen_line:
            prev_gen_line, prev_gen_col = entry.generated.line, 0

        src = source_index[entry.source]
        fields = [
            entry.generated.column - prev_gen_col,
            src - prev_source,
            entry.original.line - prev_line,
            entry.original.column - prev_col,
        ]
        if entry.name is not None:
            name = name_index[entry.name]
            fields.append(name - prev_name)
            prev_name = name

        prev_gen_col = entry.generated.column
        prev_source, prev_line, prev_col = src, entry.original.line, entry.original.column
        lines[entry.generated.line].append("".join(encode_vlq(f) for f in fields))

    doc: dict[str, Any] = {"version": 3}
    if file is not None:
        doc["file"] = file
    doc["sources"] = sources
    if any(s in mapping.sources_content for s in sources):
        doc["sourcesContent"] = [mapping.sources_content.get(s) for s in sources]
    doc["names"] = names
    doc["mappings"] = ";".join(",".join(segments) for segments in lines)
    return doc
