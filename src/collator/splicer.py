from __future__ import annotations

"""Accumulator that splices scripts and their source maps together."""

import io
import json

from .declarations import remove_sourcemap_declaration
from .errors import SplicerSealedError
from .mapping import clip_to_lines, identity_mapping
from .sourcemap import encode_sourcemap, parse_sourcemap
from .types import Asset, CombinedOutput, Mapping, Segment


class Splicer:
    """Concatenates scripts while keeping one source map for all of them.

    Scripts are appended in the order `add_script` is called. Reading the
    compiled output seals the splicer; adding after that is an error.
    """

    def __init__(self, file: str | None = None) -> None:
        self.file = file
        self._sources = io.StringIO()
        self._mapping = Mapping()
        self._line_count = 0
        self._segments: list[Segment] = []
        self._sealed = False

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def line_count(self) -> int:
        """Number of lines emitted so far, i.e. where the next script starts."""
        return self._line_count

    def add_script(self, url: str, source: str, source_map_body: str | bytes | None = None) -> None:
        """Add the script at `url`, optionally with its source map JSON.

        Without a map the script gets an identity mapping onto `url` itself.
        Raises MalformedMapError for a bad map, leaving the splicer untouched.
        """

        if self._sealed:
            raise SplicerSealedError("Compiled output was already read; start a new Splicer")

        body = remove_sourcemap_declaration(source)
        segment_lines = body.count("\n") + 1

        if source_map_body is not None:
            mapping = clip_to_lines(parse_sourcemap(source_map_body), segment_lines)
        else:
            mapping = identity_mapping(url, body)

        self._mapping.extend(mapping, self._line_count)
        self._segments.append(Segment(url=url, body=body, mapping=mapping))
        self._sources.write(body)
        self._sources.write("\n")
        self._line_count += segment_lines

    def add_asset(self, asset: Asset) -> None:
        self.add_script(asset.url, asset.body, asset.source_map)

    def compile_script_string(self) -> str:
        """Return the spliced script.

        The result does not include a sourceMappingURL declaration.
        """
        self._sealed = True
        return self._sources.getvalue()

    def compile_sourcemap_string(self) -> str:
        self._sealed = True
        return json.dumps(encode_sourcemap(self._mapping, self.file))

    def compile(self) -> CombinedOutput:
        self._sealed = True
        return CombinedOutput(script=self._sources.getvalue(), mapping=self._mapping.copy())
