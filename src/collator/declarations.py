from __future__ import annotations

"""Locating and removing source map declarations.

Compilers announce the map of a generated file with a one-line comment:

    //# sourceMappingURL=/js/components/player-buttons.js.map
    /*# sourceMappingURL=main.css.map */

Comment syntax is not assumed since CSS has source maps too. Servers may
also announce the map with a `SourceMap` or `X-SourceMap` header.
"""

import base64
import binascii
import re
from collections.abc import Mapping
from urllib.parse import unquote_to_bytes

from .errors import MalformedMapError

SOURCEMAP_HEAD = re.escape("sourceMappingURL=")
SOURCEMAP_LINE_RE = re.compile(rf"^(.+){SOURCEMAP_HEAD}(.+)$", re.MULTILINE)

# "..map */" CSS closing comment
_TRAILING_TOKEN_RE = re.compile(r"\s\S+$")

SOURCEMAP_HEADERS = ("SourceMap", "X-SourceMap")


def source_map_url_from(body: str, headers: Mapping[str, str]) -> str | None:
    """Return the map URL declared by `body` or `headers`, or None.

    A declaration inside the body wins over the headers.
    """

    match = SOURCEMAP_LINE_RE.search(body)
    if match:
        return _TRAILING_TOKEN_RE.sub("", match.group(2)).strip()

    for header in SOURCEMAP_HEADERS:
        value = headers.get(header)
        if value:
            return value

    return None


def remove_sourcemap_declaration(body: str) -> str:
    """Strip declaration lines from `body` and trim trailing whitespace.

    Only the declaration text goes; its line break stays so the lines that
    follow keep their numbers. The rstrip() is essential: trailing blank
    lines would otherwise count toward the line offset of the next file.
    """

    return SOURCEMAP_LINE_RE.sub("", body).rstrip()


def is_data_uri(url: str) -> bool:
    return url.startswith("data:")


def decode_data_uri(url: str) -> bytes:
    """Decode an inline `data:` map reference into its payload bytes."""

    header, sep, payload = url.partition(",")
    if not sep:
        raise MalformedMapError(f"Malformed data URI: {url[:40]!r}")

    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload)
        except binascii.Error as e:
            raise MalformedMapError(f"Bad base64 in data URI: {e}") from e
    return unquote_to_bytes(payload)
