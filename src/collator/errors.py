from __future__ import annotations


class CollatorError(Exception):
    """Base exception for collator."""


class UnsafePathError(CollatorError):
    """Raised when a requested path would escape the crawl root."""


class FetchError(CollatorError):
    """Raised when an asset or its map cannot be fetched."""


class MalformedMapError(CollatorError):
    """Raised when a source map payload can't be parsed."""


class MinifierError(CollatorError):
    """Raised when the external minifier is missing or fails."""


class SplicerSealedError(CollatorError):
    """Raised when adding to a Splicer whose output has already been read."""
