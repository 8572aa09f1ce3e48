from __future__ import annotations

"""URL-to-path normalization and safe filesystem joins.

Asset URLs handed to the filesystem crawler look like web paths
(`/js/app.js?v=3`, `http://localhost/css/site.css`) and may be written on
Windows with backslashes. This module turns them into relative POSIX paths
and joins them beneath the crawl root without allowing traversal.
"""

import re
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlsplit

from .errors import UnsafePathError

_DRIVE_LETTER = re.compile(r"^[A-Za-z]:$")


def strip_url(url: str) -> str:
    """Drop scheme, host, query and fragment, keeping the decoded path."""

    parts = urlsplit(url.replace("\\", "/"))
    if parts.scheme and len(parts.scheme) > 1:
        return unquote(parts.path)
    # A one-letter "scheme" is a Windows drive letter.
    return unquote(url.replace("\\", "/").split("?", 1)[0].split("#", 1)[0])


def normalize_relative_path(untrusted_path: str) -> str:
    """Turn a requested URL into a relative POSIX path beneath the crawl root.

    Scheme, host, query and fragment are dropped, `.` and `..` segments are
    resolved and Windows drive letters are skipped.

    Raises UnsafePathError when nothing is left to look up or when the URL
    climbs above the crawl root with `..`.
    """

    path = strip_url(untrusted_path).lstrip("/")

    parts: list[str] = []
    for part in path.split("/"):
        if part == "..":
            if not parts:
                raise UnsafePathError(f"URL climbs above the crawl root: {untrusted_path!r}")
            parts.pop()
        elif part not in ("", ".") and not _DRIVE_LETTER.match(part):
            parts.append(part)

    if not parts:
        raise UnsafePathError(f"URL names no file: {untrusted_path!r}")

    return str(PurePosixPath(*parts))


def safe_join(base: Path, relative_path: str) -> Path:
    """Return the file under crawl root `base` that a requested URL names.

    Symlinks are followed before the check, so a link pointing outside the
    root is refused as well.
    """

    lookup = base.joinpath(*PurePosixPath(normalize_relative_path(relative_path)).parts)

    if not lookup.resolve(strict=False).is_relative_to(base.resolve(strict=False)):
        raise UnsafePathError(f"URL resolves outside the crawl root: {relative_path!r}")

    return lookup
