from __future__ import annotations

"""Fetching compiled assets and their source maps.

A crawler has a single method, `get(url)`, returning a `Response` with the
body bytes and the response headers. Anything unexpected is raised from
there as FetchError; the build never continues with a partial set.
"""

from pathlib import Path
from urllib.parse import urljoin

import requests

from .errors import FetchError, UnsafePathError
from .paths import safe_join
from .types import Response


class Crawler:
    def get(self, url: str) -> Response:
        raise NotImplementedError


class FilesystemCrawler(Crawler):
    """Reads assets from a directory, treating URLs as paths beneath it."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def get(self, url: str) -> Response:
        try:
            path = safe_join(self.root, url)
        except UnsafePathError as e:
            raise FetchError(str(e)) from e

        if not path.is_file():
            raise FetchError(f"No such file: {path}")

        try:
            return Response(body=path.read_bytes(), headers={})
        except OSError as e:
            raise FetchError(f"Could not read {path}: {e}") from e


class HttpCrawler(Crawler):
    """Fetches assets over HTTP from the app that compiles them."""

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 30,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.session = session or requests.Session()
        self.timeout = timeout

    def get(self, url: str) -> Response:
        full_url = urljoin(self.base_url, url)
        try:
            resp = self.session.get(full_url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Request for {full_url} failed: {e}") from e

        if not resp.ok:
            raise FetchError(f"Something went wrong - {resp.status_code} for {full_url}")

        return Response(body=resp.content, headers=resp.headers)
