from __future__ import annotations

"""Crawling, splicing and writing build artifacts.

`Build` drives a crawler over an ordered list of URLs, feeds every asset
(and its source map, when one is declared) to a `Splicer` and writes the
results to disk, optionally through a minifier.

Asset bodies are treated as opaque bytes: they are decoded with
`surrogateescape` so that whatever is not UTF-8 survives the round trip.
"""

import sys
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urljoin

from .crawler import Crawler
from .declarations import decode_data_uri, is_data_uri, source_map_url_from
from .errors import CollatorError
from .minify import Minifier, TerserMinifier
from .splicer import Splicer
from .types import Asset

ENCODING = "utf-8"
ERRORS = "surrogateescape"


def _decode(body: bytes | str) -> str:
    if isinstance(body, str):
        return body
    return body.decode(ENCODING, errors=ERRORS)


def _write(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode(ENCODING, errors=ERRORS))
    except OSError as e:
        raise CollatorError(f"Could not write {path}: {e}") from e


class Build:
    def __init__(
        self,
        crawler: Crawler,
        *,
        minifier: Minifier | None = None,
        now: datetime | None = None,
        verbose: bool = False,
    ) -> None:
        self.crawler = crawler
        self.minifier = minifier or TerserMinifier()
        self.verbose = verbose

        now = now or datetime.now(timezone.utc)
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        # UTC timestamp to the minute
        self.basename = "build." + now.strftime("%Y.%m.%d.%H.%M")

    def _log(self, message: str) -> None:
        if self.verbose:
            print(message, file=sys.stderr)

    def crawl_and_splice(self, file_urls: Iterable[str]) -> Splicer:
        """Fetch every URL in order, with its source map, into a new Splicer."""

        splicer = Splicer(file=f"{self.basename}.js")

        for url in file_urls:
            response = self.crawler.get(url)
            body = _decode(response.body)

            sourcemap_url = source_map_url_from(body, response.headers)
            if not sourcemap_url:
                self._log(f"Fetched {url}")
                splicer.add_asset(Asset(url, body))
                continue

            if is_data_uri(sourcemap_url):
                self._log(f"Fetched {url} + inline source map")
                sourcemap_body = decode_data_uri(sourcemap_url)
            else:
                sourcemap_url = urljoin(url, sourcemap_url)
                self._log(f"Fetched {url} + source map {sourcemap_url}")
                sourcemap_body = self.crawler.get(sourcemap_url).body

            splicer.add_asset(Asset(url, body, sourcemap_body))

        return splicer

    def spliced_script_and_sourcemap(self, file_urls: Iterable[str]) -> tuple[str, str]:
        splicer = self.crawl_and_splice(file_urls)
        return splicer.compile_script_string(), splicer.compile_sourcemap_string()

    def write_spliced(self, file_urls: Iterable[str], output_dir: Path) -> list[Path]:
        """Write `<basename>.js` and `<basename>.js.map` into `output_dir`."""

        script, sourcemap = self.spliced_script_and_sourcemap(file_urls)

        destination = output_dir / f"{self.basename}.js"
        map_destination = output_dir / f"{self.basename}.js.map"

        _write(destination, f"{script}//# sourceMappingURL={map_destination.name}\n")
        _write(map_destination, sourcemap)

        for path in (destination, map_destination):
            self._log(f"  wrote {path}")
        return [destination, map_destination]

    def collate_and_minify(self, file_urls: Iterable[str], output_dir: Path) -> list[Path]:
        """Write the spliced script plus its minified version and map.

        Produces `<basename>.js`, `<basename>.min.js` and `<basename>.min.map`.
        """

        script, sourcemap = self.spliced_script_and_sourcemap(file_urls)

        destination = output_dir / f"{self.basename}.js"
        min_destination = output_dir / f"{self.basename}.min.js"
        map_min_destination = output_dir / f"{self.basename}.min.map"

        self._log("Minifying the spliced script")
        minified, minified_map = self.minifier.minify(script, sourcemap)
        minified = f"{minified}\n//# sourceMappingURL={map_min_destination.name}"

        _write(destination, script)
        _write(min_destination, minified)
        _write(map_min_destination, minified_map)

        written = [destination, min_destination, map_min_destination]
        for path in written:
            self._log(f"  wrote {path}")
        return written
