from __future__ import annotations

"""Command-line interface for collator.

Default mode splices the given assets, minifies the result and writes
three artifacts. Use `--raw` to write just the spliced script and map.
"""

import argparse
import sys
from pathlib import Path

from .build import Build
from .crawler import Crawler, FilesystemCrawler, HttpCrawler
from .errors import CollatorError
from .minify import TerserMinifier


def build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        description="Concatenate compiled scripts or stylesheets with a combined source map",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    collator --root public js/a.js js/b.js            # build.<ts>.js/.min.js/.min.map
    collator --root public --raw -o dist js/a.js      # build.<ts>.js + .js.map in dist/
    collator --base-url http://localhost:9292 /js/app.js -v
        """,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    parser.add_argument("urls", nargs="+", metavar="URL", help="Asset URLs, in output order")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--root", help="Directory to resolve URLs beneath")
    source.add_argument("--base-url", help="Fetch URLs over HTTP relative to this URL")
    parser.add_argument("-o", "--output", dest="output_dir", default=".", help="Output directory")
    parser.add_argument("--raw", action="store_true", help="Write the spliced script and map only")
    parser.add_argument("--minifier", default="terser", help="Minifier executable (default: terser)")
    parser.add_argument("--timeout", type=float, default=30, help="HTTP timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Report each fetch and write")

    args = parser.parse_args(argv)

    crawler: Crawler
    if args.root is not None:
        root = Path(args.root)
        if not root.is_dir():
            print(f"Error: {root} is not a directory", file=sys.stderr)
            return 1
        crawler = FilesystemCrawler(root)
    else:
        crawler = HttpCrawler(args.base_url, timeout=args.timeout)

    build = Build(crawler, minifier=TerserMinifier(args.minifier), verbose=args.verbose)
    output_dir = Path(args.output_dir)

    try:
        if args.raw:
            written = build.write_spliced(args.urls, output_dir)
        else:
            written = build.collate_and_minify(args.urls, output_dir)
    except CollatorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Spliced {len(args.urls)} files into {written[0]}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
