from __future__ import annotations

"""Running an external minifier over the spliced script.

JS-based tools tend to expect to be run from the directory holding their
inputs, so the minifier works inside a scratch directory entered with
`in_directory()`.
"""

import os
import shutil
import subprocess
import tempfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from .declarations import remove_sourcemap_declaration
from .errors import MinifierError


@contextmanager
def in_directory(working_dir: str | Path) -> Iterator[None]:
    """Run the body with the working directory set to `working_dir`.

    The previous working directory is restored however the body exits.
    """

    old_dir = os.getcwd()
    try:
        os.chdir(working_dir)
        yield
    finally:
        os.chdir(old_dir)


class Minifier:
    def minify(self, script: str, source_map: str) -> tuple[str, str]:
        """Return the minified script and its map, chained through `source_map`.

        The returned script carries no sourceMappingURL declaration.
        """
        raise NotImplementedError


class TerserMinifier(Minifier):
    INPUT = "spliced.js"
    INPUT_MAP = "spliced.js.map"
    OUTPUT = "spliced.min.js"

    def __init__(self, executable: str = "terser", extra_args: Sequence[str] = ("--compress", "--mangle")) -> None:
        self.executable = executable
        self.extra_args = tuple(extra_args)

    def minify(self, script: str, source_map: str) -> tuple[str, str]:
        exe = shutil.which(self.executable)
        if exe is None:
            raise MinifierError(f"Minifier not found: {self.executable}")

        cmd = [
            exe,
            self.INPUT,
            *self.extra_args,
            "--source-map",
            f"content='{self.INPUT_MAP}'",
            "--output",
            self.OUTPUT,
        ]

        with tempfile.TemporaryDirectory() as td, in_directory(td):
            Path(self.INPUT).write_text(script, encoding="utf-8", errors="surrogateescape")
            Path(self.INPUT_MAP).write_text(source_map, encoding="utf-8")

            try:
                subprocess.run(cmd, check=True, text=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
            except subprocess.CalledProcessError as e:
                raise MinifierError(f"{self.executable} exited with {e.returncode}: {e.stderr.strip()}") from e
            except OSError as e:
                raise MinifierError(f"Could not run {self.executable}: {e}") from e

            try:
                minified = Path(self.OUTPUT).read_text(encoding="utf-8", errors="surrogateescape")
                minified_map = Path(self.OUTPUT + ".map").read_text(encoding="utf-8")
            except OSError as e:
                raise MinifierError(f"{self.executable} did not produce its output: {e}") from e

        return remove_sourcemap_declaration(minified), minified_map
