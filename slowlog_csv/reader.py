"""Generator-based reading of slow log files (plain, gzip-rotated, or stdin)."""

import gzip
import os
import sys
from typing import Generator

STDIN_PATH = "-"


def validate_input(path: str) -> None:
    """Raise FileNotFoundError unless *path* is stdin or an existing file."""
    if path == STDIN_PATH:
        return
    if not os.path.isfile(path):
        raise FileNotFoundError(f"File not found: {path}")


def read_lines(path: str) -> Generator[str, None, None]:
    """Yield each line of *path* in file order, without its line terminator.

    '-' reads standard input; a '.gz' suffix is decompressed on the fly.
    """
    if path == STDIN_PATH:
        for line in sys.stdin:
            yield line.rstrip("\r\n")
        return

    opener = gzip.open if path.endswith(".gz") else open
    with opener(path, "rt", encoding="utf-8", errors="replace") as f:
        for line in f:
            yield line.rstrip("\r\n")
