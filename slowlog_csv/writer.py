"""CSV sink — writes rows to stdout or atomically to a file."""

import csv
import logging
import os
import stat
import sys
import tempfile
from typing import Sequence, TextIO

from slowlog_csv.models import BASE_COLUMNS

logger = logging.getLogger(__name__)

STDOUT_PATH = "-"


def _target_mode(path: str) -> int:
    """Mode for the finished file: keep an existing file's, else 0666 less the umask."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class CsvSink:
    """Row writer over csv.writer with QUOTE_NONNUMERIC.

    Text fields are always quoted (embedded delimiters, quotes and line
    breaks are escaped by the csv module); int/float fields are written bare.

    File output goes to a temp file next to the target and is moved into
    place by commit(), so a failed conversion leaves no partial CSV.
    """

    def __init__(
        self,
        path: str | None = None,
        columns: Sequence[str] = BASE_COLUMNS,
        delimiter: str = ",",
        stream: TextIO | None = None,
    ):
        self._path = path if path and path != STDOUT_PATH else None
        self._columns = tuple(columns)
        self._tmp_path = None
        self.rows_written = 0

        if self._path is None:
            self._file = stream if stream is not None else sys.stdout
        else:
            out_dir = os.path.dirname(os.path.abspath(self._path))
            fd, self._tmp_path = tempfile.mkstemp(dir=out_dir, suffix=".tmp")
            self._file = os.fdopen(fd, "w", encoding="utf-8", newline="")

        self._writer = csv.writer(
            self._file,
            delimiter=delimiter,
            quoting=csv.QUOTE_NONNUMERIC,
            lineterminator="\n",
        )

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    def write_header(self) -> None:
        self._writer.writerow(self._columns)

    def write_row(self, row: Sequence) -> None:
        self._writer.writerow(row)
        self.rows_written += 1

    def flush(self) -> None:
        self._file.flush()

    def commit(self) -> None:
        """Flush everything; for file output, move the temp file onto the target."""
        self.flush()
        if self._tmp_path is None:
            return
        self._file.close()
        os.chmod(self._tmp_path, _target_mode(self._path))
        os.replace(self._tmp_path, self._path)
        logger.debug("Wrote %s", self._path)
        self._tmp_path = None

    def abort(self) -> None:
        """Discard a half-written file. stdout output cannot be taken back."""
        if self._tmp_path is None:
            return
        self._file.close()
        if os.path.exists(self._tmp_path):
            os.unlink(self._tmp_path)
        self._tmp_path = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.commit()
        else:
            self.abort()
        return False
