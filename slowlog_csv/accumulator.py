"""Record accumulator — turns classified lines into completed slow query entries.

The slow log has no end-of-record marker. A record starts at a
"# User@Host:" header and ends when the next one arrives or the input runs
out. The accumulator is an explicit two-state machine:

- IDLE: nothing in progress (initial state, and again after finish()).
- ACCUMULATING: one SlowQueryEntry is being filled in.

The last "# Time:" value is sticky: it is copied into every record started
after it, until another time header replaces it.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Generator, Iterable

from slowlog_csv.classifier import ClassifiedLine, LineClassifier, LineKind
from slowlog_csv.models import SlowQueryEntry
from slowlog_csv.stats import ConversionStats

logger = logging.getLogger(__name__)

LOG_TIME_FORMAT = "%y%m%d %H:%M:%S"
OUTPUT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_log_time(raw_time: str) -> str:
    """Convert '230101  9:05:03' -> '2023-01-01 09:05:03'.

    Runs of whitespace are collapsed first. Raises ValueError if the value is
    not in the yymmdd H:M:S layout.
    """
    combined = " ".join(raw_time.split())
    dt = datetime.strptime(combined, LOG_TIME_FORMAT)
    return dt.strftime(OUTPUT_TIME_FORMAT)


class AccumulatorState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"


class RecordAccumulator:
    """Single-pass accumulator owning the in-progress record and the sticky time."""

    def __init__(
        self,
        sticky_time: str = "",
        stats: ConversionStats | None = None,
        classifier: LineClassifier | None = None,
    ) -> None:
        self.sticky_time = sticky_time
        self.stats = stats if stats is not None else ConversionStats()
        self._classifier = classifier or LineClassifier()
        self._current: SlowQueryEntry | None = None
        self._opened_by_header = False
        self._handlers = {
            LineKind.SKIP: self._on_skip,
            LineKind.TIME: self._on_time,
            LineKind.CONNECTION: self._on_connection,
            LineKind.METADATA: self._on_metadata,
            LineKind.BLANK: self._on_blank,
            LineKind.COMMENT: self._on_comment,
            LineKind.BODY: self._on_body,
        }

    @property
    def state(self) -> AccumulatorState:
        if self._current is None:
            return AccumulatorState.IDLE
        return AccumulatorState.ACCUMULATING

    @property
    def current(self) -> SlowQueryEntry | None:
        return self._current

    def feed(self, line: str) -> SlowQueryEntry | None:
        """Classify and apply one line. Returns the entry flushed by it, if any."""
        self.stats.lines_read += 1
        return self.apply(self._classifier.classify(line))

    def apply(self, classified: ClassifiedLine) -> SlowQueryEntry | None:
        return self._handlers[classified.kind](classified)

    def finish(self) -> SlowQueryEntry | None:
        """End of input: flush the pending record. Safe to call more than once."""
        return self._flush()

    # -- internals ---------------------------------------------------------

    def _flush(self) -> SlowQueryEntry | None:
        entry = self._current
        opened_by_header = self._opened_by_header
        self._current = None
        self._opened_by_header = False

        if entry is None:
            return None
        if opened_by_header and entry.is_valid():
            return entry

        self.stats.fragments_dropped += 1
        logger.debug(
            "Dropping incomplete record before line %d (thread_id=%r, header=%s)",
            self.stats.lines_read, entry.thread_id, opened_by_header,
        )
        return None

    def _ensure_record(self) -> SlowQueryEntry:
        # Metadata or query text before any connection header: keep it in a
        # throwaway record so the line is consumed; _flush() drops it.
        if self._current is None:
            self._current = SlowQueryEntry(time=self.sticky_time)
            self._opened_by_header = False
        return self._current

    def _on_skip(self, classified: ClassifiedLine) -> None:
        self.stats.skipped_lines += 1
        return None

    def _on_blank(self, classified: ClassifiedLine) -> None:
        return None

    def _on_comment(self, classified: ClassifiedLine) -> None:
        self.stats.ignored_comments += 1
        logger.debug("Line %d: ignoring comment %r", self.stats.lines_read, classified.text)
        return None

    def _on_time(self, classified: ClassifiedLine) -> None:
        raw = classified.text
        try:
            self.sticky_time = format_log_time(raw)
        except ValueError:
            self.stats.time_fallbacks += 1
            logger.debug("Line %d: unrecognized time %r, keeping it as-is", self.stats.lines_read, raw)
            self.sticky_time = raw
        return None

    def _on_connection(self, classified: ClassifiedLine) -> SlowQueryEntry | None:
        flushed = self._flush()
        self._current = SlowQueryEntry(time=self.sticky_time)
        self._opened_by_header = True
        self._current.apply_fields(classified.fields)
        return flushed

    def _on_metadata(self, classified: ClassifiedLine) -> None:
        entry = self._ensure_record()
        entry.apply_fields(classified.fields)
        if classified.invalid_fields:
            self.stats.numeric_defaults += len(classified.invalid_fields)
            logger.debug(
                "Line %d: non-numeric value for %s, using 0",
                self.stats.lines_read, ", ".join(classified.invalid_fields),
            )
        return None

    def _on_body(self, classified: ClassifiedLine) -> None:
        self._ensure_record().append_query_line(classified.text)
        return None


def iter_entries(
    lines: Iterable[str],
    accumulator: RecordAccumulator | None = None,
) -> Generator[SlowQueryEntry, None, None]:
    """Yield every valid entry from a stream of log lines, in input order."""
    acc = accumulator if accumulator is not None else RecordAccumulator()
    for line in lines:
        entry = acc.feed(line)
        if entry is not None:
            yield entry
    entry = acc.finish()
    if entry is not None:
        yield entry
