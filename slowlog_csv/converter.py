"""Conversion pipeline — reader -> accumulator -> row mapping -> CSV sink."""

import logging
from typing import Iterable, TextIO

from slowlog_csv.accumulator import RecordAccumulator, iter_entries
from slowlog_csv.classifier import LineClassifier
from slowlog_csv.config import Config
from slowlog_csv.reader import read_lines, validate_input
from slowlog_csv.rows import columns_for, entry_to_row
from slowlog_csv.stats import ConversionStats
from slowlog_csv.writer import CsvSink

logger = logging.getLogger(__name__)


def write_entries(
    lines: Iterable[str],
    sink: CsvSink,
    accumulator: RecordAccumulator,
    extended: bool = False,
    join_lines: bool = True,
) -> int:
    """Write the header row plus one row per entry. Returns the entry count."""
    sink.write_header()
    count = 0
    for entry in iter_entries(lines, accumulator):
        sink.write_row(entry_to_row(entry, extended=extended, join_lines=join_lines))
        count += 1
    accumulator.stats.entries_written += count
    return count


def convert(config: Config, stream: TextIO | None = None) -> ConversionStats:
    """Convert config.input_path to CSV at config.output_path (or *stream*/stdout).

    Raises OSError if the input cannot be read or the output cannot be written.
    """
    validate_input(config.input_path)

    stats = ConversionStats()
    accumulator = RecordAccumulator(
        stats=stats,
        classifier=LineClassifier(config.skip_patterns),
    )

    with CsvSink(
        config.output_path,
        columns=columns_for(config.extended),
        delimiter=config.delimiter,
        stream=stream,
    ) as sink:
        write_entries(
            read_lines(config.input_path),
            sink,
            accumulator,
            extended=config.extended,
            join_lines=config.join_query_lines,
        )

    logger.debug("Conversion finished: %s", stats)
    return stats
