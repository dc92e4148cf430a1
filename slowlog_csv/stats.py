"""Conversion statistics — counters filled in while a log is converted."""

import json
from dataclasses import asdict, dataclass


@dataclass
class ConversionStats:
    lines_read: int = 0
    entries_written: int = 0
    skipped_lines: int = 0      # start-up / rotation banners
    ignored_comments: int = 0   # unrecognized '#' lines
    fragments_dropped: int = 0  # records without thread id or connection header
    numeric_defaults: int = 0   # metadata values that fell back to 0
    time_fallbacks: int = 0     # '# Time:' values kept verbatim


def format_stats_text(stats: ConversionStats) -> str:
    """One-line summary for the end-of-run log message."""
    return (
        f"{stats.lines_read} lines read, {stats.entries_written} entries written, "
        f"{stats.skipped_lines} banner lines skipped, "
        f"{stats.ignored_comments} unknown comment lines ignored, "
        f"{stats.fragments_dropped} incomplete records dropped, "
        f"{stats.numeric_defaults} numeric fields defaulted to 0, "
        f"{stats.time_fallbacks} timestamps kept verbatim"
    )


def format_stats_json(stats: ConversionStats) -> str:
    return json.dumps(asdict(stats), indent=2)
