"""Row mapping — query cleanup and the fixed CSV column layout."""

import re
from dataclasses import asdict, dataclass

from slowlog_csv.models import BASE_COLUMNS, EXTENDED_COLUMNS, SlowQueryEntry

# Whole-line directives the server writes in front of the logged statement.
_SET_TIMESTAMP_RE = re.compile(
    r"^[ \t]*SET[ \t]+timestamp[ \t]*=[ \t]*\d+[ \t]*;[ \t]*$\n?",
    re.IGNORECASE | re.MULTILINE,
)
_USE_SCHEMA_RE = re.compile(
    r"^[ \t]*use[ \t]+(?:`[^`\n]+`|\w+)[ \t]*;[ \t]*$\n?",
    re.IGNORECASE | re.MULTILINE,
)


@dataclass(frozen=True)
class CleanedQuery:
    set_timestamp: str
    use_schema: str
    query: str


def extract_directive(pattern: re.Pattern, text: str) -> tuple[str, str]:
    """Cut every whole-line match of *pattern* out of *text*.

    Returns (first directive trimmed, remaining text); ("", text) when absent.
    Repeated directives are removed too, so a cleaned query never holds one.
    """
    m = pattern.search(text)
    if not m:
        return "", text
    return m.group(0).strip(), pattern.sub("", text)


def normalize_query(text: str, join_lines: bool = True) -> str:
    """Normalize the query body.

    join_lines=True trims every line, drops blank ones and joins the rest
    with a single space. Otherwise line breaks are kept; lines are only
    right-trimmed and leading/trailing blank lines are removed.
    """
    if join_lines:
        return " ".join(line.strip() for line in text.splitlines() if line.strip())

    lines = [line.rstrip() for line in text.splitlines()]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


def clean_query(raw_query: str, join_lines: bool = True) -> CleanedQuery:
    """Split 'SET timestamp=...;' and 'use db;' off the query body."""
    set_timestamp, remaining = extract_directive(_SET_TIMESTAMP_RE, raw_query)
    use_schema, remaining = extract_directive(_USE_SCHEMA_RE, remaining)
    return CleanedQuery(
        set_timestamp=set_timestamp,
        use_schema=use_schema,
        query=normalize_query(remaining, join_lines),
    )


def columns_for(extended: bool = False) -> tuple[str, ...]:
    return EXTENDED_COLUMNS if extended else BASE_COLUMNS


def entry_to_dict(entry: SlowQueryEntry, join_lines: bool = True) -> dict:
    """All output fields of an entry, keyed by column name."""
    cleaned = clean_query(entry.query, join_lines)
    values = asdict(entry)
    values["set_timestamp"] = cleaned.set_timestamp
    values["use_schema"] = cleaned.use_schema
    values["query"] = cleaned.query
    return values


def entry_to_row(entry: SlowQueryEntry, extended: bool = False, join_lines: bool = True) -> list:
    """Map an entry onto the ordered column layout.

    Numeric fields stay int/float so the CSV writer leaves them unquoted.
    """
    values = entry_to_dict(entry, join_lines)
    return [values[column] for column in columns_for(extended)]
