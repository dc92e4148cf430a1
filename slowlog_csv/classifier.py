"""Line classifier for MariaDB/MySQL slow query logs.

Every input line maps to exactly one LineKind. Patterns are tried in a fixed
order and the first match wins:
  1. SKIP       server start-up banner / column header written on rotation
  2. TIME       "# Time: 230101 10:00:00"
  3. CONNECTION "# User@Host: root[root] @ localhost []"
  4. METADATA   one of the fixed "# Label: value  Label: value" shapes
  5. BLANK      empty or whitespace-only
  6. COMMENT    any other '#' line (unknown metadata, ignored)
  7. BODY       query text
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from slowlog_csv.models import METADATA_FIELDS

COMMENT_MARKER = "#"

# ---------------------------------------------------------------------------
# Compiled regex patterns
# ---------------------------------------------------------------------------

DEFAULT_SKIP_PATTERNS = (
    # /usr/sbin/mariadbd, Version: 10.6.12-MariaDB-log (MariaDB Server). started with:
    re.compile(r"^.+, Version: .+ started with:\s*$"),
    # Tcp port: 3306  Unix socket: /run/mysqld/mysqld.sock
    re.compile(r"^Tcp port: \d+\s+Unix socket: "),
    # Time                 Id Command    Argument
    re.compile(r"^Time\s+Id\s+Command\s+Argument"),
)

_TIME_RE = re.compile(r"^# Time:\s*(?P<time>.*)$")

_USER_HOST_RE = re.compile(
    r"^# User@Host: (?P<user>.*?)\s*@\s*(?P<host>.*?)"
    r"(?:\s+Id:\s*(?P<id>\d+))?\s*$"
)

# "localhost []", "[10.0.0.7]", "app01 [10.0.0.7]"
_HOST_RE = re.compile(r"^(?P<name>[^\s\[\]]*)\s*(?:\[(?P<ip>[^\]]*)\])?")

METADATA_SHAPES = (
    ("Thread_id", "Schema", "QC_hit"),
    ("Query_time", "Lock_time", "Rows_sent", "Rows_examined"),
    ("Rows_affected", "Bytes_sent"),
    ("Tmp_tables", "Tmp_disk_tables", "Tmp_table_sizes"),
    ("Full_scan", "Full_join", "Tmp_table", "Tmp_table_on_disk"),
    ("Filesort", "Filesort_on_disk", "Merge_passes", "Priority_queue"),
)


def _shape_pattern(labels: tuple[str, ...]) -> re.Pattern:
    """Build '^# A: (?P<A>..)  B: (?P<B>..)' for a metadata shape."""
    parts = [rf"{label}:\s*(?P<{label}>\S*)" for label in labels]
    return re.compile(r"^#\s+" + r"\s+".join(parts))


_METADATA_RES = tuple(_shape_pattern(labels) for labels in METADATA_SHAPES)


class LineKind(Enum):
    SKIP = "skip"
    TIME = "time"
    CONNECTION = "connection"
    METADATA = "metadata"
    BLANK = "blank"
    COMMENT = "comment"
    BODY = "body"


@dataclass(frozen=True)
class ClassifiedLine:
    kind: LineKind
    text: str = ""  # raw time for TIME, the line itself for BODY
    fields: dict = field(default_factory=dict)  # entry attribute -> value
    invalid_fields: tuple[str, ...] = ()  # labels whose numeric value defaulted to 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _safe_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _safe_float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


_CONVERTERS = {"int": _safe_int, "float": _safe_float}


def split_user(user_field: str) -> str:
    """'root[root]' -> 'root'. The bracketed effective user is dropped."""
    return user_field.split("[", 1)[0].strip()


def normalize_host(host_field: str) -> str:
    """Strip brackets and whitespace.

    'localhost []' -> 'localhost', '[10.0.0.7]' -> '10.0.0.7' and
    'db01 [10.0.0.9]' -> 'db01 (10.0.0.9)'.
    """
    m = _HOST_RE.match(host_field.strip())
    name = m.group("name")
    ip = (m.group("ip") or "").strip()
    if name and ip:
        return f"{name} ({ip})"
    return name or ip


def convert_metadata(groups: dict[str, str]) -> tuple[dict, tuple[str, ...]]:
    """Convert captured label values into typed entry attributes.

    Numeric values that do not parse become 0; their labels are returned so
    the caller can count them.
    """
    fields = {}
    invalid = []
    for label, raw in groups.items():
        attr, kind = METADATA_FIELDS[label]
        if kind == "str":
            fields[attr] = raw.strip()
            continue
        value = _CONVERTERS[kind](raw)
        if value is None:
            invalid.append(label)
            value = 0 if kind == "int" else 0.0
        fields[attr] = value
    return fields, tuple(invalid)


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


class LineClassifier:
    """Classifies slow log lines. Extra skip regexes extend the built-in banners."""

    def __init__(self, extra_skip_patterns: Iterable[str | re.Pattern] = ()):
        extra = tuple(
            p if isinstance(p, re.Pattern) else re.compile(p)
            for p in extra_skip_patterns
        )
        self._skip_patterns = DEFAULT_SKIP_PATTERNS + extra

    def classify(self, line: str) -> ClassifiedLine:
        line = line.rstrip("\r\n")

        for pattern in self._skip_patterns:
            if pattern.search(line):
                return ClassifiedLine(LineKind.SKIP)

        m = _TIME_RE.match(line)
        if m:
            return ClassifiedLine(LineKind.TIME, text=m.group("time").strip())

        m = _USER_HOST_RE.match(line)
        if m:
            fields = {
                "user": split_user(m.group("user")),
                "host": normalize_host(m.group("host")),
            }
            if m.group("id"):
                fields["thread_id"] = m.group("id")
            return ClassifiedLine(LineKind.CONNECTION, fields=fields)

        for pattern in _METADATA_RES:
            m = pattern.match(line)
            if m:
                fields, invalid = convert_metadata(m.groupdict())
                return ClassifiedLine(LineKind.METADATA, fields=fields, invalid_fields=invalid)

        if not line.strip():
            return ClassifiedLine(LineKind.BLANK)

        if line.startswith(COMMENT_MARKER):
            return ClassifiedLine(LineKind.COMMENT, text=line)

        return ClassifiedLine(LineKind.BODY, text=line)


_default_classifier = LineClassifier()


def classify_line(line: str) -> ClassifiedLine:
    """Classify a line with the built-in patterns only."""
    return _default_classifier.classify(line)
