"""Slow query entry dataclass and the CSV column layouts."""

from dataclasses import dataclass


BASE_COLUMNS = (
    "time",
    "user",
    "host",
    "thread_id",
    "schema",
    "qc_hit",
    "set_timestamp",
    "use_schema",
    "query",
    "query_time",
    "lock_time",
    "rows_sent",
    "rows_examined",
    "rows_affected",
    "bytes_sent",
)

EXTENDED_COLUMNS = BASE_COLUMNS + (
    "tmp_tables",
    "tmp_disk_tables",
    "tmp_table_sizes",
    "full_scan",
    "full_join",
    "tmp_table",
    "tmp_table_on_disk",
    "filesort",
    "filesort_on_disk",
    "merge_passes",
    "priority_queue",
)

# Metadata label (as written in the log) -> (entry attribute, converter name)
METADATA_FIELDS = {
    "Thread_id": ("thread_id", "str"),
    "Schema": ("schema", "str"),
    "QC_hit": ("qc_hit", "str"),
    "Query_time": ("query_time", "float"),
    "Lock_time": ("lock_time", "float"),
    "Rows_sent": ("rows_sent", "int"),
    "Rows_examined": ("rows_examined", "int"),
    "Rows_affected": ("rows_affected", "int"),
    "Bytes_sent": ("bytes_sent", "int"),
    "Tmp_tables": ("tmp_tables", "int"),
    "Tmp_disk_tables": ("tmp_disk_tables", "int"),
    "Tmp_table_sizes": ("tmp_table_sizes", "int"),
    "Full_scan": ("full_scan", "str"),
    "Full_join": ("full_join", "str"),
    "Tmp_table": ("tmp_table", "str"),
    "Tmp_table_on_disk": ("tmp_table_on_disk", "str"),
    "Filesort": ("filesort", "str"),
    "Filesort_on_disk": ("filesort_on_disk", "str"),
    "Merge_passes": ("merge_passes", "int"),
    "Priority_queue": ("priority_queue", "str"),
}


@dataclass
class SlowQueryEntry:
    time: str = ""
    user: str = ""
    host: str = ""
    thread_id: str = ""
    schema: str = ""
    qc_hit: str = ""

    query_time: float = 0.0
    lock_time: float = 0.0
    rows_sent: int = 0
    rows_examined: int = 0
    rows_affected: int = 0
    bytes_sent: int = 0

    tmp_tables: int = 0
    tmp_disk_tables: int = 0
    tmp_table_sizes: int = 0
    merge_passes: int = 0

    full_scan: str = ""
    full_join: str = ""
    tmp_table: str = ""
    tmp_table_on_disk: str = ""
    filesort: str = ""
    filesort_on_disk: str = ""
    priority_queue: str = ""

    query: str = ""  # raw body lines, each terminated by "\n"

    def is_valid(self) -> bool:
        """A record is complete enough to emit once it has a thread id."""
        return bool(self.thread_id)

    def append_query_line(self, line: str) -> None:
        self.query += line + "\n"

    def apply_fields(self, fields: dict) -> None:
        """Merge parsed metadata values (keyed by attribute name) into the entry."""
        for name, value in fields.items():
            setattr(self, name, value)
