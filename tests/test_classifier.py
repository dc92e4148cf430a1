"""Tests for slowlog_csv/classifier.py"""

import unittest

from slowlog_csv.classifier import (
    LineClassifier,
    LineKind,
    classify_line,
    normalize_host,
    split_user,
)


class TestSkipLines(unittest.TestCase):
    """Start-up banners and rotation headers carry no data."""

    def test_version_banner(self):
        line = "/usr/sbin/mariadbd, Version: 10.6.12-MariaDB-log (MariaDB Server). started with:"
        self.assertEqual(classify_line(line).kind, LineKind.SKIP)

    def test_tcp_port_banner(self):
        line = "Tcp port: 3306  Unix socket: /run/mysqld/mysqld.sock"
        self.assertEqual(classify_line(line).kind, LineKind.SKIP)

    def test_column_header_banner(self):
        line = "Time                 Id Command    Argument"
        self.assertEqual(classify_line(line).kind, LineKind.SKIP)

    def test_extra_skip_pattern(self):
        classifier = LineClassifier([r"^-- rotated by logrotate"])
        self.assertEqual(classifier.classify("-- rotated by logrotate at 03:00").kind, LineKind.SKIP)
        # built-in banners still apply
        self.assertEqual(classifier.classify("Tcp port: 0  Unix socket: x").kind, LineKind.SKIP)

    def test_extra_pattern_not_applied_by_default(self):
        self.assertEqual(classify_line("-- rotated by logrotate").kind, LineKind.BODY)


class TestTimeHeader(unittest.TestCase):
    def test_captures_raw_time(self):
        result = classify_line("# Time: 230101 10:00:00")
        self.assertEqual(result.kind, LineKind.TIME)
        self.assertEqual(result.text, "230101 10:00:00")

    def test_unpadded_time_kept_verbatim(self):
        result = classify_line("# Time: 230102  9:05:03   ")
        self.assertEqual(result.kind, LineKind.TIME)
        self.assertEqual(result.text, "230102  9:05:03")

    def test_iso_time_still_a_time_header(self):
        result = classify_line("# Time: 2023-01-01T10:00:00.123456Z")
        self.assertEqual(result.kind, LineKind.TIME)
        self.assertEqual(result.text, "2023-01-01T10:00:00.123456Z")


class TestConnectionHeader(unittest.TestCase):
    def test_user_and_empty_bracket_host(self):
        result = classify_line("# User@Host: root[root] @ localhost []")
        self.assertEqual(result.kind, LineKind.CONNECTION)
        self.assertEqual(result.fields, {"user": "root", "host": "localhost"})

    def test_bracketed_ip_host(self):
        result = classify_line("# User@Host: app[app] @  [10.0.0.7]")
        self.assertEqual(result.fields["user"], "app")
        self.assertEqual(result.fields["host"], "10.0.0.7")

    def test_name_and_ip_host_keeps_both(self):
        result = classify_line("# User@Host: report[report] @ analytics.internal [10.0.0.9]")
        self.assertEqual(result.fields["host"], "analytics.internal (10.0.0.9)")

    def test_mysql_id_suffix_becomes_thread_id(self):
        result = classify_line("# User@Host: root[root] @ localhost []  Id:    42")
        self.assertEqual(result.fields["host"], "localhost")
        self.assertEqual(result.fields["thread_id"], "42")

    def test_no_thread_id_without_suffix(self):
        result = classify_line("# User@Host: root[root] @ localhost []")
        self.assertNotIn("thread_id", result.fields)


class TestUserHostHelpers(unittest.TestCase):
    def test_split_user_drops_effective_user(self):
        self.assertEqual(split_user("root[root]"), "root")
        self.assertEqual(split_user("app[proxy] "), "app")

    def test_split_user_plain(self):
        self.assertEqual(split_user("root"), "root")

    def test_normalize_host_variants(self):
        self.assertEqual(normalize_host("localhost []"), "localhost")
        self.assertEqual(normalize_host(" [127.0.0.1] "), "127.0.0.1")
        self.assertEqual(normalize_host("db01"), "db01")
        self.assertEqual(normalize_host(""), "")
        self.assertEqual(normalize_host("[]"), "")
        self.assertEqual(normalize_host("db01 [10.1.2.3]"), "db01 (10.1.2.3)")
        self.assertEqual(normalize_host("db01 [ ]"), "db01")


class TestMetadataHeaders(unittest.TestCase):
    def test_thread_schema_qc(self):
        result = classify_line("# Thread_id: 5  Schema: test  QC_hit: No")
        self.assertEqual(result.kind, LineKind.METADATA)
        self.assertEqual(result.fields, {"thread_id": "5", "schema": "test", "qc_hit": "No"})

    def test_empty_schema(self):
        result = classify_line("# Thread_id: 8  Schema:   QC_hit: No")
        self.assertEqual(result.fields["schema"], "")
        self.assertEqual(result.fields["qc_hit"], "No")

    def test_query_time_line(self):
        result = classify_line("# Query_time: 1.5  Lock_time: 0.0  Rows_sent: 1  Rows_examined: 10")
        self.assertEqual(result.fields, {
            "query_time": 1.5, "lock_time": 0.0, "rows_sent": 1, "rows_examined": 10,
        })
        self.assertEqual(result.invalid_fields, ())

    def test_mysql_single_space_separators(self):
        result = classify_line("# Query_time: 4.000194  Lock_time: 0.000000 Rows_sent: 1  Rows_examined: 0")
        self.assertEqual(result.fields["query_time"], 4.000194)
        self.assertEqual(result.fields["rows_sent"], 1)

    def test_rows_affected_bytes_sent(self):
        result = classify_line("# Rows_affected: 250  Bytes_sent: 11")
        self.assertEqual(result.fields, {"rows_affected": 250, "bytes_sent": 11})

    def test_tmp_table_counters(self):
        result = classify_line("# Tmp_tables: 1  Tmp_disk_tables: 0  Tmp_table_sizes: 4016")
        self.assertEqual(result.fields, {"tmp_tables": 1, "tmp_disk_tables": 0, "tmp_table_sizes": 4016})

    def test_full_scan_flags(self):
        result = classify_line("# Full_scan: Yes  Full_join: No  Tmp_table: Yes  Tmp_table_on_disk: No")
        self.assertEqual(result.fields, {
            "full_scan": "Yes", "full_join": "No", "tmp_table": "Yes", "tmp_table_on_disk": "No",
        })

    def test_filesort_flags(self):
        result = classify_line("# Filesort: Yes  Filesort_on_disk: No  Merge_passes: 2  Priority_queue: No")
        self.assertEqual(result.fields, {
            "filesort": "Yes", "filesort_on_disk": "No", "merge_passes": 2, "priority_queue": "No",
        })

    def test_malformed_number_defaults_to_zero(self):
        result = classify_line("# Query_time: 0.75  Lock_time: 0.0  Rows_sent: abc  Rows_examined: 120")
        self.assertEqual(result.kind, LineKind.METADATA)
        self.assertEqual(result.fields["rows_sent"], 0)
        self.assertEqual(result.fields["rows_examined"], 120)
        self.assertEqual(result.fields["query_time"], 0.75)
        self.assertEqual(result.invalid_fields, ("Rows_sent",))

    def test_malformed_float_defaults_to_zero(self):
        result = classify_line("# Query_time: slow  Lock_time: 0.1  Rows_sent: 1  Rows_examined: 1")
        self.assertEqual(result.fields["query_time"], 0.0)
        self.assertEqual(result.invalid_fields, ("Query_time",))


class TestBodyBlankComment(unittest.TestCase):
    def test_unknown_comment_line(self):
        result = classify_line("# Last_errno: 0  Killed: 0")
        self.assertEqual(result.kind, LineKind.COMMENT)

    def test_blank_lines(self):
        self.assertEqual(classify_line("").kind, LineKind.BLANK)
        self.assertEqual(classify_line("   \t").kind, LineKind.BLANK)

    def test_body_line_kept_verbatim(self):
        result = classify_line("  FROM orders o")
        self.assertEqual(result.kind, LineKind.BODY)
        self.assertEqual(result.text, "  FROM orders o")

    def test_trailing_newline_stripped(self):
        result = classify_line("SELECT 1;\r\n")
        self.assertEqual(result.text, "SELECT 1;")

    def test_every_line_gets_exactly_one_kind(self):
        lines = [
            "# Time: 230101 10:00:00",
            "# User@Host: root[root] @ localhost []",
            "# Thread_id: 5  Schema: test  QC_hit: No",
            "SET timestamp=1;",
            "",
            "# something else",
        ]
        kinds = [classify_line(line).kind for line in lines]
        self.assertEqual(kinds, [
            LineKind.TIME, LineKind.CONNECTION, LineKind.METADATA,
            LineKind.BODY, LineKind.BLANK, LineKind.COMMENT,
        ])


class TestClassifiedLineFrozen(unittest.TestCase):
    def test_cannot_mutate_kind(self):
        result = classify_line("SELECT 1;")
        with self.assertRaises(AttributeError):
            result.kind = LineKind.BLANK


if __name__ == "__main__":
    unittest.main()
