#!/usr/bin/env python3
"""slow-query-converter — MariaDB/MySQL slow query log to CSV."""

import argparse
import logging
import os
import sys

from slowlog_csv.config import ConfigError, load_config, load_yaml_config
from slowlog_csv.converter import convert
from slowlog_csv.stats import format_stats_json, format_stats_text

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [SLOWLOG] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slow-query-converter",
        description="Convert a MariaDB/MySQL slow query log into CSV, one row per query.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "-i", "--input", required=True,
        help="Slow query log to read ('-' for stdin, *.gz is decompressed)",
    )
    parser.add_argument(
        "-o", "--output", default=None,
        help="CSV file to write (default: stdout)",
    )
    parser.add_argument(
        "--extended", action="store_true", default=None,
        help="Add tmp table, full scan/join and filesort columns",
    )
    parser.add_argument(
        "--keep-line-breaks", action="store_true", default=None,
        help="Keep line breaks inside the query column instead of joining lines",
    )
    parser.add_argument(
        "--delimiter", default=None,
        help="Field delimiter (default: ','; 'tab' for TSV)",
    )
    parser.add_argument(
        "--log-level", default=None,
        help="Logging level for stderr output (default: INFO)",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--stats", action="store_true",
        help="Print conversion statistics as JSON to stderr when done",
    )
    return parser


def run(argv=None) -> int:
    parser = build_cli_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args, load_yaml_config(args.config))
    except ConfigError as e:
        parser.error(str(e))

    logging.getLogger().setLevel(config.log_level)

    logger.info("Input file: %s", config.input_path)
    logger.info("Output: %s", config.output_path or "<stdout>")

    try:
        stats = convert(config)
    except BrokenPipeError:
        raise
    except OSError as e:
        logger.error("Conversion failed: %s", e)
        return 1

    logger.info("Success! Converted %d slow query entries.", stats.entries_written)
    logger.info("Stats: %s", format_stats_text(stats))
    if args.stats:
        print(format_stats_json(stats), file=sys.stderr)
    return 0


def main():
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        sys.exit(130)
    except BrokenPipeError:
        # stdout is gone; point it at devnull so the flush at exit stays quiet
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(0)


if __name__ == "__main__":
    main()
