"""Configuration loading from CLI args, env vars, and an optional YAML file.

Precedence (highest first): CLI flags, SLOWLOG_* environment variables,
YAML file, dataclass defaults.
"""

import logging
import os
import re
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Friendly spellings accepted for --delimiter
_DELIMITER_ALIASES = {"\\t": "\t", "tab": "\t", "TAB": "\t"}


class ConfigError(ValueError):
    """Raised for configuration values that cannot be used."""


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return _parse_bool(value)
    return bool(value)


@dataclass(frozen=True)
class Config:
    input_path: str = "-"
    output_path: str | None = None  # None -> stdout
    extended: bool = False
    join_query_lines: bool = True
    delimiter: str = ","
    skip_patterns: tuple[str, ...] = ()
    log_level: str = "INFO"


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Invalid YAML in %s (%s), using defaults", path, e)
        return {}
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read config file %s (%s), using defaults", path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, using defaults", path)
        return {}
    logger.info("Loaded YAML config from %s", path)
    return data


def _validate_delimiter(value: str) -> str:
    value = _DELIMITER_ALIASES.get(value, value)
    if len(value) != 1:
        raise ConfigError(f"delimiter must be a single character, got {value!r}")
    if value in ('"', "\n", "\r"):
        raise ConfigError(f"delimiter {value!r} cannot be used")
    return value


def _validate_log_level(value: str) -> str:
    level = str(value).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
    return level


def _validate_skip_patterns(patterns) -> tuple[str, ...]:
    if isinstance(patterns, str):
        patterns = [patterns]
    result = []
    for pattern in patterns or ():
        try:
            re.compile(pattern)
        except (re.error, TypeError) as e:
            raise ConfigError(f"invalid skip pattern {pattern!r}: {e}") from e
        result.append(pattern)
    return tuple(result)


def load_config(cli_args, yaml_data: dict) -> Config:
    """Build Config from CLI args, env vars, and parsed YAML data."""
    extended = yaml_data.get("extended", Config.extended)
    join_query_lines = yaml_data.get("join_query_lines", Config.join_query_lines)
    delimiter = yaml_data.get("delimiter", Config.delimiter)
    log_level = yaml_data.get("log_level", Config.log_level)

    if "SLOWLOG_EXTENDED" in os.environ:
        extended = _parse_bool(os.environ["SLOWLOG_EXTENDED"])
    if "SLOWLOG_JOIN_QUERY_LINES" in os.environ:
        join_query_lines = _parse_bool(os.environ["SLOWLOG_JOIN_QUERY_LINES"])
    delimiter = os.environ.get("SLOWLOG_DELIMITER", delimiter)
    log_level = os.environ.get("SLOWLOG_LOG_LEVEL", log_level)

    # CLI flags override env vars
    if getattr(cli_args, "extended", None):
        extended = True
    if getattr(cli_args, "keep_line_breaks", None):
        join_query_lines = False
    if getattr(cli_args, "delimiter", None) is not None:
        delimiter = cli_args.delimiter
    if getattr(cli_args, "log_level", None) is not None:
        log_level = cli_args.log_level

    return Config(
        input_path=cli_args.input,
        output_path=getattr(cli_args, "output", None),
        extended=_as_bool(extended),
        join_query_lines=_as_bool(join_query_lines),
        delimiter=_validate_delimiter(str(delimiter)),
        skip_patterns=_validate_skip_patterns(yaml_data.get("skip_patterns", ())),
        log_level=_validate_log_level(log_level),
    )
