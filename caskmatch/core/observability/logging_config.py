"""
Logging configuration — set up once by the CLI.

Modules only ever do ``logger = logging.getLogger(__name__)``.

Console level precedence:
    --debug / --verbose / --quiet  >  CASKMATCH_LOG_LEVEL  >  WARNING

A log file is added when CASKMATCH_LOG_FILE is set; its level comes from
CASKMATCH_LOG_FILE_LEVEL, else matches the console.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LOG_LEVEL = "CASKMATCH_LOG_LEVEL"
ENV_LOG_FILE = "CASKMATCH_LOG_FILE"
ENV_LOG_FILE_LEVEL = "CASKMATCH_LOG_FILE_LEVEL"

# ── Formats ─────────────────────────────────────────────────────

# (threshold, format, datefmt): first row whose threshold >= level wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(name)s: %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s [%(threadName)s] %(name)s:%(lineno)d — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Stdlib loggers that chatter below WARNING
_NOISY_LOGGERS = ("concurrent.futures", "urllib", "asyncio")


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Console level name from CLI flags, falling back to the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(ENV_LOG_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Where to also write log records, if anywhere.
        log_file_level: Level for the log file; defaults to ``level``.
        quiet_third_party: Hold noisy loggers at WARNING unless at DEBUG.
    """
    console_level = _parse_level(level)
    handlers = [_build_handler(logging.StreamHandler(sys.stderr), console_level, *_console_format(console_level))]

    if log_file:
        file_level = _parse_level(log_file_level or level)
        handlers.append(_build_handler(
            logging.FileHandler(log_file, encoding="utf-8"), file_level, _FILE_FORMAT, _FILE_DATEFMT,
        ))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    # Root passes everything any handler wants; handlers do the filtering
    root.setLevel(min(handler.level for handler in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # A closed stderr must never crash a run
    logging.raiseExceptions = False


def setup_from_flags(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Resolve levels and file output, configure logging, return the console level."""
    env = os.environ if environ is None else environ
    level = resolve_level(debug, verbose, quiet, env)
    setup_logging(
        level=level,
        log_file=env.get(ENV_LOG_FILE) or None,
        log_file_level=env.get(ENV_LOG_FILE_LEVEL) or None,
        quiet_third_party=not debug,
    )
    return level


def _console_format(level: int) -> tuple[str, str | None]:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return fmt, datefmt
    return _CONSOLE_FORMATS[-1][1], None


def _build_handler(handler: logging.Handler, level: int, fmt: str, datefmt: str | None) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    value = logging.getLevelName(level.upper()) if level else None
    return value if isinstance(value, int) else logging.WARNING
