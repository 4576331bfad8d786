"""
Logging setup for the setulab CLI.

``configure_logging`` runs once, from the click group callback.  Modules
only ever do ``logger = logging.getLogger(__name__)``; user-facing status
lines are printed by the CLI with ``click.secho`` and are not log
records.

Console level, highest precedence first:

    --debug / --verbose / --quiet  >  SETULAB_LOG_LEVEL  >  WARNING

A log file is opt-in through SETULAB_LOG_FILE, with its own level from
SETULAB_LOG_FILE_LEVEL (defaults to the console level).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LEVEL = "SETULAB_LOG_LEVEL"
ENV_FILE = "SETULAB_LOG_FILE"
ENV_FILE_LEVEL = "SETULAB_LOG_FILE_LEVEL"

# console level ceiling → (format, datefmt); first match wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Chatty below WARNING even when setulab itself is at INFO
_NOISY_LOGGERS = ("urllib3", "asyncio")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Replace the root logger's handlers with setulab's.

    Args:
        level: Console level name.
        log_file: Also write records to this file.
        log_file_level: Level for the file; the console level when None.
        quiet_third_party: Hold ``_NOISY_LOGGERS`` at WARNING unless the
            console is at DEBUG.
    """
    console_level = _parse_level(level)
    fmt, datefmt = next(
        (f, d) for ceiling, f, d in _CONSOLE_FORMATS if console_level <= ceiling
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def configure_logging(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Set up logging from the global CLI flags and SETULAB_LOG_* vars.

    Returns:
        The console level name that was applied.
    """
    env = os.environ if environ is None else environ
    level = resolve_level(debug=debug, verbose=verbose, quiet=quiet, env_level=env.get(ENV_LEVEL))
    setup_logging(
        level=level,
        log_file=env.get(ENV_FILE),
        log_file_level=env.get(ENV_FILE_LEVEL),
        quiet_third_party=not debug,
    )
    return level


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Console level name for the given flags."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env_level.upper() if env_level else "WARNING"


def _parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown names mean WARNING."""
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
