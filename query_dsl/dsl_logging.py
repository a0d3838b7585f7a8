"""
Logging for query-dsl.

Usage in modules:
    from query_dsl.dsl_logging import get_logger
    logger = get_logger(__name__)

Every module logs under "qdsl.<module>". The CLI calls `configure_logging`
once per invocation; the level comes from -v/-q or QDSL_LOG_LEVEL, and
QDSL_LOG_FILE (or --log-file) adds a timestamped file log next to stderr.
"""

import logging
import sys
from typing import Optional

from query_dsl.config import settings

_LOGGER_NAME = "qdsl"

# Marks handlers installed here so reconfiguring never touches foreign ones
_OWNED = "_qdsl_handler"


def get_logger(name: str = None) -> logging.Logger:
    """Return `qdsl` for None, otherwise `qdsl.<last component of name>`."""
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    # "query_dsl.validation.query_validators" -> "qdsl.query_validators"
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


def resolve_level(verbose: bool = False, quiet: bool = False) -> int:
    """
    Pick the level for one run.

    -v wins over -q; without either, QDSL_LOG_LEVEL is used and an unknown
    level name falls back to INFO.
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """
    (Re)configure the qdsl logger hierarchy and return its root.

    Handlers from an earlier call are closed and replaced, so repeated CLI
    invocations in one process (tests, CliRunner) never stack output.

    Args:
        verbose:  DEBUG output.
        quiet:    WARNING and above only.
        log_file: Also write to this file; defaults to QDSL_LOG_FILE.
    """
    level = resolve_level(verbose, quiet)
    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.propagate = False

    for handler in list(root_logger.handlers):
        if getattr(handler, _OWNED, False):
            root_logger.removeHandler(handler)
            handler.close()

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(_ComponentFormatter())
    _install(root_logger, stream, level)

    log_file = log_file or settings.LOG_FILE
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        # the file keeps debug detail even when the console is quiet
        _install(root_logger, file_handler, logging.DEBUG)
        root_logger.setLevel(logging.DEBUG)

    return root_logger


def _install(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    setattr(handler, _OWNED, True)
    logger.addHandler(handler)


class _ComponentFormatter(logging.Formatter):
    """`[LEVEL] component: message`, where component is the logger name below qdsl."""

    def format(self, record: logging.LogRecord) -> str:
        component = record.name[len(_LOGGER_NAME) + 1:] if record.name.startswith(_LOGGER_NAME + ".") else ""
        prefix = f"[{record.levelname}] {component}: " if component else f"[{record.levelname}] "
        return prefix + record.getMessage()
