"""Logging for annote runs.

Everything logs under the ``annote`` logger. The console handler writes to
stderr so that stdout stays free for ``FAILED`` lines and service output.
Batch runs annotate files on worker threads, so the file sink records the
thread name next to each message.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import IO, Optional

ROOT_LOGGER = "annote"
CONSOLE_FORMAT = "[annote] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``annote.<name>``, or the root annote logger when `name` is empty."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def reset_logging() -> logging.Logger:
    """Detach and close every handler on the annote logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    return logger


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Optional[Path] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Install the console handler and, when `log_file` is set, a file sink.

    Calling this again replaces the previous handlers. The log file's parent
    directory is created if needed and the file is appended to.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = reset_logging()
    logger.setLevel(level)
    logger.propagate = False

    _attach(logger, logging.StreamHandler(stream or sys.stderr), level, CONSOLE_FORMAT)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_path, encoding="utf-8"), level, FILE_FORMAT)

    logger.debug("Logging at %s", logging.getLevelName(level))
    return logger


__all__ = ["configure_logging", "get_logger", "reset_logging"]
