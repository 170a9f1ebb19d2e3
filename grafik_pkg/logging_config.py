"""Logging setup for Grafik.

Every module logs through ``get_logger`` under the ``grafik`` hierarchy.
Records about a particular formula carry it as ``extra={"formula": text}``,
and the formatter appends it to the line, so warnings from the solver or the
renderer can be traced back to the input that caused them.
"""

import logging
import sys
from datetime import datetime
from typing import Optional

from .config import LOG_LEVEL

ROOT_LOGGER = "grafik"
_PACKAGE = "grafik_pkg"


class StructuredFormatter(logging.Formatter):
    """``<iso time> [LEVEL] logger: message`` plus the formula, if any."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        message = f"{timestamp} [{record.levelname}] {record.name}: {record.getMessage()}"
        formula = getattr(record, "formula", None)
        if formula is not None:
            message = f"{message} [formula={formula!r}]"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def setup_logging(
    level: Optional[str] = None, log_file: Optional[str] = None
) -> logging.Logger:
    """Configure the ``grafik`` logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR (default: GRAFIK_LOG_LEVEL)
        log_file: Also write records to this file

    Returns:
        The configured ``grafik`` logger

    Calling it again replaces the handlers of the previous call.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.WARNING))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger for a Grafik module.

    Accepts a short name ("sampler") or a module ``__name__``
    ("grafik_pkg.sampler"); both map to ``grafik.sampler``.
    """
    if name in (ROOT_LOGGER, _PACKAGE):
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(_PACKAGE + "."):
        name = name[len(_PACKAGE) + 1 :]
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
