"""Console logging for lp-oracle.

Logs always go to stderr: stdout is reserved for the report, which must
stay parseable when ``--format json`` is used.
"""

import logging
import sys
from typing import TextIO

# Below DEBUG; also unmutes the HTTP client loggers
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# HTTP client loggers that flood DEBUG output with connection chatter
HTTP_LOGGERS = ("requests", "urllib3")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Colors the level name with ANSI codes, leaving the record untouched."""

    LEVEL_COLORS = {
        "TRACE": "\033[90m",
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        color = self.LEVEL_COLORS.get(original)
        if color is not None:
            record.levelname = f"{color}{self.BOLD}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def resolve_level(log_level: str) -> int:
    """Map a level name (case-insensitive, TRACE included) to its number."""
    name = log_level.upper()
    if name == "TRACE":
        return TRACE
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_level: str = "INFO", stream: TextIO | None = None) -> None:
    """Install the colored console handler on the root logger.

    At DEBUG the HTTP client loggers are held at WARNING; at TRACE they
    are let through as well.
    """
    level = resolve_level(log_level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)

    http_level = TRACE if level <= TRACE else logging.WARNING
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level if level <= logging.DEBUG else logging.NOTSET)
