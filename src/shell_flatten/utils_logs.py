# src/shell_flatten/utils_logs.py
"""Logging for shell-flatten: stdlib `logging` with an extra TRACE level.

The flattened script may be streamed to stdout, so the handler chooses a
stream for every record instead of holding one: while
`current_runtime["log_to_stderr"]` is set, nothing is logged to stdout.
"""

import logging
import sys
from typing import Any, TextIO, cast

from .meta import PROGRAM_PACKAGE
from .runtime import current_runtime

TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1
logging.addLevelName(TRACE_LEVEL, "TRACE")

# CLI level names, quietest last
LEVELS: dict[str, int] = {
    "trace": TRACE_LEVEL,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "silent": SILENT_LEVEL,
}
LEVEL_ORDER = list(LEVELS)

RESET = "\033[0m"
GRAY = "\033[90m"
CYAN = "\033[36m"
GREEN = "\033[92m"

# levelno → (tag, color); info carries no tag
_TAGS: dict[int, tuple[str, str]] = {
    TRACE_LEVEL: ("[TRACE]", GRAY),
    logging.DEBUG: ("[DEBUG]", CYAN),
    logging.WARNING: ("⚠️ ", ""),
    logging.ERROR: ("❌ ", ""),
    logging.CRITICAL: ("💥 ", ""),
}


def colorize(text: str, color: str, *, use_color: bool | None = None) -> str:
    if use_color is None:
        use_color = current_runtime["use_color"]
    return f"{color}{text}{RESET}" if use_color and color else text


class FlattenLogger(logging.Logger):
    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)


class TagFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        tag, color = _TAGS.get(record.levelno, ("", ""))
        return f"{colorize(tag, color)} {text}" if tag else text


class RoutingHandler(logging.StreamHandler[TextIO]):
    """Info and below to stdout, the rest to stderr; all of it to stderr
    while stdout is reserved for the flattened script."""

    def emit(self, record: logging.LogRecord) -> None:
        to_stderr = record.levelno >= logging.WARNING or current_runtime["log_to_stderr"]
        # looked up per record so replaced streams (tests, capture) are honored
        self.stream = sys.stderr if to_stderr else sys.stdout
        super().emit(record)


def _build_logger() -> FlattenLogger:
    previous = logging.getLoggerClass()
    logging.setLoggerClass(FlattenLogger)
    try:
        logger = cast("FlattenLogger", logging.getLogger(PROGRAM_PACKAGE))
    finally:
        logging.setLoggerClass(previous)

    handler = RoutingHandler()
    handler.setFormatter(TagFormatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


_logger = _build_logger()


def get_logger() -> FlattenLogger:
    """Return the package logger, synced to the runtime log level."""
    _logger.setLevel(LEVELS.get(current_runtime["log_level"], logging.INFO))
    return _logger


def set_log_level(level: str) -> None:
    if level not in LEVELS:
        xmsg = f"Unknown log level: {level!r} (expected one of {', '.join(LEVELS)})"
        raise ValueError(xmsg)
    current_runtime["log_level"] = level
    get_logger()


def log(level: str, message: str) -> None:
    """Log `message` at a level given by name ('trace', 'info', ...)."""
    logger = get_logger()
    levelno = LEVELS.get(level.lower())
    if levelno is None or levelno == SILENT_LEVEL:
        logger.error("Unknown log level: %r", level)
        return
    logger.log(levelno, message)
