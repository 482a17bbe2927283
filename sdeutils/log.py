"""Levelled diagnostic messages written to a stream, coloured on terminals."""

from __future__ import annotations

import enum
import functools
import os
import re
import sys
import time
from typing import TextIO

__all__ = [
    "LogLevel",
    "colors_supported",
    "get_log_level",
    "set_log_level",
    "log_message",
    "error",
    "warning",
    "info",
    "debug",
    "debug2",
    "print_error_message",
]


class LogLevel(enum.IntEnum):
    """Message severities; a message is shown when its level is at most the current one."""

    NONE = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    DEBUG = 4
    DEBUG_SPAM = 5
    DEBUG_2 = 5
    ALL = 6


class _Color(enum.Enum):
    RED = "\033[0;31m"
    GREEN = "\033[0;32m"
    ORANGE = "\033[0;33m"
    BLUE = "\033[0;34m"
    TEAL = "\033[0;36m"
    LIGHT_YELLOW = "\033[1;33m"
    LIGHT_BLUE = "\033[1;34m"
    LIGHT_PURPLE = "\033[1;35m"
    NORMAL = "\033[0m"


_COLOR_TERMINALS = ("xterm", "rxvt", "Eterm", "aterm", "kterm", "gnome", "screen")

_MODIFIERS = {
    LogLevel.ERROR: ("ERR", _Color.RED),
    LogLevel.WARNING: ("WRN", _Color.ORANGE),
    LogLevel.INFO: ("INF", _Color.GREEN),
    LogLevel.DEBUG: ("DBG", _Color.TEAL),
    LogLevel.DEBUG_SPAM: ("DBG", _Color.BLUE),
}

_LEVEL_ENV = "SDE_LOG_LEVEL"

_log_level: int | None = None


@functools.lru_cache(maxsize=None)
def colors_supported() -> bool:
    """Whether $TERM names a terminal known to understand ANSI colours (cached)."""
    term = os.environ.get("TERM")
    return term is not None and term.startswith(_COLOR_TERMINALS)


def _color(color: _Color, stream: TextIO | None) -> str:
    if not colors_supported() or stream is None:
        return ""
    isatty = getattr(stream, "isatty", None)
    try:
        if isatty is None or not isatty():
            return ""
    except (OSError, ValueError):
        return ""
    return color.value


def _parse_leading_int(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def get_log_level() -> int:
    """Return the current level, reading $SDE_LOG_LEVEL on first use."""
    global _log_level
    if _log_level is None:
        value = os.environ.get(_LEVEL_ENV)
        _log_level = _parse_leading_int(value) if value is not None else int(LogLevel.WARNING)
    return _log_level


def set_log_level(level: int | None) -> None:
    """Set the current level; None makes the next query read the environment again."""
    global _log_level
    _log_level = None if level is None else int(level)


def _program_name() -> str | None:
    if not sys.argv or not sys.argv[0]:
        return None
    return os.path.basename(sys.argv[0]) or None


def log_message(level: int, message: str, *args: object, stream: TextIO | None = None) -> None:
    """Write a prefixed, timestamped message if *level* passes the current filter.

    *args*, when given, are interpolated into *message* with ``%``.
    A newline is appended unless *message* already ends with one.
    """
    if int(level) > get_log_level():
        return
    if not message:
        return

    if stream is None:
        stream = sys.stderr

    modifier, modifier_color = _MODIFIERS.get(int(level), ("XXX", _Color.RED))
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
    program = _program_name() or "<unknown>"
    text = message % args if args else message

    stream.write(
        f"{_color(modifier_color, stream)}[{modifier}]{_color(_Color.NORMAL, stream)} "
        f"{timestamp} "
        f"[{_color(_Color.LIGHT_YELLOW, stream)}{program}{_color(_Color.NORMAL, stream)}] "
        f"{text}"
    )
    if not message.endswith("\n"):
        stream.write("\n")


def error(message: str, *args: object) -> None:
    """Log at ERROR level to standard error."""
    log_message(LogLevel.ERROR, message, *args)


def warning(message: str, *args: object) -> None:
    """Log at WARNING level to standard error."""
    log_message(LogLevel.WARNING, message, *args)


def info(message: str, *args: object) -> None:
    """Log at INFO level to standard error."""
    log_message(LogLevel.INFO, message, *args)


def debug(message: str, *args: object) -> None:
    """Log at DEBUG level to standard error."""
    log_message(LogLevel.DEBUG, message, *args)


def debug2(message: str, *args: object) -> None:
    """Log at DEBUG_SPAM level to standard error."""
    log_message(LogLevel.DEBUG_SPAM, message, *args)


def print_error_message(message: str, *args: object, stream: TextIO | None = None) -> None:
    """Write ``"<program>: <message>"`` with no level filter and no added newline."""
    if stream is None:
        stream = sys.stderr
    program = _program_name() or "(null)"
    text = message % args if args else message
    stream.write(f"{program}: {text}")