"""String helpers: blank checks, human-readable byte sizes and line lists."""

from __future__ import annotations

import enum
import os

__all__ = [
    "ReadListOptions",
    "str_empty",
    "bytes_suffix_parts",
    "format_bytes_with_suffix",
    "read_lines_from_file",
]

_UINT64_MASK = (1 << 64) - 1

_UNITS = (
    (1 << 30, "GiB"),
    (1 << 20, "MiB"),
    (1 << 10, "KiB"),
)


class ReadListOptions(enum.IntFlag):
    """Filters applied by :func:`read_lines_from_file`."""

    NONE = 0
    IGNORE_COMMENTS = 1 << 0
    IGNORE_EMPTY_LINES = 1 << 1
    IGNORE_WHITESPACES = 1 << 2


def str_empty(string: str | None) -> bool:
    """Return True if *string* is None or holds only spaces, tabs and newlines."""
    return string is None or not string.lstrip(" \t\n")


def bytes_suffix_parts(size: int) -> tuple[int, int, str]:
    """Split a byte count into ``(whole, tenths, unit)`` for display.

    The unit is the largest binary unit the size strictly exceeds, or ``"B"``.
    Tenths are truncated, not rounded; for plain bytes they are always 0.
    """
    if size < 0 or size > _UINT64_MASK:
        raise ValueError(f"byte count out of range: {size}")

    for unit_size, unit in _UNITS:
        if size > unit_size:
            scaled = ((size * 10) & _UINT64_MASK) // unit_size
            return scaled // 10, scaled % 10, unit

    scaled = (size * 10) & _UINT64_MASK
    return scaled // 10, scaled % 10, "B"


def format_bytes_with_suffix(size: int) -> str:
    """Render a byte count such as ``"1.5 KiB"`` or ``"512 B"``."""
    whole, tenths, unit = bytes_suffix_parts(size)
    if unit == "B":
        return f"{whole} B"
    return f"{whole}.{tenths} {unit}"


def read_lines_from_file(
    path: str | os.PathLike[str],
    options: ReadListOptions | int = ReadListOptions.NONE,
) -> list[str]:
    """Read *path* and return its lines, filtered according to *options*.

    Lines are split on ``"\\n"`` only; a trailing newline yields a final
    empty line unless empty lines are ignored. Raises OSError if the file
    cannot be read.
    """
    options = ReadListOptions(options)
    with open(path, encoding="utf-8", errors="surrogateescape", newline="") as handle:
        data = handle.read()

    if not data:
        return []

    def keep(line: str) -> bool:
        if ReadListOptions.IGNORE_EMPTY_LINES in options and not line:
            return False
        if ReadListOptions.IGNORE_WHITESPACES in options and str_empty(line):
            return False
        if ReadListOptions.IGNORE_COMMENTS in options and line.startswith("#"):
            return False
        return True

    return [line for line in data.split("\n") if keep(line)]