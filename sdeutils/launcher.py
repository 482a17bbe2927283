"""Turning a desktop entry ``Exec`` line into a shell command line."""

from __future__ import annotations

import os
from collections.abc import Iterable
from urllib.parse import quote

__all__ = ["shell_quote", "translate_app_exec_to_command_line"]

# Characters left unescaped in the path part of a file URI (besides
# letters, digits and "_.-~", which are always kept).
_URI_PATH_SAFE = "!$&'()*+,-./:=@_~"


def shell_quote(text: str) -> str:
    """Quote *text* so that a POSIX shell reads it back as one literal word."""
    return "'" + text.replace("'", "'\\''") + "'"


def _filename_to_uri(path: str) -> str:
    if not os.path.isabs(path):
        raise ValueError(f"file name is not an absolute path: {path!r}")
    return "file://" + quote(os.fsencode(path), safe=_URI_PATH_SAFE)


def _dirname(path: str) -> str:
    index = path.rfind("/")
    if index < 0:
        return "."
    while index > 0 and path[index] == "/":
        index -= 1
    if index == 0 and path[0] == "/":
        return "/"
    return path[: index + 1]


def translate_app_exec_to_command_line(
    exec_line: str,
    files: Iterable[str | os.PathLike[str]] = (),
) -> str:
    """Expand the field codes of *exec_line* with *files* into a command line.

    ``%f``/``%n`` and ``%F``/``%N`` insert the first or all file paths,
    ``%u``/``%U`` their ``file://`` URIs, ``%d``/``%D`` their directories,
    and ``%%`` a literal percent sign. ``%c``, ``%i``, ``%k``, ``%v`` and
    unknown codes expand to nothing. If no file code was expanded, all
    files are appended at the end. Every inserted value is shell-quoted and
    trailing spaces are removed. Raises ValueError when a URI is requested
    for a path that is not absolute.
    """
    paths = [os.fspath(f) for f in files]
    parts: list[str] = []
    add_files = False

    chars = iter(exec_line)
    for char in chars:
        if char != "%":
            parts.append(char)
            continue

        code = next(chars, None)
        if code is None:
            break

        if code == "U":
            parts.append(" ".join(shell_quote(_filename_to_uri(p)) for p in paths))
            add_files = True
        elif code == "u":
            if paths:
                parts.append(shell_quote(_filename_to_uri(paths[0])))
                add_files = True
        elif code in "FN":
            parts.append(" ".join(shell_quote(p) for p in paths))
            add_files = True
        elif code in "fn":
            if paths:
                parts.append(shell_quote(paths[0]))
                add_files = True
        elif code == "D":
            parts.append(" ".join(shell_quote(_dirname(p)) for p in paths))
            add_files = True
        elif code == "d":
            if paths:
                parts.append(shell_quote(_dirname(paths[0])))
                add_files = True
        elif code == "%":
            parts.append("%")
        # %c, %i, %k, %v and unknown codes contribute nothing.

    if not add_files:
        parts.extend(" " + shell_quote(p) for p in paths)

    return "".join(parts).rstrip(" ")