"""Locating the file that defines a Python object."""

from __future__ import annotations

import inspect

from . import log

__all__ = ["get_module_path"]


def get_module_path(obj: object) -> str | None:
    """Return the path of the file that defines *obj*, or None if it has none.

    Modules, classes, functions, methods and code objects are looked up
    directly; any other object is located through its type. Built-ins
    have no file and give None.
    """
    for candidate in (obj, type(obj)):
        try:
            path = inspect.getfile(candidate)  # type: ignore[arg-type]
        except (TypeError, OSError):
            continue
        log.debug("object %r identified as module %s\n", obj, path)
        return path
    return None