"""Desktop-environment helpers: strings, logging, Exec line expansion and path resolution."""

__version__ = "0.1.0"
__all__ = ["launcher", "log", "paths", "proc", "strings"]