"""Locating an agent's resources and configuration files on disk."""

from __future__ import annotations

import contextlib
import enum
import os
import pwd
import tempfile
from typing import IO

from . import log
from .proc import get_module_path
from .strings import str_empty

__all__ = [
    "ConfigType",
    "ResourceResolver",
    "expand_tilde",
    "build_filename",
]

CONFIG_RESOURCE_PREFIX = "sde-config"
TEMPLATE_PROFILE = "template"
AGENT_SPECIFIC_RESOURCE = "sde-agents"
COMMON_RESOURCE = "sde-common"
SYSTEM_LOCAL_RESOURCE_PREFIX = "/usr/local/"

_SEPARATOR = "/"
_MAX_COMPONENTS = 253

_ALLOW_USER_DATA_DIR_ENV = "SDE_ALLOW_USER_DATA_DIR_RESOURCE_RESOLUTION"
_ALLOW_AUTODETECTION_ENV = "SDE_ALLOW_AGENT_PREFIX_AUTODETECTION"


class ConfigType(enum.Enum):
    """Where a configuration file is looked for."""

    SYSTEM = 0
    USER = 1
    USER_W = 2


def build_filename(*args: str | os.PathLike[str]) -> str:
    """Join path components with ``/``, collapsing separators between them.

    Empty components are skipped. Leading separators of the first non-empty
    component and trailing separators of the last one are kept. A first
    component made only of separators, with nothing after it, is returned
    as it is. Raises ValueError for more than 253 components.
    """
    if len(args) > _MAX_COMPONENTS:
        raise ValueError(f"too many path components: {len(args)}")

    parts: list[str] = []
    leading: str | None = None
    single: str | None = None
    trailing = ""

    for component in args:
        element = os.fspath(component)
        if not element:
            continue
        rstripped = element.rstrip(_SEPARATOR)
        trailing = element[len(rstripped):]
        if leading is None:
            leading = element[: len(element) - len(element.lstrip(_SEPARATOR))]
            single = element if not rstripped else None
        else:
            single = None
        body = element.strip(_SEPARATOR)
        if body:
            parts.append(body)

    if single is not None:
        return single
    return (leading or "") + _SEPARATOR.join(parts) + trailing


def _home_dir() -> str:
    home = os.environ.get("HOME")
    if home:
        return home
    try:
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        return tempfile.gettempdir()


def _user_data_dir() -> str:
    return os.environ.get("XDG_DATA_HOME") or build_filename(_home_dir(), ".local", "share")


def _user_config_dir() -> str:
    return os.environ.get("XDG_CONFIG_HOME") or build_filename(_home_dir(), ".config")


def _system_config_dirs() -> list[str]:
    value = os.environ.get("XDG_CONFIG_DIRS") or ""
    dirs = [d for d in value.split(os.pathsep) if d]
    return dirs or ["/etc/xdg"]


def expand_tilde(path: str) -> str:
    """Replace a leading ``~`` or ``~user`` with the matching home directory.

    ``~`` alone uses $HOME, then the current user's home. An unknown user,
    or one without a home directory, falls back to the temporary directory.
    """
    if not path.startswith("~"):
        return path

    name_end = path.find(_SEPARATOR)
    if name_end < 0:
        name_end = len(path)

    homedir: str | None = None
    if name_end == 1:
        homedir = os.environ.get("HOME")
        if homedir is None:
            homedir = _home_dir()
    else:
        try:
            entry = pwd.getpwnam(path[1:name_end])
        except KeyError:
            entry = None
        if entry is not None and not str_empty(entry.pw_dir):
            homedir = entry.pw_dir

    if homedir is None:
        homedir = tempfile.gettempdir() or "/tmp"

    return homedir + path[name_end:]


def _running_privileged() -> bool:
    return 0 in (os.getuid(), os.geteuid(), os.getgid(), os.getegid())


class ResourceResolver:
    """Finds agent resources and configuration files along a fixed search order.

    Resources are searched in the user data directory (when allowed), under
    *system_prefix*, under prefixes autodetected from module paths (when
    allowed), and under registered default prefixes. An ``allow_*`` argument
    left as None is taken from the environment: it is on only when its
    variable is ``TRUE`` and the process runs with no root user or group id.
    """

    def __init__(
        self,
        allow_user_data_dir: bool | None = None,
        allow_autodetection: bool | None = None,
        system_prefix: str | os.PathLike[str] = SYSTEM_LOCAL_RESOURCE_PREFIX,
    ) -> None:
        if allow_user_data_dir is None or allow_autodetection is None:
            privileged = _running_privileged()
            if allow_user_data_dir is None:
                allow_user_data_dir = (
                    not privileged and os.environ.get(_ALLOW_USER_DATA_DIR_ENV) == "TRUE"
                )
            if allow_autodetection is None:
                allow_autodetection = (
                    not privileged and os.environ.get(_ALLOW_AUTODETECTION_ENV) == "TRUE"
                )
        self.allow_user_data_dir = bool(allow_user_data_dir)
        self.allow_autodetection = bool(allow_autodetection)
        self.system_prefix = os.fspath(system_prefix)
        self._default_prefixes: dict[str, str | None] = {}
        self._autodetected_prefixes: dict[str, str] = {}

    def resolve_agent_id_by_path(self, path: str | None, default_id: str | None) -> str | None:
        """Derive an agent id from a path containing ``/sde-agents/<id>/``.

        The prefix up to and including the id is remembered for later
        resource lookups. Gives *default_id* when the path does not match
        or autodetection is off.
        """
        if path is None or not self.allow_autodetection:
            return default_id

        pattern = f"/{AGENT_SPECIFIC_RESOURCE}/"
        found = path.find(pattern)
        if found < 0:
            return default_id

        start = found + len(pattern)
        end = path.find(_SEPARATOR, start)
        if end < 0:
            return default_id

        agent_id = path[start:end]
        prefix = path[:end]
        self._autodetected_prefixes[agent_id] = prefix
        log.debug("path %s autodetected as agent %s with prefix %s\n", path, agent_id, prefix)
        return agent_id

    def resolve_agent_id_by_object(self, obj: object, default_id: str | None) -> str | None:
        """Derive an agent id from the path of the file that defines *obj*."""
        return self.resolve_agent_id_by_path(get_module_path(obj), default_id)

    def register_default_agent_prefix(self, agent_id: str | None, prefix: str | None) -> None:
        """Register the last-resort prefix searched for *agent_id*'s resources."""
        if agent_id is None:
            return
        self._default_prefixes[agent_id] = prefix
        log.debug("agent %s registered with default prefix %s\n", agent_id, prefix)

    def _resource_candidates(self, agent_id: str | None, resource_id: str):
        has_agent = not str_empty(agent_id)

        if self.allow_user_data_dir:
            data_dir = _user_data_dir()
            if has_agent:
                yield build_filename(data_dir, AGENT_SPECIFIC_RESOURCE, agent_id, resource_id)
                yield build_filename(data_dir, AGENT_SPECIFIC_RESOURCE, agent_id, "share", resource_id)
            yield build_filename(data_dir, COMMON_RESOURCE, resource_id)
            yield build_filename(data_dir, COMMON_RESOURCE, "share", resource_id)

        if has_agent:
            yield build_filename(self.system_prefix, AGENT_SPECIFIC_RESOURCE, agent_id, resource_id)
            yield build_filename(
                self.system_prefix, AGENT_SPECIFIC_RESOURCE, agent_id, "share", resource_id
            )
        yield build_filename(self.system_prefix, COMMON_RESOURCE, resource_id)
        yield build_filename(self.system_prefix, COMMON_RESOURCE, "share", resource_id)

        if not has_agent:
            return

        if self.allow_autodetection:
            prefix = self._autodetected_prefixes.get(agent_id)
            if prefix is not None:
                yield build_filename(prefix, resource_id)
                yield build_filename(prefix, "share", resource_id)

        prefix = self._default_prefixes.get(agent_id)
        if prefix is not None:
            yield build_filename(prefix, resource_id)
            yield build_filename(prefix, "share", resource_id)

    def resolve_resource(self, agent_id: str | None, *args: str) -> str | None:
        """Return the first existing path for the resource named by *args*, or None."""
        resource_id = build_filename(*args)
        result = next(
            (p for p in self._resource_candidates(agent_id, resource_id) if os.path.exists(p)),
            None,
        )
        log.debug(
            'resource %s:%s resolved as "%s"\n',
            agent_id if agent_id is not None else "(NULL)",
            resource_id,
            result if result is not None else "(NULL)",
        )
        return result

    def resolve_config(
        self,
        agent_id: str | None,
        config_type: ConfigType,
        domain: str,
        profile: str | None,
        *args: str,
    ) -> str | None:
        """Return the path of a configuration file, or None if none exists.

        User types look in the user configuration directory first;
        ``USER_W`` always returns that path, creating its parent directory.
        Then the system configuration directories and the ``sde-config``
        resource are searched. A profile other than ``template`` that finds
        nothing is retried as ``template``.
        """
        suffix = build_filename(*args)
        result = self._find_config(agent_id, config_type, domain, profile, suffix)
        if result is None and profile is not None and profile != TEMPLATE_PROFILE:
            profile = TEMPLATE_PROFILE
            result = self._find_config(agent_id, config_type, domain, profile, suffix)

        log.debug(
            'config %s:%s:%s:%s resolved as "%s"\n',
            domain,
            profile or "",
            suffix,
            {ConfigType.USER_W: "USER_W", ConfigType.USER: "USER"}.get(config_type, "SYSTEM"),
            result if result is not None else "(NULL)",
        )
        return result

    def _find_config(
        self,
        agent_id: str | None,
        config_type: ConfigType,
        domain: str,
        profile: str | None,
        suffix: str,
    ) -> str | None:
        def under(base: str) -> str:
            if profile is not None:
                return build_filename(base, domain, profile, suffix)
            return build_filename(base, domain, suffix)

        if config_type in (ConfigType.USER, ConfigType.USER_W):
            candidate = under(_user_config_dir())
            if config_type is ConfigType.USER_W:
                dirname = os.path.dirname(candidate) or "."
                if not os.path.exists(dirname):
                    with contextlib.suppress(OSError):
                        os.makedirs(dirname, 0o755, exist_ok=True)
                return candidate
            if os.path.exists(candidate):
                return candidate

        for config_dir in _system_config_dirs():
            candidate = under(config_dir)
            if os.path.exists(candidate):
                return candidate

        return self.resolve_resource(agent_id, under(CONFIG_RESOURCE_PREFIX))

    def open_resource(self, mode: str | None, agent_id: str | None, *args: str) -> IO | None:
        """Open the resolved resource with *mode* (``"r"`` by default), or give None."""
        path = self.resolve_resource(agent_id, *args)
        if path is None:
            return None
        return open(path, mode or "r")

    def open_config(
        self,
        mode: str | None,
        agent_id: str | None,
        config_type: ConfigType,
        domain: str,
        profile: str | None,
        *args: str,
    ) -> IO | None:
        """Open the resolved configuration file with *mode* (``"r"`` by default), or give None."""
        path = self.resolve_config(agent_id, config_type, domain, profile, *args)
        if path is None:
            return None
        return open(path, mode or "r")

    def read_resource(self, agent_id: str | None, *args: str) -> str | None:
        """Return the text of the resolved resource, or None if there is none."""
        path = self.resolve_resource(agent_id, *args)
        return None if path is None else _read_text(path)

    def read_config(
        self,
        agent_id: str | None,
        config_type: ConfigType,
        domain: str,
        profile: str | None,
        *args: str,
    ) -> str | None:
        """Return the text of the resolved configuration file, or None if there is none."""
        path = self.resolve_config(agent_id, config_type, domain, profile, *args)
        return None if path is None else _read_text(path)


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8", errors="surrogateescape", newline="") as handle:
        return handle.read()