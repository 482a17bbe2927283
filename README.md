# sdeutils

Helpers shared by desktop-environment components. The package has no
dependencies beyond the standard library and runs on POSIX systems
(`sdeutils.paths` uses the `pwd` module).

## Modules

- `sdeutils.strings`
  - `str_empty(string)`: true for `None` or a string of only spaces, tabs
    and newlines.
  - `bytes_suffix_parts(size)` and `format_bytes_with_suffix(size)`:
    human-readable byte sizes with truncated tenths
    (`format_bytes_with_suffix(1536)` gives `"1.5 KiB"`, `512` gives
    `"512 B"`). Sizes outside the unsigned 64-bit range raise `ValueError`.
  - `read_lines_from_file(path, options)`: the file's lines split on `"\n"`,
    filtered by the `ReadListOptions` flags `IGNORE_COMMENTS`,
    `IGNORE_EMPTY_LINES` and `IGNORE_WHITESPACES`.
- `sdeutils.log`
  - `log_message(level, message, *args, stream=None)` and the shortcuts
    `error`, `warning`, `info`, `debug`, `debug2` write
    `[ERR] <date time> [<program>] <message>` lines to standard error, with
    ANSI colours when the stream is a terminal and `$TERM` names a known
    colour terminal (`colors_supported()`).
  - Levels come from `LogLevel`. The current level defaults to `WARNING`,
    is read from the `SDE_LOG_LEVEL` environment variable on first use, and
    can be changed with `set_log_level` (read back with `get_log_level`).
  - `print_error_message(message, *args, stream=None)` writes
    `"<program>: <message>"` without filtering or an added newline.
- `sdeutils.proc`
  - `get_module_path(obj)`: the file that defines a Python object, or
    `None` for built-ins.
- `sdeutils.launcher`
  - `translate_app_exec_to_command_line(exec_line, files)`: expands the
    field codes `%f`, `%F`, `%n`, `%N`, `%u`, `%U`, `%d`, `%D` and `%%` of a
    desktop entry `Exec` line. `%c`, `%i`, `%k`, `%v` expand to nothing.
    When no file code is used, all files are appended. Every inserted value
    is quoted with `shell_quote`. `%u`/`%U` with a relative path raise
    `ValueError`.
- `sdeutils.paths`
  - `expand_tilde(path)`: expands `~` and `~user`.
  - `build_filename(*args)`: joins components with `/`, collapsing
    separators between them.
  - `ResourceResolver(allow_user_data_dir=None, allow_autodetection=None,
    system_prefix="/usr/local/")` finds resources and configuration files.
    Resources are searched in the user data directory (when allowed), under
    `system_prefix` (in `sde-agents/<agent>` and `sde-common`), under
    prefixes learned by `resolve_agent_id_by_path` /
    `resolve_agent_id_by_object` (when autodetection is allowed), and under
    prefixes given to `register_default_agent_prefix`. When an `allow_*`
    argument is left as `None`, it is enabled only if
    `SDE_ALLOW_USER_DATA_DIR_RESOURCE_RESOLUTION` or
    `SDE_ALLOW_AGENT_PREFIX_AUTODETECTION` is `TRUE` and the process has no
    root user or group id.
  - `resolve_config(agent_id, config_type, domain, profile, *args)` uses
    `ConfigType.SYSTEM`, `USER` or `USER_W`: user types look in
    `$XDG_CONFIG_HOME` first (`USER_W` always returns that path and creates
    its directory), then `$XDG_CONFIG_DIRS`, then the `sde-config` resource.
    A profile that finds nothing is retried as `template`.
  - `open_resource`, `open_config`, `read_resource` and `read_config` open
    or read what the resolvers find.

Lookups return `None` when nothing is found.

## Example

```python
from sdeutils.launcher import translate_app_exec_to_command_line
from sdeutils.paths import ConfigType, ResourceResolver
from sdeutils import log

cmd = translate_app_exec_to_command_line("viewer %F", ["/tmp/a b.png", "/tmp/c.png"])
# "viewer '/tmp/a b.png' '/tmp/c.png'"

resolver = ResourceResolver()
path = resolver.resolve_config("panel", ConfigType.USER, "panel", "default", "config")

log.warning("could not find %s", "config")
```

## What it does not do

This is a library only: it installs no command. It builds command lines
but does not start programs.

## Install and test

```
pip install .[test]
pytest
```