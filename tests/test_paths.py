import os
import pwd
import tempfile

import pytest

from sdeutils.paths import ConfigType, ResourceResolver, build_filename, expand_tilde


@pytest.fixture
def env(tmp_path, monkeypatch):
    data = tmp_path / "data"
    config = tmp_path / "config"
    sysconf = tmp_path / "etc-xdg"
    for d in (data, config, sysconf):
        d.mkdir()
    monkeypatch.setenv("XDG_DATA_HOME", str(data))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config))
    monkeypatch.setenv("XDG_CONFIG_DIRS", str(sysconf))
    return tmp_path


def _make(path, text="x"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return str(path)


def _resolver(env, **kwargs):
    kwargs.setdefault("allow_user_data_dir", True)
    kwargs.setdefault("allow_autodetection", True)
    kwargs.setdefault("system_prefix", str(env / "sys"))
    return ResourceResolver(**kwargs)


# build_filename


def test_build_filename_joins_components():
    assert build_filename("a", "b", "c") == "a/b/c"


def test_build_filename_collapses_separators_and_keeps_ends():
    assert build_filename("/usr/", "/share/", "/x/") == "/usr/share/x/"


def test_build_filename_skips_empty_components():
    assert build_filename("", "a", "", "b") == build_filename("a", "b")


def test_build_filename_separator_only():
    assert build_filename("/") == "/"
    assert build_filename("a", "/") == "a/"


def test_build_filename_nothing():
    assert build_filename() == ""


def test_build_filename_too_many_components():
    assert build_filename(*["a"] * 253).count("/") == 252
    with pytest.raises(ValueError):
        build_filename(*["a"] * 254)


# expand_tilde


def test_expand_tilde_without_tilde_is_unchanged():
    assert expand_tilde("/etc/passwd") == "/etc/passwd"
    assert expand_tilde("") == ""


def test_expand_tilde_uses_home(monkeypatch):
    monkeypatch.setenv("HOME", "/home/someone")
    assert expand_tilde("~") == "/home/someone"
    assert expand_tilde("~/docs/a.txt") == "/home/someone/docs/a.txt"


def test_expand_tilde_named_user():
    entry = pwd.getpwuid(os.getuid())
    result = expand_tilde(f"~{entry.pw_name}/docs")
    if entry.pw_dir.strip():
        assert result == entry.pw_dir + "/docs"
    else:
        assert result == tempfile.gettempdir() + "/docs"


def test_expand_tilde_unknown_user_falls_back_to_tmp():
    assert expand_tilde("~no_such_user_zz9/x") == tempfile.gettempdir() + "/x"


# flags from the environment


def test_flags_enabled_by_environment(monkeypatch):
    for name in ("getuid", "geteuid", "getgid", "getegid"):
        monkeypatch.setattr(os, name, lambda: 1000)
    monkeypatch.setenv("SDE_ALLOW_USER_DATA_DIR_RESOURCE_RESOLUTION", "TRUE")
    monkeypatch.setenv("SDE_ALLOW_AGENT_PREFIX_AUTODETECTION", "TRUE")
    resolver = ResourceResolver()
    assert resolver.allow_user_data_dir is True
    assert resolver.allow_autodetection is True


def test_flags_disabled_for_root(monkeypatch):
    for name in ("getuid", "geteuid", "getgid", "getegid"):
        monkeypatch.setattr(os, name, lambda: 1000)
    monkeypatch.setattr(os, "geteuid", lambda: 0)
    monkeypatch.setenv("SDE_ALLOW_USER_DATA_DIR_RESOURCE_RESOLUTION", "TRUE")
    monkeypatch.setenv("SDE_ALLOW_AGENT_PREFIX_AUTODETECTION", "TRUE")
    resolver = ResourceResolver()
    assert resolver.allow_user_data_dir is False
    assert resolver.allow_autodetection is False


def test_flags_disabled_without_environment(monkeypatch):
    for name in ("getuid", "geteuid", "getgid", "getegid"):
        monkeypatch.setattr(os, name, lambda: 1000)
    monkeypatch.setenv("SDE_ALLOW_USER_DATA_DIR_RESOURCE_RESOLUTION", "true")
    monkeypatch.delenv("SDE_ALLOW_AGENT_PREFIX_AUTODETECTION", raising=False)
    resolver = ResourceResolver()
    assert resolver.allow_user_data_dir is False
    assert resolver.allow_autodetection is False


def test_default_system_prefix():
    resolver = ResourceResolver(False, False)
    assert resolver.system_prefix == "/usr/local/"


# agent id


def test_resolve_agent_id_by_path(env):
    resolver = _resolver(env)
    path = "/opt/stuff/sde-agents/panel/lib/module.so"
    assert resolver.resolve_agent_id_by_path(path, "fallback") == "panel"


def test_resolve_agent_id_defaults(env):
    resolver = _resolver(env)
    assert resolver.resolve_agent_id_by_path(None, "fallback") == "fallback"
    assert resolver.resolve_agent_id_by_path("/opt/lib/module.so", "fallback") == "fallback"
    assert resolver.resolve_agent_id_by_path("/opt/sde-agents/panel", "fallback") == "fallback"


def test_resolve_agent_id_disabled(env):
    resolver = _resolver(env, allow_autodetection=False)
    path = "/opt/stuff/sde-agents/panel/lib/module.so"
    assert resolver.resolve_agent_id_by_path(path, "fallback") == "fallback"


def test_resolve_agent_id_by_object_without_match(env):
    resolver = _resolver(env)
    assert resolver.resolve_agent_id_by_object(test_resolve_agent_id_defaults, "dflt") == "dflt"


def test_autodetected_prefix_used_for_resources(env):
    resolver = _resolver(env, allow_user_data_dir=False)
    prefix = env / "opt" / "sde-agents" / "panel"
    expected = _make(prefix / "share" / "icon.png")
    agent = resolver.resolve_agent_id_by_path(str(prefix / "lib" / "module.so"), None)
    assert agent == "panel"
    assert resolver.resolve_resource("panel", "icon.png") == expected


# resources


def test_resource_not_found(env):
    assert _resolver(env).resolve_resource("panel", "missing.txt") is None


def test_resource_search_order(env):
    resolver = _resolver(env)
    data = env / "data"
    sysp = env / "sys"
    candidates = [
        data / "sde-agents" / "panel" / "res.txt",
        data / "sde-agents" / "panel" / "share" / "res.txt",
        data / "sde-common" / "res.txt",
        data / "sde-common" / "share" / "res.txt",
        sysp / "sde-agents" / "panel" / "res.txt",
        sysp / "sde-agents" / "panel" / "share" / "res.txt",
        sysp / "sde-common" / "res.txt",
        sysp / "sde-common" / "share" / "res.txt",
    ]
    for c in candidates:
        _make(c)
    for c in candidates:
        assert resolver.resolve_resource("panel", "res.txt") == str(c)
        c.unlink()
    assert resolver.resolve_resource("panel", "res.txt") is None


def test_user_data_dir_ignored_when_disabled(env):
    resolver = _resolver(env, allow_user_data_dir=False)
    _make(env / "data" / "sde-common" / "res.txt")
    assert resolver.resolve_resource(None, "res.txt") is None


def test_empty_agent_uses_common_only(env):
    resolver = _resolver(env)
    _make(env / "sys" / "sde-agents" / " " / "res.txt")
    common = _make(env / "sys" / "sde-common" / "res.txt")
    assert resolver.resolve_resource(" ", "res.txt") == common


def test_default_prefix(env):
    resolver = _resolver(env)
    prefix = env / "agent-home"
    expected = _make(prefix / "sub" / "file.txt")
    assert resolver.resolve_resource("panel", "sub", "file.txt") is None
    resolver.register_default_agent_prefix("panel", str(prefix))
    assert resolver.resolve_resource("panel", "sub", "file.txt") == expected


def test_register_none_agent_is_ignored(env):
    resolver = _resolver(env)
    resolver.register_default_agent_prefix(None, str(env))
    _make(env / "file.txt")
    assert resolver.resolve_resource("panel", "file.txt") is None


def test_autodetected_before_default_prefix(env):
    resolver = _resolver(env)
    auto = env / "a" / "sde-agents" / "panel"
    auto_file = _make(auto / "f.txt")
    default = env / "default"
    _make(default / "f.txt")
    resolver.register_default_agent_prefix("panel", str(default))
    resolver.resolve_agent_id_by_path(str(auto / "lib" / "m.so"), None)
    assert resolver.resolve_resource("panel", "f.txt") == auto_file


def test_read_and_open_resource(env):
    resolver = _resolver(env)
    _make(env / "sys" / "sde-common" / "notes.txt", "hello\nworld\n")
    assert resolver.read_resource(None, "notes.txt") == "hello\nworld\n"
    with resolver.open_resource(None, None, "notes.txt") as handle:
        assert handle.read() == "hello\nworld\n"
    with resolver.open_resource("rb", None, "notes.txt") as handle:
        assert handle.read() == b"hello\nworld\n"
    assert resolver.read_resource(None, "absent.txt") is None
    assert resolver.open_resource("r", None, "absent.txt") is None


# configuration


def test_config_user_dir(env):
    resolver = _resolver(env)
    expected = _make(env / "config" / "dom" / "prof" / "a.conf")
    _make(env / "etc-xdg" / "dom" / "prof" / "a.conf")
    assert resolver.resolve_config(None, ConfigType.USER, "dom", "prof", "a.conf") == expected


def test_config_system_type_skips_user_dir(env):
    resolver = _resolver(env)
    _make(env / "config" / "dom" / "prof" / "a.conf")
    expected = _make(env / "etc-xdg" / "dom" / "prof" / "a.conf")
    assert resolver.resolve_config(None, ConfigType.SYSTEM, "dom", "prof", "a.conf") == expected


def test_config_without_profile(env):
    resolver = _resolver(env)
    expected = _make(env / "etc-xdg" / "dom" / "a.conf")
    assert resolver.resolve_config(None, ConfigType.USER, "dom", None, "a.conf") == expected


def test_config_user_w_creates_directory(env):
    resolver = _resolver(env)
    result = resolver.resolve_config(None, ConfigType.USER_W, "dom", "prof", "sub", "a.conf")
    assert result == build_filename(str(env / "config"), "dom", "prof", "sub", "a.conf")
    assert os.path.isdir(os.path.dirname(result))
    assert not os.path.exists(result)


def test_config_falls_back_to_template_profile(env):
    resolver = _resolver(env)
    expected = _make(env / "etc-xdg" / "dom" / "template" / "a.conf")
    assert resolver.resolve_config(None, ConfigType.USER, "dom", "custom", "a.conf") == expected


def test_config_resource_fallback(env):
    resolver = _resolver(env)
    expected = _make(
        env / "sys" / "sde-agents" / "panel" / "sde-config" / "dom" / "prof" / "a.conf"
    )
    assert resolver.resolve_config("panel", ConfigType.USER, "dom", "prof", "a.conf") == expected


def test_config_missing(env):
    resolver = _resolver(env)
    assert resolver.resolve_config("panel", ConfigType.USER, "dom", "prof", "a.conf") is None


def test_read_and_open_config(env):
    resolver = _resolver(env)
    _make(env / "config" / "dom" / "prof" / "a.conf", "key=value\n")
    assert resolver.read_config(None, ConfigType.USER, "dom", "prof", "a.conf") == "key=value\n"
    with resolver.open_config(None, None, ConfigType.USER, "dom", "prof", "a.conf") as handle:
        assert handle.read() == "key=value\n"
    assert resolver.read_config(None, ConfigType.SYSTEM, "dom", "prof", "a.conf") is None


def test_open_config_for_writing(env):
    resolver = _resolver(env)
    with resolver.open_config("w", None, ConfigType.USER_W, "dom", "prof", "new.conf") as handle:
        handle.write("saved")
    assert resolver.read_config(None, ConfigType.USER, "dom", "prof", "new.conf") == "saved"