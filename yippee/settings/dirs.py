"""Locations of the configuration file and the build cache."""

from __future__ import annotations

import os

from yippee.settings.errors import RuntimeDirError

CONFIG_FILE_NAME = "config.json"
VCS_FILE_NAME = "vcs.json"
COMPLETION_FILE_NAME = "completion.cache"
# systemd-run creates this directory itself when it runs the build.
SYSTEMD_CACHE = "/var/cache/yippee"


def _join(*parts: str) -> str:
    present = [part for part in parts if part]
    if not present:
        return ""
    return os.path.normpath(os.path.join(*present))


def init_dir(directory: str) -> None:
    """Create ``directory`` and its parents when it does not exist.

    Raises RuntimeDirError when creation fails; other errors from
    inspecting the path propagate as OSError.
    """
    try:
        os.stat(directory)
    except FileNotFoundError:
        try:
            os.makedirs(directory, 0o755, exist_ok=True)
        except OSError as exc:
            raise RuntimeDirError(directory, exc) from exc


def _try_init(directory: str) -> bool:
    try:
        init_dir(directory)
    except (OSError, RuntimeDirError):
        return False
    return True


def get_config_path() -> str:
    """Return the config file path, creating its directory; empty if none works."""
    candidates = (
        (os.environ.get("XDG_CONFIG_HOME", ""), ("yippee",)),
        (os.environ.get("HOME", ""), (".config", "yippee")),
    )
    for base, parts in candidates:
        if not base:
            continue
        config_dir = _join(base, *parts)
        if _try_init(config_dir):
            return _join(config_dir, CONFIG_FILE_NAME)
    return ""


def get_cache_home() -> str:
    """Return the build cache directory, creating it when needed.

    Raises RuntimeDirError when only the temporary fallback is left and it
    cannot be created; its ``directory`` attribute holds that fallback.
    """
    uid = os.geteuid()

    if uid != 0:
        candidates = (
            (os.environ.get("XDG_CACHE_HOME", ""), ("yippee",)),
            (os.environ.get("HOME", ""), (".cache", "yippee")),
        )
        for base, parts in candidates:
            if not base:
                continue
            cache_dir = _join(base, *parts)
            if _try_init(cache_dir):
                return cache_dir

    if uid == 0 and not os.environ.get("SUDO_USER") and not os.environ.get("DOAS_USER"):
        return SYSTEMD_CACHE

    tmp_dir = _join(os.environ.get("TMPDIR") or "/tmp", "yippee")
    try:
        init_dir(tmp_dir)
    except OSError as exc:
        raise RuntimeDirError(tmp_dir, exc) from exc
    return tmp_dir