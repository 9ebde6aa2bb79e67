"""The configuration: defaults, the JSON config file and command line overrides."""

from __future__ import annotations

import json
import os
import re
import shutil
import sys
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, Iterable

from yippee.settings.dirs import (
    COMPLETION_FILE_NAME,
    SYSTEMD_CACHE,
    VCS_FILE_NAME,
    get_cache_home,
    init_dir,
)
from yippee.settings.errors import PrivilegeElevatorNotFoundError, RuntimeDirError
from yippee.settings.modes import RebuildMode, TargetMode
from yippee.settings.parser import Arguments
from yippee.text.i18n import tr

if TYPE_CHECKING:
    from yippee.text.logger import Logger

# Whether pacman's provider menus are hidden.
hide_menus = False

# Whether user input is skipped and defaults are taken.
no_confirm = False

_SHELL_SPECIAL = frozenset("*#$@!?-0123456789")
_ATOI = re.compile(r"[+-]?[0-9]+")
_BOOL_WORDS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}
_JSON_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def _is_alnum(char: str) -> bool:
    return char == "_" or ("0" <= char <= "9") or ("a" <= char <= "z") or ("A" <= char <= "Z")


def _shell_name(text: str) -> tuple[str, int]:
    if text[0] == "{":
        if len(text) > 2 and text[1] in _SHELL_SPECIAL and text[2] == "}":
            return text[1], 3
        closing = text.find("}", 1)
        if closing == -1:
            return "", 1
        if closing == 1:
            return "", 2
        return text[1:closing], closing + 1
    if text[0] in _SHELL_SPECIAL:
        return text[0], 1
    width = 0
    while width < len(text) and _is_alnum(text[width]):
        width += 1
    return text[:width], width


def _expand_vars(text: str) -> str:
    """Replace ``$VAR`` and ``${VAR}`` with environment values; unset ones become empty."""
    out: list[str] = []
    start = 0
    index = 0
    while index < len(text):
        if text[index] == "$" and index + 1 < len(text):
            out.append(text[start:index])
            name, width = _shell_name(text[index + 1:])
            if name:
                out.append(os.environ.get(name, ""))
            elif width == 0:
                out.append("$")
            index += width
            start = index + 1
        index += 1
    out.append(text[start:])
    return "".join(out)


def expand_env_or_home(path: str) -> str:
    """Expand environment variables in ``path`` and a leading ``~/``."""
    path = _expand_vars(path)
    if path.startswith("~/"):
        parts = [part for part in (os.environ.get("HOME", ""), path[2:]) if part]
        path = os.path.normpath(os.path.join(*parts)) if parts else ""
    return path


def _parse_bool(value: str) -> bool | None:
    return _BOOL_WORDS.get(value)


def _atoi(value: str) -> int | None:
    return int(value) if _ATOI.fullmatch(value) else None


def _rebuild_mode(value: str) -> RebuildMode | str:
    try:
        return RebuildMode(value)
    except ValueError:
        return value


def _json_type(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _json(key: str, default: Any) -> Any:
    return field(default=default, metadata={"json": key})


@dataclass
class Configuration:
    """All settings; the ones with a JSON key are stored in the config file."""

    aur_url: str = _json("aururl", "")
    aur_rpc_url: str = _json("aurrpcurl", "")
    build_dir: str = _json("buildDir", "")
    editor: str = _json("editor", "")
    editor_flags: str = _json("editorflags", "")
    makepkg_bin: str = _json("makepkgbin", "")
    makepkg_conf: str = _json("makepkgconf", "")
    pacman_bin: str = _json("pacmanbin", "")
    pacman_conf: str = _json("pacmanconf", "")
    re_download: str = _json("redownload", "")
    answer_clean: str = _json("answerclean", "")
    answer_diff: str = _json("answerdiff", "")
    answer_edit: str = _json("answeredit", "")
    answer_upgrade: str = _json("answerupgrade", "")
    git_bin: str = _json("gitbin", "")
    gpg_bin: str = _json("gpgbin", "")
    gpg_flags: str = _json("gpgflags", "")
    m_flags: str = _json("mflags", "")
    sort_by: str = _json("sortby", "")
    search_by: str = _json("searchby", "")
    git_flags: str = _json("gitflags", "")
    remove_make: str = _json("removemake", "")
    sudo_bin: str = _json("sudobin", "")
    sudo_flags: str = _json("sudoflags", "")
    version: str = _json("version", "")
    request_split_n: int = _json("requestsplitn", 0)
    completion_interval: int = _json("completionrefreshtime", 0)
    max_concurrent_downloads: int = _json("maxconcurrentdownloads", 0)
    bottom_up: bool = _json("bottomup", False)
    sudo_loop: bool = _json("sudoloop", False)
    time_update: bool = _json("timeupdate", False)
    devel: bool = _json("devel", False)
    clean_after: bool = _json("cleanAfter", False)
    keep_src: bool = _json("keepSrc", False)
    provides: bool = _json("provides", False)
    pgp_fetch: bool = _json("pgpfetch", False)
    clean_menu: bool = _json("cleanmenu", False)
    diff_menu: bool = _json("diffmenu", False)
    edit_menu: bool = _json("editmenu", False)
    combined_upgrade: bool = _json("combinedupgrade", False)
    use_ask: bool = _json("useask", False)
    batch_install: bool = _json("batchinstall", False)
    single_line_results: bool = _json("singlelineresults", False)
    separate_sources: bool = _json("separatesources", False)
    debug: bool = _json("debug", False)
    use_rpc: bool = _json("rpc", False)
    # Confirm the install both before and after building.
    double_confirm: bool = _json("doubleconfirm", False)

    completion_path: str = ""
    vcs_file_path: str = ""
    save_config: bool = False
    mode: TargetMode = TargetMode.ANY
    rebuild: RebuildMode | str = _json("rebuild", "")

    def to_json(self) -> str:
        """Return the stored settings as tab-indented JSON ending in a newline."""
        payload = {
            key: str(getattr(self, name)) if name == "rebuild" else getattr(self, name)
            for key, name in _JSON_FIELDS.items()
        }
        text = json.dumps(payload, indent="\t", ensure_ascii=False)
        for char, escaped in _JSON_ESCAPES:
            text = text.replace(char, escaped)
        return text + "\n"

    def __str__(self) -> str:
        return self.to_json()

    def save(self, config_path: str, version: str) -> None:
        """Write the settings to ``config_path``, stamped with ``version``."""
        self.version = version
        content = self.to_json().encode("utf-8")

        parent = os.path.dirname(config_path) or "."
        if not os.path.exists(parent):
            os.makedirs(parent, 0o755, exist_ok=True)

        descriptor = os.open(config_path, os.O_RDWR | os.O_CREAT | os.O_TRUNC, 0o644)
        with os.fdopen(descriptor, "wb") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())

    def load(self, config_path: str) -> None:
        """Apply settings from the JSON file at ``config_path``.

        A missing file is ignored; unreadable or malformed files are
        reported on standard error. Fields of the wrong type are skipped.
        """
        try:
            with open(config_path, encoding="utf-8", errors="replace") as handle:
                content = handle.read()
        except FileNotFoundError:
            return
        except OSError as exc:
            print(tr("failed to open config file '%s': %s", config_path, exc), file=sys.stderr)
            return

        try:
            self._apply_json(content)
        except ValueError as exc:
            print(tr("failed to read config file '%s': %s", config_path, exc), file=sys.stderr)

    def _apply_json(self, content: str) -> None:
        text = content.lstrip(" \t\r\n")
        if not text:
            raise ValueError("EOF")
        data, _ = json.JSONDecoder().raw_decode(text)
        if not isinstance(data, dict):
            raise ValueError(f"cannot unmarshal {_json_type(data)} into configuration")

        first_error: ValueError | None = None
        for key, value in data.items():
            name = _field_for_key(key)
            if name is None or value is None:
                continue
            kind = _FIELD_KINDS[name]
            if not _matches_kind(kind, value):
                if first_error is None:
                    first_error = ValueError(
                        f"cannot unmarshal {_json_type(value)} into field "
                        f"{key} of type {kind.__name__}"
                    )
                continue
            setattr(self, name, _rebuild_mode(value) if name == "rebuild" else value)

        if first_error is not None:
            raise first_error

    def expand_env(self) -> None:
        """Expand environment variables, and ``~/`` in paths, in the settings."""
        self.aur_url = _expand_vars(self.aur_url)
        self.aur_rpc_url = _expand_vars(self.aur_rpc_url)
        self.build_dir = expand_env_or_home(self.build_dir)
        self.editor = expand_env_or_home(self.editor)
        self.editor_flags = _expand_vars(self.editor_flags)
        self.makepkg_bin = expand_env_or_home(self.makepkg_bin)
        self.makepkg_conf = expand_env_or_home(self.makepkg_conf)
        self.pacman_bin = expand_env_or_home(self.pacman_bin)
        self.pacman_conf = expand_env_or_home(self.pacman_conf)
        self.gpg_flags = _expand_vars(self.gpg_flags)
        self.m_flags = _expand_vars(self.m_flags)
        self.git_flags = _expand_vars(self.git_flags)
        self.sort_by = _expand_vars(self.sort_by)
        self.search_by = _expand_vars(self.search_by)
        self.git_bin = expand_env_or_home(self.git_bin)
        self.gpg_bin = expand_env_or_home(self.gpg_bin)
        self.sudo_bin = expand_env_or_home(self.sudo_bin)
        self.sudo_flags = _expand_vars(self.sudo_flags)
        self.re_download = _expand_vars(self.re_download)
        self.rebuild = _rebuild_mode(_expand_vars(str(self.rebuild)))
        self.answer_clean = _expand_vars(self.answer_clean)
        self.answer_diff = _expand_vars(self.answer_diff)
        self.answer_edit = _expand_vars(self.answer_edit)
        self.answer_upgrade = _expand_vars(self.answer_upgrade)
        self.remove_make = _expand_vars(self.remove_make)

    def set_privilege_elevator(self) -> None:
        """Pick an available privilege elevator, honouring ``PACMAN_AUTH``.

        Raises PrivilegeElevatorNotFoundError when none is on the PATH.
        """
        auth = os.environ.get("PACMAN_AUTH", "")
        if auth:
            self.sudo_bin = auth
            if auth != "sudo":
                self.sudo_flags = ""
                self.sudo_loop = False

        for candidate in (self.sudo_bin, "sudo"):
            if candidate and shutil.which(candidate):
                # The configured wrapper or sudo itself is available.
                self.sudo_bin = candidate
                return

        self.sudo_flags = ""
        self.sudo_loop = False

        for candidate in ("doas", "pkexec", "su"):
            if shutil.which(candidate):
                self.sudo_bin = candidate
                return

        raise PrivilegeElevatorNotFoundError(self.sudo_bin)

    def parse_command_line(self, args: Arguments, argv: Iterable[str] | None = None) -> None:
        """Parse ``argv`` into ``args`` and take this program's own options out of it."""
        args.parse(argv)
        self.extract_options(args)

    def extract_options(self, args: Arguments) -> None:
        """Apply and remove the options this program handles, then normalise URLs."""
        for option, value in list(args.options.items()):
            if self.handle_option(option, value.first()):
                args.del_arg(option)

        self.aur_url = self.aur_url.rstrip("/")

        if not self.aur_rpc_url:
            self.aur_rpc_url = self.aur_url + "/rpc?"
            return

        if not self.aur_rpc_url.endswith("?"):
            if self.aur_rpc_url.endswith("/rpc"):
                self.aur_rpc_url += "?"
            else:
                self.aur_rpc_url = self.aur_rpc_url.rstrip("/") + "/rpc?"

    def handle_option(self, option: str, value: str) -> bool:
        """Apply one option; return True if it should be removed from the arguments."""
        global no_confirm

        parsed = _parse_bool(value)
        flag = True if parsed is None else parsed

        string_options = {
            "aururl": "aur_url",
            "aurrpcurl": "aur_rpc_url",
            "sortby": "sort_by",
            "searchby": "search_by",
            "config": "pacman_conf",
            "answerclean": "answer_clean",
            "answerdiff": "answer_diff",
            "answeredit": "answer_edit",
            "answerupgrade": "answer_upgrade",
            "gpgflags": "gpg_flags",
            "mflags": "m_flags",
            "gitflags": "git_flags",
            "builddir": "build_dir",
            "editor": "editor",
            "editorflags": "editor_flags",
            "makepkg": "makepkg_bin",
            "makepkgconf": "makepkg_conf",
            "pacman": "pacman_bin",
            "git": "git_bin",
            "gpg": "gpg_bin",
            "sudo": "sudo_bin",
            "sudoflags": "sudo_flags",
        }
        bool_options = {
            "save": "save_config",
            "afterclean": "clean_after",
            "cleanafter": "clean_after",
            "keepsrc": "keep_src",
            "devel": "devel",
            "timeupdate": "time_update",
            "batchinstall": "batch_install",
            "sudoloop": "sudo_loop",
            "provides": "provides",
            "pgpfetch": "pgp_fetch",
            "cleanmenu": "clean_menu",
            "diffmenu": "diff_menu",
            "editmenu": "edit_menu",
            "useask": "use_ask",
            "combinedupgrade": "combined_upgrade",
            "separatesources": "separate_sources",
        }
        fixed_options: dict[str, tuple[str, Any]] = {
            "topdown": ("bottom_up", False),
            "bottomup": ("bottom_up", True),
            "singlelineresults": ("single_line_results", True),
            "doublelineresults": ("single_line_results", False),
            "redownload": ("re_download", "yes"),
            "redownloadall": ("re_download", "all"),
            "noredownload": ("re_download", "no"),
            "rebuild": ("rebuild", RebuildMode.YES),
            "rebuildall": ("rebuild", RebuildMode.ALL),
            "rebuildtree": ("rebuild", RebuildMode.TREE),
            "norebuild": ("rebuild", RebuildMode.NO),
            "noanswerclean": ("answer_clean", ""),
            "noanswerdiff": ("answer_diff", ""),
            "noansweredit": ("answer_edit", ""),
            "noanswerupgrade": ("answer_upgrade", ""),
            "nomakepkgconf": ("makepkg_conf", ""),
            "a": ("mode", TargetMode.AUR),
            "aur": ("mode", TargetMode.AUR),
            "repo": ("mode", TargetMode.REPO),
            "removemake": ("remove_make", "yes"),
            "noremovemake": ("remove_make", "no"),
            "askremovemake": ("remove_make", "ask"),
            "askyesremovemake": ("remove_make", "askyes"),
        }

        if option in string_options:
            setattr(self, string_options[option], value)
        elif option in bool_options:
            setattr(self, bool_options[option], flag)
        elif option in fixed_options:
            name, fixed = fixed_options[option]
            setattr(self, name, fixed)
        elif option == "debug":
            self.debug = flag
            return not flag
        elif option == "noconfirm":
            no_confirm = flag
        elif option == "completioninterval":
            number = _atoi(value)
            if number is not None:
                self.completion_interval = number
        elif option == "requestsplitn":
            number = _atoi(value)
            if number is not None and number > 0:
                self.request_split_n = number
        else:
            return False

        return True


_JSON_FIELDS: dict[str, str] = {
    item.metadata["json"]: item.name for item in fields(Configuration) if "json" in item.metadata
}
_FIELD_KINDS: dict[str, type] = {item.name: type(item.default) for item in fields(Configuration)}


def _field_for_key(key: str) -> str | None:
    if key in _JSON_FIELDS:
        return _JSON_FIELDS[key]
    folded = key.casefold()
    for json_key, name in _JSON_FIELDS.items():
        if json_key.casefold() == folded:
            return name
    return None


def _matches_kind(kind: type, value: Any) -> bool:
    if kind is bool:
        return isinstance(value, bool)
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, str)


def default_config(version: str) -> Configuration:
    """Return the built-in defaults."""
    return Configuration(
        aur_url="https://aur.archlinux.org",
        build_dir=_expand_vars("$HOME/.cache/yippee"),
        makepkg_bin="makepkg",
        pacman_bin="pacman",
        pgp_fetch=True,
        pacman_conf="/etc/pacman.conf",
        bottom_up=True,
        completion_interval=7,
        max_concurrent_downloads=1,
        sort_by="votes",
        search_by="name-desc",
        git_bin="git",
        gpg_bin="gpg",
        sudo_bin="sudo",
        request_split_n=150,
        re_download="no",
        rebuild=RebuildMode.NO,
        remove_make="ask",
        provides=True,
        clean_menu=True,
        diff_menu=True,
        combined_upgrade=True,
        separate_sources=True,
        version=version,
        use_rpc=True,
        double_confirm=True,
        mode=TargetMode.ANY,
    )


def new_config(logger: Logger | None, config_path: str, version: str) -> Configuration:
    """Build the configuration from defaults, the config file and the environment.

    Raises RuntimeDirError if the build directory cannot be created and
    PrivilegeElevatorNotFoundError if no privilege elevator is found.
    """
    config = default_config(version)

    try:
        cache_home = get_cache_home()
    except RuntimeDirError as exc:
        cache_home = exc.directory
        if logger is not None:
            logger.errorln(exc)

    config.build_dir = cache_home
    config.completion_path = os.path.join(cache_home, COMPLETION_FILE_NAME)
    config.vcs_file_path = os.path.join(cache_home, VCS_FILE_NAME)
    config.load(config_path)

    aurdest = os.environ.get("AURDEST", "")
    if aurdest:
        config.build_dir = aurdest

    config.expand_env()

    if config.build_dir != SYSTEMD_CACHE:
        init_dir(config.build_dir)

    config.set_privilege_elevator()
    return config