# yippee

Building blocks for a pacman wrapper that also handles AUR packages.
The package parses pacman-style command lines, loads and saves the
helper's JSON configuration, builds the `pacman`, `makepkg`, `git` and
`gpg` command lines to run, checks the PGP keys that PKGBUILDs ask for,
and works on PKGBUILD directories (merging, source downloads, cleaning
up afterwards).

It needs Python 3.11 or later and nothing outside the standard library.

## Layout

- `yippee.text.color` – ANSI colour helpers (`red`, `green`, `yellow`,
  `cyan`, `magenta`, `blue`, `bold`, `color_hash`) and `set_use_color`
  to switch colour off for the whole process.
- `yippee.text.format` – `split_db_from_name`, `less_runes`, `human`,
  `format_time` and `format_time_query`.
- `yippee.text.i18n` – `tr` looks messages up in a catalog installed
  with `set_catalog` and formats printf-style arguments into them.
- `yippee.text.logger` – the `Logger` that writes decorated messages and
  asks yes/no questions, and `InputOverflowError`.
- `yippee.settings.modes` – `RebuildMode` and `TargetMode`.
- `yippee.settings.parser` – `Arguments`, `Option`, `ParseError` and the
  option tables `is_arg`, `is_op`, `is_global`, `has_param`.
- `yippee.settings.dirs` – `get_config_path`, `get_cache_home`, `init_dir`.
- `yippee.settings.config` – `Configuration`, `default_config`,
  `new_config`, `expand_env_or_home`, and the process-wide `no_confirm`
  and `hide_menus` flags.
- `yippee.settings.errors` – `PrivilegeElevatorNotFoundError`,
  `RuntimeDirError`, `UserAbortError`.
- `yippee.exe.runner` – the `Command` value and `OSRunner`, which runs it
  with `subprocess`.
- `yippee.exe.cmd_builder` – `CmdBuilder`, `new_cmd_builder`,
  `git_filtered_env`.
- `yippee.exe.mock` – `MockRunner`, `MockBuilder` and `Call`, stand-ins
  that record the commands they are given.
- `yippee.pgp` – `PGPKeySet`, `check_pgp_keys`, `import_keys`,
  `format_keys_to_import`.
- `yippee.workdir.aur_source` – `download_pkgbuild_source`,
  `download_pkgbuild_source_fanout`, `DownloadSourceError`.
- `yippee.workdir.merge` – `git_merge`, `merge_pkgbuilds`, `MergeError`.
- `yippee.workdir.clean` – `remove_make`, `clean_after`.

## Parsing a command line

```python
from yippee.settings.parser import Arguments

args = Arguments()
args.parse(["-Syu", "--noconfirm", "--ignore", "foo,bar", "yippee-git"])

args.op                              # "S"
args.exists_arg("u", "sysupgrade")   # True
args.get_args("ignore")              # ["foo", "bar"]
args.format_globals()                # ["--noconfirm"]
args.targets                         # ["yippee-git"]
```

Options are stored under the name given on the command line; short
flags may be bundled (`-Syu`), options that take a value accept it
either joined (`--dbpath=/x`, `-b/x`) or as the next word, and values
are split on commas. Everything after `--` is a target. With no
operation and no targets the parser behaves as if `-Syu` was given; with
targets only it uses `Y`. A `-` argument reads targets from piped
standard input and then reopens `/dev/tty` as standard input. Errors
are raised as `ParseError`.

`need_root(mode)` tells whether the pacman operation needs root, and
`format_args()` / `format_globals()` turn the arguments back into a
pacman command line.

## Configuration

```python
from yippee.settings.config import default_config
from yippee.settings.parser import Arguments

config = default_config("12.0.0")
args = Arguments()
config.parse_command_line(args, ["-S", "--devel", "--aururl", "https://aur.example.com/"])

config.devel        # True
config.aur_rpc_url  # "https://aur.example.com/rpc?"
print(config.to_json())
```

`parse_command_line` parses into `args` and then removes the options the
configuration itself handles, leaving the rest for pacman.
`save(config_path, version)` writes the tab-indented JSON file and
`load(config_path)` reads it back; a missing file is ignored and an
unreadable one is reported on standard error.

`new_config(logger, config_path, version)` builds a configuration the
way the helper starts: defaults, the cache directory from
`get_cache_home()`, the JSON file at `config_path`, `AURDEST`,
environment and `~/` expansion, and finally a search for a privilege
elevator (`PACMAN_AUTH`, the configured one, `sudo`, `doas`, `pkexec`,
`su`). It raises `PrivilegeElevatorNotFoundError` or `RuntimeDirError`
when it cannot go on. `get_config_path()` returns where the file lives
under `XDG_CONFIG_HOME` or `HOME`, creating its directory.

## Logging and prompts

```python
import io
import sys

from yippee.text.logger import Logger

logger = Logger(sys.stdout, sys.stderr, io.StringIO("y\n"), False, "main")
logger.infoln("starting")
if logger.continue_task("Proceed with installation?", True, False):
    logger.operation_infoln("installing")
```

`continue_task` returns the preset answer when `no_confirm` is true or
the input is empty; `get_input` reads one line, raising `EOFError` at
the end of input and `InputOverflowError` when the line is too long.

## Building and running commands

```python
import sys

from yippee.exe.cmd_builder import new_cmd_builder
from yippee.exe.runner import OSRunner
from yippee.settings.config import default_config
from yippee.text.logger import Logger

config = default_config("12.0.0")
logger = Logger(sys.stdout, sys.stderr, sys.stdin, False, "exe")
builder = new_cmd_builder(config, OSRunner(logger), logger, "/var/lib/pacman")

cmd = builder.build_makepkg_cmd("/tmp/build/yippee", "--verifysource")
print(cmd)
```

When running as root, git, gpg and makepkg commands are run as the user
in `SUDO_USER` or `DOAS_USER`, or wrapped in `systemd-run` with a
dynamic user. `build_pacman_cmd` waits while pacman's `db.lck` exists
and prefixes the privilege elevator when the operation needs root.
`OSRunner.show` and `OSRunner.capture` raise
`subprocess.CalledProcessError` when a command fails.

`MockRunner` and `MockBuilder` record every command they are given,
which makes code that runs commands easy to test without touching the
system.

## PGP keys and work directories

`check_pgp_keys(logger, pkgbuild_dirs_by_base, srcinfos, cmd_builder,
no_confirm)` runs `gpg --list-keys` for every key in each srcinfo's
`valid_pgp_keys`, returns the missing ones and, if the user agrees,
imports them with `gpg --recv-keys`.

`merge_pkgbuilds` hard-resets and fast-forwards each directory,
`download_pkgbuild_source_fanout` runs `makepkg --verifysource` in every
directory on a thread pool (failures are raised as an
`ExceptionGroup`), `remove_make` removes make dependencies with
`pacman -Rsu`, and `clean_after` resets each directory and removes
untracked files other than built packages.

## What this package does not do

There is no command to run: it offers no `main` and no console script.
It does not talk to the AUR, read the pacman database, resolve
dependencies, clone PKGBUILD repositories, parse `.SRCINFO` files or
install packages. Callers supply the package bases, directories and
srcinfo objects these functions work on.