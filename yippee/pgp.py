"""Checks the PGP keys PKGBUILDs need and offers to import missing ones."""

from __future__ import annotations

import subprocess
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from yippee.text.color import cyan
from yippee.text.i18n import tr

if TYPE_CHECKING:
    from yippee.text.logger import Logger


class PGPKeySet:
    """Maps PGP keys, case-insensitively, to the package bases that need them."""

    def __init__(self) -> None:
        self._required_by: dict[str, list[str]] = {}

    def add(self, key: str, pkgbase: str) -> None:
        self._required_by.setdefault(key.upper(), []).append(pkgbase)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.upper() in self._required_by

    def __iter__(self) -> Iterator[str]:
        return iter(self._required_by)

    def __len__(self) -> int:
        return len(self._required_by)

    def items(self) -> list[tuple[str, list[str]]]:
        return [(key, list(bases)) for key, bases in self._required_by.items()]


_COMMAND_ERRORS = (OSError, subprocess.SubprocessError)


def check_pgp_keys(logger: Logger, pkgbuild_dirs_by_base: Mapping[str, str],
                   srcinfos: Mapping[str, Any], cmd_builder: Any,
                   no_confirm: bool) -> list[str]:
    """Return the keys missing from the keyring, importing them if the user agrees.

    Each srcinfo must have a ``valid_pgp_keys`` sequence. Raises
    RuntimeError when importing fails.
    """
    problematic = PGPKeySet()

    for pkg in pkgbuild_dirs_by_base:
        for key in srcinfos[pkg].valid_pgp_keys:
            if key in problematic:
                problematic.add(key, pkg)
                continue
            try:
                cmd_builder.show(cmd_builder.build_gpg_cmd("--list-keys", key))
            except _COMMAND_ERRORS:
                problematic.add(key, pkg)

    if not problematic:
        return []

    logger.println("\n", format_keys_to_import(logger, problematic))

    keys = list(problematic)
    if logger.continue_task(tr("Import?"), True, no_confirm):
        import_keys(logger, cmd_builder, keys)
    return keys


def import_keys(logger: Logger, cmd_builder: Any, keys: list[str]) -> None:
    """Receive ``keys`` with gpg; raises RuntimeError on failure."""
    logger.operation_infoln(tr("Importing keys with gpg..."))
    try:
        cmd_builder.show(cmd_builder.build_gpg_cmd("--recv-keys", *keys))
    except _COMMAND_ERRORS as exc:
        raise RuntimeError(tr("problem importing keys")) from exc


def format_keys_to_import(logger: Logger, keys: PGPKeySet) -> str:
    """Describe the keys to import and which packages need them.

    Raises ValueError when there are no keys.
    """
    if not keys:
        raise ValueError(tr("no keys to import"))

    parts = [logger.sprint_operation_info(tr("PGP keys need importing:"))]
    for key, bases in keys.items():
        pkglist = "".join(base + "  " for base in bases).rstrip(" ")
        parts.append("\n" + logger.sprint_warn(
            tr("%s, required by: %s", cyan(key), cyan(pkglist))
        ))
    return "".join(parts)