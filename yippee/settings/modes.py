"""Rebuild and target modes used when selecting and building packages."""

from enum import IntEnum, StrEnum


class RebuildMode(StrEnum):
    """How eagerly already-built packages are rebuilt."""

    NO = "no"
    YES = "yes"
    TREE = "tree"
    ALL = "all"


class TargetMode(IntEnum):
    """Which package sources an operation may draw targets from."""

    ANY = 0
    AUR = 1
    REPO = 2

    def at_least_aur(self) -> bool:
        """True when AUR packages are in scope."""
        return self in (TargetMode.ANY, TargetMode.AUR)

    def at_least_repo(self) -> bool:
        """True when repository packages are in scope."""
        return self in (TargetMode.ANY, TargetMode.REPO)