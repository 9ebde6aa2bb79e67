"""Errors raised while loading and applying settings."""

from __future__ import annotations

from yippee.text.i18n import tr


class PrivilegeElevatorNotFoundError(Exception):
    """No usable sudo-like program was found on the PATH."""

    def __init__(self, conf_value: str) -> None:
        self.conf_value = conf_value
        super().__init__(
            f"unable to find a privilege elevator, config value: {conf_value}"
        )


class RuntimeDirError(Exception):
    """A directory needed at runtime could not be created."""

    def __init__(self, directory: str, inner: BaseException) -> None:
        self.directory = directory
        self.inner = inner
        super().__init__(tr("failed to create directory '%s': %s", directory, inner))


class UserAbortError(Exception):
    """The user declined to continue."""

    def __init__(self) -> None:
        super().__init__(tr("aborting due to user"))