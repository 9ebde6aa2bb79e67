"""Message catalog lookup with printf-style argument formatting."""

from collections.abc import Mapping

_catalog: dict[str, str] = {}


def set_catalog(catalog: Mapping[str, str] | None) -> None:
    """Install a message catalog; ``None`` or an empty mapping restores the defaults."""
    global _catalog
    _catalog = dict(catalog) if catalog else {}


def tr(message: str, *args: object) -> str:
    """Translate ``message`` and, when arguments are given, format them into it."""
    translated = _catalog.get(message, message)
    if args:
        return translated % args
    return translated