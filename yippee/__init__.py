"""Building blocks for a pacman wrapper with AUR support."""

__version__ = "12.0.0"