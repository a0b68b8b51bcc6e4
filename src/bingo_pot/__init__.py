"""Pattern matching and waiting-number analysis for 5x5 Bingo cards."""

from .version import __version__

__all__ = ["__version__"]
