"""prunewalk: breadth-first file collection with glob include/exclude patterns
and directory pruning."""

from prunewalk.core.discovery import collect
from prunewalk.exceptions import PatternError, PruneWalkError

__version__ = "0.1.0"

__all__ = ["__version__", "collect", "PatternError", "PruneWalkError"]
