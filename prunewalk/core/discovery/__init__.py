# prunewalk/core/discovery/__init__.py
"""
Path discovery for prunewalk.

A breadth-first walker that prunes excluded directories before reading them,
plus the glob dialect used to decide what is included and what is excluded.
"""
from .glob_pattern import PatternSet, compile_pattern_set, expand_braces, matches
from .walker import DirectoryWalker, WalkStats, collect

__all__ = [
    "DirectoryWalker",
    "PatternSet",
    "WalkStats",
    "collect",
    "compile_pattern_set",
    "expand_braces",
    "matches",
]
