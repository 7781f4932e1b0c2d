# prunewalk/core/discovery/walker.py
import os
from collections import deque
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Deque, Dict, Iterable, List

import structlog

from prunewalk.core.discovery.glob_pattern import PatternSet, compile_pattern_set
from prunewalk.core.discovery.path_resolution import (
    PathLike,
    canonicalize_root,
    has_hidden_segment,
    to_match_str,
)

log = structlog.get_logger(__name__)


@dataclass
class WalkStats:
    # counters for one walk. unreadable directories are otherwise invisible to callers.
    directories_read: int = 0
    directories_pruned: int = 0
    directories_unreadable: int = 0
    files_seen: int = 0
    files_hidden: int = 0
    files_matched: int = 0
    entries_ignored: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class DirectoryWalker:
    """
    Breadth-first walk of one root, pruning excluded directories before they
    are read.

    A walker owns its queue, its result list and its stats; the compiled
    pattern sets are only read. Symbolic links are never followed, matched or
    enqueued. Directories that cannot be read are skipped without raising.
    """

    def __init__(self, root: PathLike, include: PatternSet, exclude: PatternSet):
        self.supplied_root = Path(root)
        self.root = canonicalize_root(root)
        self.include = include
        self.exclude = exclude
        self.stats = WalkStats()

    def _is_excluded_dir(self, path: Path) -> bool:
        return self.exclude.matches(to_match_str(path, self.root, is_dir=True))

    def _result_path(self, match_str: str) -> Path:
        # results keep the caller's spelling of the root, relative or absolute.
        return self.supplied_root / match_str

    def _accept_file(self, path: Path, results: List[Path]) -> None:
        self.stats.files_seen += 1
        match_str = to_match_str(path, self.root, is_dir=False)
        if has_hidden_segment(match_str):
            self.stats.files_hidden += 1
            return
        if self.include.matches(match_str) and not self.exclude.matches(match_str):
            self.stats.files_matched += 1
            results.append(self._result_path(match_str))

    def walk(self) -> List[Path]:
        results: List[Path] = []
        if not self.include:
            log.info("walk_skipped_no_include_patterns", root=str(self.supplied_root))
            return results

        log.info(
            "walk_started",
            root=str(self.root),
            include_count=len(self.include),
            exclude_count=len(self.exclude),
        )

        queue: Deque[Path] = deque([self.root])
        while queue:
            directory = queue.popleft()

            if self._is_excluded_dir(directory):
                self.stats.directories_pruned += 1
                log.debug("directory_pruned", path=str(directory))
                continue

            try:
                with os.scandir(directory) as entries:
                    listing = list(entries)
            except OSError as e:
                self.stats.directories_unreadable += 1
                log.debug("directory_unreadable", path=str(directory), error=str(e))
                continue
            self.stats.directories_read += 1

            for entry in listing:
                path = directory / entry.name
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    is_file = not is_dir and entry.is_file(follow_symlinks=False)
                except OSError as e:
                    self.stats.entries_ignored += 1
                    log.debug("entry_type_unknown", path=str(path), error=str(e))
                    continue

                if is_dir:
                    if self._is_excluded_dir(path):
                        self.stats.directories_pruned += 1
                        log.debug("directory_pruned", path=str(path))
                    else:
                        queue.append(path)
                elif is_file:
                    self._accept_file(path, results)
                else:
                    # symlinks, sockets, devices and fifos.
                    self.stats.entries_ignored += 1

        log.info("walk_finished", root=str(self.root), **self.stats.as_dict())
        return results


def collect(
    root: PathLike,
    include_patterns: Iterable[str],
    exclude_patterns: Iterable[str],
) -> List[Path]:
    """
    Collects files under `root` matching the include patterns.

    Args:
        root: Directory to walk. A missing or unreadable root gives an empty list.
        include_patterns: Glob patterns a file must match at least one of.
        exclude_patterns: Glob patterns that drop files, and prune directories
            before they are read.

    Returns:
        Matched paths in breadth-first discovery order, spelled relative to
        `root` as the caller passed it.

    Raises:
        PatternError: if any pattern is malformed. Raised before any
            filesystem access.
    """
    include = compile_pattern_set(include_patterns)
    exclude = compile_pattern_set(exclude_patterns)
    return DirectoryWalker(root, include, exclude).walk()
