# prunewalk/core/discovery/path_resolution.py
import os
from pathlib import Path, PurePath
from typing import Union

import structlog

log = structlog.get_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def canonicalize_root(root: PathLike) -> Path:
    # best-effort absolute, symlink-free form of the root. never fatal.
    supplied = Path(root)
    try:
        return supplied.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        log.debug("root_canonicalization_failed", root=str(supplied), error=str(e))
        return supplied


def to_match_str(path: PurePath, root: PurePath, is_dir: bool) -> str:
    """
    Builds the string patterns are matched against.

    Paths at or below `root` become root-relative with forward slashes (the
    root itself becomes an empty string). Anything else keeps its own text
    minus a leading "./". Directories always end in "/", files never do.
    """
    try:
        relative = path.relative_to(root)
    except ValueError:
        match_str = path.as_posix()
        if match_str.startswith("./"):
            match_str = match_str[2:]
    else:
        match_str = "" if relative == PurePath(".") else relative.as_posix()

    if is_dir and not match_str.endswith("/"):
        match_str += "/"
    return match_str


def has_hidden_segment(match_str: str) -> bool:
    # a segment is hidden when it starts with "." and is not "." itself.
    return any(seg.startswith(".") and seg != "." for seg in match_str.split("/"))
