from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

# c/c++ sources, headers and cmake inputs.
DEFAULT_INCLUDE_PATTERNS: List[str] = [
    "**/*.{c,cc,cxx,cpp,h,hpp,hxx}",
    "**/*.{cmake,cmake.in}",
    "**/CMakeFiles.txt",
]
# prunes every hidden directory (.git, .pixi, .venv, ...) before it is read.
DEFAULT_EXCLUDE_PATTERNS: List[str] = ["**/.*/**"]

@dataclass
class WalkConfig:
    # holds all configuration parameters for a single run.
    root: Path = Path(".")
    include_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS))
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    include_from_files: List[Path] = field(default_factory=list)
    exclude_from_files: List[Path] = field(default_factory=list)
    absolute_paths: bool = False
    count_only: bool = False
    show_stats: bool = False
    null_separated: bool = False
    save_profile_name: Optional[str] = None

    def __post_init__(self):
        # normalizes values that may arrive as plain strings from toml files.
        self.root = Path(self.root)
        self.include_from_files = [Path(p) for p in self.include_from_files]
        self.exclude_from_files = [Path(p) for p in self.exclude_from_files]
        self.include_patterns = list(self.include_patterns)
        self.exclude_patterns = list(self.exclude_patterns)
