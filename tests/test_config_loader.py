"""
Tests for loading, layering and saving prunewalk configuration.
"""
from pathlib import Path
from unittest.mock import patch

import pytest
import toml

from prunewalk.config import loader
from prunewalk.config.loader import (
    build_config,
    effective_patterns,
    load_and_merge_configs,
    load_patterns_from_file,
    save_config_to_profile,
)
from prunewalk.config.settings import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_INCLUDE_PATTERNS, WalkConfig
from prunewalk.exceptions import ConfigError


@pytest.fixture(autouse=True)
def no_user_config(tmp_path: Path):
    """Keeps the developer's own ~/.config/prunewalk out of the tests."""
    with patch.object(loader, "USER_CONFIG_FILE", tmp_path / "no-user-config.toml"):
        yield


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    project = tmp_path / "project"
    project.mkdir()
    (project / ".prunewalk.toml").write_text(
        """
include_patterns = ["**/*.py"]
show_stats = true

[profiles.docs]
include_patterns = ["docs/**/*.md"]
exclude_patterns = ["**/drafts/"]
count_only = true
"""
    )
    return project


def test_defaults_without_any_config():
    config = build_config({})
    assert config.root == Path(".")
    assert config.include_patterns == DEFAULT_INCLUDE_PATTERNS
    assert config.exclude_patterns == DEFAULT_EXCLUDE_PATTERNS
    assert config.count_only is False


def test_default_pattern_lists_are_not_shared():
    first = WalkConfig()
    first.include_patterns.append("**/*.rs")
    assert "**/*.rs" not in WalkConfig().include_patterns


def test_project_config_is_loaded(project_dir: Path):
    raw = load_and_merge_configs(project_dir)
    config = build_config(raw)
    assert config.include_patterns == ["**/*.py"]
    assert config.exclude_patterns == DEFAULT_EXCLUDE_PATTERNS
    assert config.show_stats is True


def test_profile_overrides_file_values(project_dir: Path):
    config = build_config(load_and_merge_configs(project_dir), profile_name="docs")
    assert config.include_patterns == ["docs/**/*.md"]
    assert config.exclude_patterns == ["**/drafts/"]
    assert config.count_only is True
    assert config.show_stats is True


def test_unknown_profile_keeps_file_values(project_dir: Path):
    config = build_config(load_and_merge_configs(project_dir), profile_name="nope")
    assert config.include_patterns == ["**/*.py"]


def test_overrides_win_and_none_means_not_given(project_dir: Path):
    config = build_config(
        load_and_merge_configs(project_dir),
        profile_name="docs",
        overrides={"include_patterns": ["**/*.rst"], "root": None, "count_only": False},
    )
    assert config.include_patterns == ["**/*.rst"]
    assert config.root == Path(".")
    assert config.count_only is False


def test_unknown_override_is_rejected():
    with pytest.raises(ConfigError):
        build_config({}, overrides={"follow_symlinks": True})


def test_pyproject_tool_table_is_read(tmp_path: Path):
    (tmp_path / "pyproject.toml").write_text(
        """
[project]
name = "demo"

[tool.prunewalk]
exclude_patterns = ["**/build/"]
root = "src"
"""
    )
    config = build_config(load_and_merge_configs(tmp_path))
    assert config.exclude_patterns == ["**/build/"]
    assert config.root == Path("src")


def test_user_config_is_merged_under_project_config(tmp_path: Path, project_dir: Path):
    user_file = tmp_path / "user.toml"
    user_file.write_text(
        """
absolute_paths = true
include_patterns = ["**/*.go"]

[profiles.go]
include_patterns = ["cmd/**/*.go"]
"""
    )
    with patch.object(loader, "USER_CONFIG_FILE", user_file):
        raw = load_and_merge_configs(project_dir)
    assert set(raw["profiles"]) == {"go", "docs"}
    config = build_config(raw)
    assert config.absolute_paths is True
    assert config.include_patterns == ["**/*.py"]


def test_malformed_toml_is_ignored(tmp_path: Path):
    (tmp_path / ".prunewalk.toml").write_text("include_patterns = [unterminated")
    assert load_and_merge_configs(tmp_path) == {}


def test_wrong_types_raise_config_error():
    with pytest.raises(ConfigError):
        build_config({"include_patterns": "**/*.c"})
    with pytest.raises(ConfigError):
        build_config({"count_only": "yes"})


def test_load_patterns_from_file(tmp_path: Path):
    pattern_file = tmp_path / "patterns.txt"
    pattern_file.write_text("# sources\n**/*.c\n\n  **/*.h  \n#**/*.md\n")
    assert load_patterns_from_file(pattern_file) == ["**/*.c", "**/*.h"]


def test_missing_pattern_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_patterns_from_file(tmp_path / "missing.txt")


def test_effective_patterns_appends_pattern_files(tmp_path: Path):
    includes = tmp_path / "inc.txt"
    includes.write_text("**/*.h\n")
    excludes = tmp_path / "exc.txt"
    excludes.write_text("**/third_party/\n")
    config = WalkConfig(
        include_patterns=["**/*.c"],
        exclude_patterns=[],
        include_from_files=[includes],
        exclude_from_files=[str(excludes)],
    )
    assert effective_patterns(config) == (["**/*.c", "**/*.h"], ["**/third_party/"])


def test_save_profile_round_trip(tmp_path: Path):
    config = WalkConfig(include_patterns=["**/*.rs"], count_only=True, root=Path("crates"))
    assert save_config_to_profile(config, "rust", target_dir=tmp_path)

    saved = toml.load(tmp_path / ".prunewalk.toml")
    assert saved["profiles"]["rust"]["include_patterns"] == ["**/*.rs"]
    assert saved["profiles"]["rust"]["root"] == "crates"
    assert "absolute_paths" not in saved["profiles"]["rust"]

    reloaded = build_config(load_and_merge_configs(tmp_path), profile_name="rust")
    assert reloaded.include_patterns == ["**/*.rs"]
    assert reloaded.count_only is True
    assert reloaded.root == Path("crates")


def test_save_default_profile_writes_top_level_keys(tmp_path: Path):
    (tmp_path / ".prunewalk.toml").write_text('[profiles.keep]\ncount_only = true\n')
    save_config_to_profile(WalkConfig(show_stats=True), "DEFAULT", target_dir=tmp_path)
    saved = toml.load(tmp_path / ".prunewalk.toml")
    assert saved["show_stats"] is True
    assert saved["profiles"]["keep"]["count_only"] is True


def test_save_into_unreadable_toml_raises(tmp_path: Path):
    (tmp_path / ".prunewalk.toml").write_text("not = [valid")
    with pytest.raises(ConfigError):
        save_config_to_profile(WalkConfig(), "x", target_dir=tmp_path)
