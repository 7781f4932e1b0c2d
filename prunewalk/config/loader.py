# prunewalk/config/loader.py
"""
Handles loading, merging, and saving of configurations from/to TOML files,
and reading glob patterns from pattern files.
"""
import toml
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
from dataclasses import asdict, fields as dataclass_fields, MISSING
import structlog

from prunewalk.exceptions import ConfigError

from .settings import WalkConfig

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".prunewalk.toml", "prunewalk.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "prunewalk"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_WALKCONFIG_ATTR_MAP: Dict[str, str] = {
    "root": "root",
    "include_patterns": "include_patterns",
    "exclude_patterns": "exclude_patterns",
    "include_from_files": "include_from_files",
    "exclude_from_files": "exclude_from_files",
    "absolute_paths": "absolute_paths",
    "count_only": "count_only",
    "show_stats": "show_stats",
    "null_separated": "null_separated",
}

_LIST_ATTRS = ("include_patterns", "exclude_patterns", "include_from_files", "exclude_from_files")
_BOOL_ATTRS = ("absolute_paths", "count_only", "show_stats", "null_separated")


def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file():
        return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (OSError, toml.TomlDecodeError) as e:
        log.error("config_file_load_error", path=str(file_path), error=str(e))
        return {}
    if file_path.name == "pyproject.toml":
        return data.get("tool", {}).get("prunewalk", {})
    return data


def load_and_merge_configs(base_dir: Optional[Path] = None) -> Dict[str, Any]:
    # user-global config first, then the first project config found in base_dir.
    base_dir = base_dir or Path.cwd()
    merged_toml_data: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged_toml_data.update(_load_toml_file_data(USER_CONFIG_FILE))

    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = base_dir / filename
        if not candidate.is_file():
            continue
        project_settings = _load_toml_file_data(candidate)
        if not project_settings:
            continue
        log.info("loading_project_local_config", path=str(candidate))
        user_profiles = merged_toml_data.get("profiles", {})
        project_profiles = project_settings.pop("profiles", {})
        if isinstance(user_profiles, dict) and isinstance(project_profiles, dict):
            user_profiles.update(project_profiles)
            merged_toml_data["profiles"] = user_profiles
        elif isinstance(project_profiles, dict):
            merged_toml_data["profiles"] = project_profiles
        merged_toml_data.update(project_settings)
        break

    if not merged_toml_data:
        log.debug("no_configuration_files_loaded")
    return merged_toml_data


def _check_option(attr: str, value: Any) -> None:
    if attr in _LIST_ATTRS:
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, (str, Path)) for v in value):
            raise ConfigError(f"'{attr}' must be a list of strings, got {value!r}")
    elif attr in _BOOL_ATTRS and not isinstance(value, bool):
        raise ConfigError(f"'{attr}' must be true or false, got {value!r}")


def _apply_toml_section(options: Dict[str, Any], section: Mapping[str, Any]) -> None:
    for toml_key, attr in CONFIG_KEY_TO_WALKCONFIG_ATTR_MAP.items():
        if toml_key in section:
            _check_option(attr, section[toml_key])
            options[attr] = section[toml_key]


def build_config(
    raw_toml_data: Mapping[str, Any],
    profile_name: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> WalkConfig:
    """
    Layers dataclass defaults, config file values, an optional profile and
    explicit overrides (typically from the command line) into a WalkConfig.

    Overrides whose value is None are treated as "not given".
    """
    options: Dict[str, Any] = {}
    _apply_toml_section(options, raw_toml_data)

    if profile_name:
        profile_values = raw_toml_data.get("profiles", {}).get(profile_name)
        if profile_values:
            log.info("applying_profile_settings", profile=profile_name)
            _apply_toml_section(options, profile_values)
        else:
            log.warning("profile_not_found_in_config_files", profile_name=profile_name)

    valid_fields = {f.name for f in dataclass_fields(WalkConfig) if f.init}
    for attr, value in (overrides or {}).items():
        if value is None:
            continue
        if attr not in valid_fields:
            raise ConfigError(f"unknown configuration option '{attr}'")
        options[attr] = value

    return WalkConfig(**options)


def load_patterns_from_file(pattern_file: Path) -> List[str]:
    # one glob per line; blank lines and '#' comments are skipped.
    try:
        text = pattern_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"could not read pattern file {pattern_file}: {e}")
    patterns = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    log.debug("pattern_file_loaded", path=str(pattern_file), count=len(patterns))
    return patterns


def effective_patterns(config: WalkConfig) -> Tuple[List[str], List[str]]:
    # inline patterns first, then pattern files in the order given.
    include = list(config.include_patterns)
    for pattern_file in config.include_from_files:
        include.extend(load_patterns_from_file(pattern_file))
    exclude = list(config.exclude_patterns)
    for pattern_file in config.exclude_from_files:
        exclude.extend(load_patterns_from_file(pattern_file))
    return include, exclude


def save_config_to_profile(config_to_save: WalkConfig, profile_name: str, target_dir: Optional[Path] = None) -> bool:
    target_dir = target_dir or Path.cwd()
    target_toml_path = target_dir / ".prunewalk.toml"
    if not target_toml_path.exists() and (target_dir / "prunewalk.toml").exists():
        target_toml_path = target_dir / "prunewalk.toml"
    log.info("attempting_to_save_profile", profile=profile_name, path=str(target_toml_path))

    always_save = ("include_patterns", "exclude_patterns")
    profile_data: Dict[str, Any] = {}
    config_dict = asdict(config_to_save)

    for field_def in dataclass_fields(WalkConfig):
        toml_key = next((k for k, v in CONFIG_KEY_TO_WALKCONFIG_ATTR_MAP.items() if v == field_def.name), None)
        if not toml_key:
            continue
        value = config_dict[field_def.name]
        default_val = field_def.default_factory() if field_def.default_factory is not MISSING else field_def.default
        if value == default_val and field_def.name not in always_save:
            continue
        if isinstance(value, Path):
            profile_data[toml_key] = str(value)
        elif isinstance(value, list):
            profile_data[toml_key] = [str(v) for v in value]
        else:
            profile_data[toml_key] = value

    try:
        existing_data: Dict[str, Any] = {}
        if target_toml_path.exists():
            try:
                existing_data = toml.load(target_toml_path)
            except toml.TomlDecodeError as e:
                raise ConfigError(f"Could not read existing TOML {target_toml_path} to save profile: {e}")

        if profile_name.upper() == "DEFAULT":
            profiles_bak = existing_data.pop("profiles", None)
            existing_data.update(profile_data)
            if profiles_bak is not None:
                existing_data["profiles"] = profiles_bak
        else:
            existing_data.setdefault("profiles", {})[profile_name] = profile_data

        with target_toml_path.open("w", encoding="utf-8") as f:
            toml.dump(existing_data, f)
    except OSError as e:
        raise ConfigError(f"Error writing profile '{profile_name}' to {target_toml_path}: {e}")

    log.info("profile_saved_successfully", profile=profile_name, path=str(target_toml_path))
    return True
