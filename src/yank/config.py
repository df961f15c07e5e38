"""
Configuration acquisition: built-in defaults < config file < command line.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .core import compile_globs
from .defaults import DEFAULT_EXCLUDE_PATTERNS, binary_exclude_patterns
from .errors import ConfigError
from .ignore import IgnoreRuleSet

CONFIG_SEARCH_PLACES: Tuple[str, ...] = (
    "yank.toml",
    "yank.yaml",
    "yank.yml",
    "yank.json",
    "pyproject.toml",
)
CONFIG_KEYS = frozenset({"include", "exclude", "clip", "stats", "debug", "lang_map"})
DEFAULT_INCLUDE = "**/*"


@dataclass(frozen=True)
class YankConfig:
    include: Tuple[str, ...] = (DEFAULT_INCLUDE,)
    exclude: Tuple[str, ...] = ()
    clip: bool = False
    stats: bool = False
    debug: bool = False
    lang_map: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.lang_map, MappingProxyType):
            object.__setattr__(self, "lang_map", MappingProxyType(dict(self.lang_map)))


# Config-file helpers
def _load_toml(path: Path) -> Dict[str, Any]:
    with path.open("rb") as fh:
        data = tomllib.load(fh)
    if path.name == "pyproject.toml":
        return data.get("tool", {}).get("yank", {})
    return data


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


_LOADERS = {
    ".toml": _load_toml,
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
    ".json": _load_json,
}


def load_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file '{path}' does not exist")
    if not path.is_file():
        raise ConfigError(f"'{path}' is not a file")
    loader = _LOADERS.get(path.suffix.lower())
    if loader is None:
        raise ConfigError(f"Unsupported config format '{path.suffix}' ({path})")
    try:
        data = loader(path)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
        # tomllib.TOMLDecodeError and json.JSONDecodeError are ValueErrors
        raise ConfigError(f"Could not read config file '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a table/mapping")

    values = {str(k).replace("-", "_"): v for k, v in data.items()}
    unknown = sorted(set(values) - CONFIG_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config key(s) in '{path}': {', '.join(unknown)}")
    return values


def find_config_file(cwd: Path) -> Optional[Path]:
    for name in CONFIG_SEARCH_PLACES:
        candidate = cwd / name
        if not candidate.is_file():
            continue
        if name == "pyproject.toml" and not load_config_file(candidate):
            continue
        return candidate
    return None


# Value coercion
def _as_patterns(value: Any, key: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"'{key}' must be a string or a list of strings")


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false")
    return value


def parse_lang_map(value: Any) -> Dict[str, str]:
    """Accept a mapping or a JSON object string such as '{"LICENSE": "text"}'."""
    if value is None:
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as e:
            raise ConfigError("Invalid JSON for --lang-map") from e
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise ConfigError("lang_map must map file names to language names")
    return dict(value)


def _is_dynamic(pattern: str) -> bool:
    return any(ch in pattern for ch in "*?[{(!")


def expand_directory_patterns(patterns: Sequence[str], cwd: Path) -> List[str]:
    """Turn plain directory paths into ``dir/**/*``; everything else is kept."""
    expanded: List[str] = []
    for pattern in patterns:
        if not _is_dynamic(pattern) and (cwd / pattern).is_dir():
            expanded.append(pattern.rstrip("/\\") + "/**/*")
        else:
            expanded.append(pattern)
    return expanded


def validate_globs(patterns: Sequence[str]) -> None:
    for pattern in patterns:
        if "[" in pattern and "]" not in pattern:
            raise ConfigError(f"Invalid glob pattern: {pattern}. Unclosed character class.")
        if "{" in pattern and "}" not in pattern:
            raise ConfigError(f"Invalid glob pattern: {pattern}. Unclosed brace expansion.")
        if "(" in pattern and ")" not in pattern:
            raise ConfigError(f"Invalid glob pattern: {pattern}. Unclosed group.")
    compile_globs(patterns)


def load_config(
    *,
    paths: Sequence[str] = (),
    include: Optional[Sequence[str]] = None,
    exclude: Optional[Sequence[str]] = None,
    clip: Optional[bool] = None,
    stats: Optional[bool] = None,
    debug: Optional[bool] = None,
    lang_map: Optional[str] = None,
    config_path: Optional[Path] = None,
    cwd: Optional[Path] = None,
) -> YankConfig:
    """Merge defaults, the config file and command-line values into a YankConfig.

    ``None`` means "not given on the command line" and falls through to the
    config file, then to the built-in default.
    """
    cwd = Path(cwd) if cwd is not None else Path.cwd()

    if config_path is not None:
        file_values = load_config_file(Path(config_path))
    else:
        found = find_config_file(cwd)
        file_values = load_config_file(found) if found else {}

    if include is None:
        include = _as_patterns(file_values.get("include", []), "include")
    if exclude is None:
        exclude = _as_patterns(file_values.get("exclude", []), "exclude")

    raw_includes = [*paths, *include]
    validate_globs(raw_includes)
    includes = expand_directory_patterns(raw_includes, cwd) if raw_includes else [DEFAULT_INCLUDE]

    # surface user mistakes before any file I/O
    IgnoreRuleSet.build(exclude)
    excludes = [*DEFAULT_EXCLUDE_PATTERNS, *binary_exclude_patterns(), *exclude]

    def _flag(cli_value: Optional[bool], key: str) -> bool:
        if cli_value is not None:
            return cli_value
        return _as_bool(file_values.get(key, False), key)

    return YankConfig(
        include=tuple(includes),
        exclude=tuple(excludes),
        clip=_flag(clip, "clip"),
        stats=_flag(stats, "stats"),
        debug=_flag(debug, "debug"),
        lang_map=parse_lang_map(lang_map if lang_map is not None else file_values.get("lang_map")),
    )
