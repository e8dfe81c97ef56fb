"""Configuration loading for modelgen (.modelgen.yml)."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .keywords import ModelsConfig

CONFIG_FILENAME = ".modelgen.yml"
DEFAULT_BUILD_TIMEOUT = 600.0


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be found or parsed."""


@dataclass
class BuildConfig:
    """External build step run before scanning."""

    command: List[str] = field(default_factory=list)
    timeout: float = DEFAULT_BUILD_TIMEOUT


@dataclass
class ProjectConfig:
    """Represents the high-level settings defined in .modelgen.yml."""

    root: Path
    name: str
    source_dir: Path
    output_dir: Optional[Path] = None
    models: ModelsConfig = field(default_factory=ModelsConfig)
    build: BuildConfig = field(default_factory=BuildConfig)


def load_config(project_path: Path) -> ProjectConfig:
    """Load configuration for the project rooted at ``project_path``."""
    root = project_path.expanduser().resolve()
    if not root.is_dir():
        raise ConfigError(f"Project directory not found: {project_path}")

    config_file = root / CONFIG_FILENAME
    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    name = _as_str(data.get("name")) or root.name
    source_dir = root / (_as_str(data.get("source_dir")) or ".")
    output_str = _as_str(data.get("output_dir"))
    output_dir = root / output_str if output_str else None

    models_data = _as_dict(data.get("models"))
    try:
        models = ModelsConfig.build(
            extensions=_as_str_list(models_data.get("extensions")),
            serialize=_keyword_list(models_data, "serialize_keywords", "serializeKeywords"),
            deserialize=_keyword_list(models_data, "deserialize_keywords", "deserializeKeywords"),
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid models section in {CONFIG_FILENAME}: {exc}") from exc

    build_data = _as_dict(data.get("build"))
    raw_command = build_data.get("command")
    if isinstance(raw_command, str):
        raw_command = shlex.split(raw_command)
    build = BuildConfig(command=_as_str_list(raw_command))
    if "timeout" in build_data:
        timeout = _as_float(build_data.get("timeout"))
        if timeout is None or timeout <= 0:
            raise ConfigError("build.timeout must be a positive number of seconds")
        build.timeout = timeout

    return ProjectConfig(
        root=root,
        name=name,
        source_dir=source_dir,
        output_dir=output_dir,
        models=models,
        build=build,
    )


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _keyword_list(section: Dict[str, Any], *keys: str) -> List[str]:
    raw: Any = None
    for key in keys:
        if key in section:
            raw = section[key]
            break
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(f"{keys[0]} must be a list of {{keyword: ...}} entries")

    keywords: List[str] = []
    for entry in raw:
        # Bare strings are accepted as shorthand for {keyword: <str>}.
        value = entry.get("keyword") if isinstance(entry, dict) else entry
        keyword = _as_str(value)
        if not keyword or not keyword.strip():
            raise ConfigError(f"{keys[0]} entries require a non-empty 'keyword'")
        keywords.append(keyword.strip())
    return keywords


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "BuildConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "ProjectConfig",
    "load_config",
]
