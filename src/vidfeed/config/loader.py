"""
Unified configuration loader with priority resolution.

Root directory (VIDFEED_ROOT):
- macOS/Linux: ~/.vidfeed
- Windows: %APPDATA%\\vidfeed
- Override: VIDFEED_ROOT environment variable

Settings priority (highest to lowest):
1. Environment variables (VIDFEED_DB_PATH, VIDFEED_PARENT_DOMAIN)
2. Project config (.vidfeed/config.yaml)
3. User config ({root_dir}/config.yaml)
4. Defaults (config/defaults.py)

Each setting is resolved independently, so a project config may override
only the parent domain while the user config supplies the database path.
"""

import logging
import os
import sys
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from vidfeed.config import defaults

logger = logging.getLogger(__name__)


class ConfigSource(Enum):
    """Source of the configuration value."""

    ENV = "env"
    PROJECT = "project"
    USER = "user"
    DEFAULT = "default"


# Ordered from least to most specific
_SOURCE_RANK = {
    ConfigSource.DEFAULT: 0,
    ConfigSource.USER: 1,
    ConfigSource.PROJECT: 2,
    ConfigSource.ENV: 3,
}

# YAML key -> converter
_YAML_KEYS = {
    "db_path": str,
    "parent_domain": str,
    "progress_debounce_seconds": float,
    "progress_min_delta_seconds": float,
    "fallback_buffer_seconds": float,
    "pinterest_fallback_buffer_seconds": float,
    "buffer_window": int,
}


@dataclass(frozen=True)
class VidfeedConfig:
    """Resolved vidfeed configuration."""

    root_dir: Path
    db_path: Path
    parent_domain: str = defaults.DEFAULT_PARENT_DOMAIN
    progress_debounce_seconds: float = defaults.PROGRESS_DEBOUNCE_SECONDS
    progress_min_delta_seconds: float = defaults.PROGRESS_MIN_DELTA_SECONDS
    fallback_buffer_seconds: float = defaults.FALLBACK_BUFFER_SECONDS
    pinterest_fallback_buffer_seconds: float = defaults.PINTEREST_FALLBACK_BUFFER_SECONDS
    buffer_window: int = defaults.BUFFER_WINDOW
    source: ConfigSource = ConfigSource.DEFAULT

    def __repr__(self) -> str:
        return (
            f"VidfeedConfig(root_dir={self.root_dir!r}, db_path={self.db_path!r}, "
            f"parent_domain={self.parent_domain!r}, source={self.source.value!r})"
        )


def _load_yaml_config(config_path: Path) -> dict[str, Any] | None:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Parsed config dict, or None if file doesn't exist or fails to parse.
    """
    if not config_path.exists():
        return None

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
            if config is None:
                return {}
            if not isinstance(config, dict):
                logger.warning(f"Config file {config_path} is not a valid YAML dict")
                return None
            return config
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return None


def _settings_from_yaml(
    config: dict[str, Any] | None,
    config_path: Path | None = None,
) -> dict[str, Any]:
    """Extract known settings from a parsed YAML config.

    Relative ``db_path`` values are resolved against the config file's
    directory. Unknown keys and values that fail conversion are skipped
    with a warning.

    Args:
        config: Parsed YAML config dict.
        config_path: Path to the config file (for resolving relative paths).

    Returns:
        Dict of setting name -> converted value.
    """
    if not config:
        return {}

    settings: dict[str, Any] = {}
    for key, value in config.items():
        converter = _YAML_KEYS.get(key)
        if converter is None:
            logger.warning(f"Ignoring unknown config key {key!r} in {config_path}")
            continue
        if value is None:
            continue
        try:
            settings[key] = converter(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid value for {key!r} in {config_path}: {value!r}")

    if "db_path" in settings:
        path = Path(settings["db_path"]).expanduser()
        if not path.is_absolute() and config_path is not None:
            path = (config_path.parent / path).resolve()
        else:
            path = path.resolve()
        settings["db_path"] = path

    return settings


def _find_project_config() -> Path | None:
    """Find project-level config by walking up from cwd.

    Returns:
        Path to .vidfeed/config.yaml if found, None otherwise.
    """
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        config_path = parent / ".vidfeed" / "config.yaml"
        if config_path.exists():
            return config_path
    return None


def _get_root_dir() -> Path:
    """Get the vidfeed root directory.

    Priority:
    1. VIDFEED_ROOT environment variable
    2. Platform-specific default:
       - Windows: %APPDATA%\\vidfeed
       - macOS/Linux: ~/.vidfeed

    Returns:
        Path to the root directory (may not exist yet).
    """
    env_root = os.environ.get("VIDFEED_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()

    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "vidfeed"
        return Path.home() / "AppData" / "Roaming" / "vidfeed"
    return Path.home() / ".vidfeed"


def _get_user_config_path() -> Path:
    """Get the user-level config path ({root_dir}/config.yaml)."""
    return _get_root_dir() / "config.yaml"


def _get_default_db_path() -> Path:
    """Get the default database path ({root_dir}/vidfeed.db)."""
    return _get_root_dir() / "vidfeed.db"


def _settings_from_env() -> dict[str, Any]:
    settings: dict[str, Any] = {}
    env_db = os.environ.get("VIDFEED_DB_PATH")
    if env_db:
        settings["db_path"] = Path(env_db).expanduser().resolve()
    env_parent = os.environ.get("VIDFEED_PARENT_DOMAIN")
    if env_parent:
        settings["parent_domain"] = env_parent.strip()
    return settings


def _resolve_config() -> VidfeedConfig:
    """Resolve configuration from all sources in priority order.

    Returns:
        Resolved VidfeedConfig. ``source`` names the most specific layer
        that contributed at least one value.
    """
    root_dir = _get_root_dir()
    merged: dict[str, Any] = {"db_path": _get_default_db_path()}
    source = ConfigSource.DEFAULT

    layers: list[tuple[ConfigSource, dict[str, Any]]] = []

    user_config_path = _get_user_config_path()
    user_settings = _settings_from_yaml(
        _load_yaml_config(user_config_path), user_config_path
    )
    layers.append((ConfigSource.USER, user_settings))

    project_config_path = _find_project_config()
    if project_config_path:
        project_settings = _settings_from_yaml(
            _load_yaml_config(project_config_path), project_config_path
        )
        layers.append((ConfigSource.PROJECT, project_settings))

    layers.append((ConfigSource.ENV, _settings_from_env()))

    for layer_source, settings in layers:
        if not settings:
            continue
        merged.update(settings)
        if _SOURCE_RANK[layer_source] > _SOURCE_RANK[source]:
            source = layer_source

    if merged.get("buffer_window", 0) < 0:
        logger.warning("buffer_window cannot be negative, using 0")
        merged["buffer_window"] = 0

    logger.debug(f"Resolved config from {source.value}: {merged}")
    return VidfeedConfig(root_dir=root_dir, source=source, **merged)


@lru_cache(maxsize=1)
def get_config() -> VidfeedConfig:
    """Get resolved vidfeed configuration.

    Results are cached - configuration is resolved once per process.
    To force re-resolution (e.g., after env change), use clear_config_cache().
    """
    return _resolve_config()


def get_root_dir(ensure_exists: bool = True) -> Path:
    """Get the resolved root directory.

    Args:
        ensure_exists: If True (default), create the directory if it doesn't exist.
    """
    root_dir = get_config().root_dir
    if ensure_exists:
        root_dir.mkdir(parents=True, exist_ok=True)
    return root_dir


def get_db_path(ensure_parent: bool = True) -> Path:
    """Get the resolved database file path.

    Args:
        ensure_parent: If True (default), create the parent directory.
    """
    db_path = get_config().db_path
    if ensure_parent:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


def clear_config_cache() -> None:
    """Clear the cached configuration.

    Call this if environment variables or config files have changed
    and you need to re-resolve the configuration.
    """
    get_config.cache_clear()
