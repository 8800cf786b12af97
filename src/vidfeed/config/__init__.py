"""
Configuration for vidfeed.

Contains the settings loader and default timer/embed constants.
"""

from vidfeed.config.loader import (
    ConfigSource,
    VidfeedConfig,
    clear_config_cache,
    get_config,
    get_db_path,
    get_root_dir,
)

__all__ = [
    "ConfigSource",
    "VidfeedConfig",
    "clear_config_cache",
    "get_config",
    "get_db_path",
    "get_root_dir",
]
