"""Configuration management for sizefit.

This module provides configuration loading with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (SIZEFIT_*)
3. Config file (~/.sizefit/config.toml)
4. Default values (lowest priority)
"""

from sizefit.config.env import EnvReader
from sizefit.config.loader import (
    build_config,
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from sizefit.config.models import (
    EncoderConfig,
    LoggingConfig,
    SizefitConfig,
    ToolPathsConfig,
)

__all__ = [
    # Models
    "EncoderConfig",
    "LoggingConfig",
    "SizefitConfig",
    "ToolPathsConfig",
    # Loader
    "build_config",
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    "EnvReader",
]
