"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (SIZEFIT_*)
3. Config file (~/.sizefit/config.toml)
4. Default values

Environment variables:
- SIZEFIT_CONFIG_PATH: Path to config file (overrides default location)
- SIZEFIT_FFMPEG_PATH: Path to ffmpeg executable
- SIZEFIT_FFPROBE_PATH: Path to ffprobe executable
- SIZEFIT_MIN_VIDEO_BITRATE: Video bitrate floor in kbps (default 64)
- SIZEFIT_MIN_AUDIO_BITRATE: Audio bitrate floor in kbps (default 16)
- SIZEFIT_MAX_AUDIO_BITRATE: Audio bitrate ceiling in kbps (default 256)
- SIZEFIT_OVERSHOOT_CORRECTION: Fraction of budget held back (default 0.02)
- SIZEFIT_EXTENSION_QUERY_TIMEOUT: Seconds for the muxer query (default 10)
- SIZEFIT_PROBE_TIMEOUT: Seconds for the ffprobe query (default 30)
- SIZEFIT_LOG_LEVEL / SIZEFIT_LOG_FILE / SIZEFIT_LOG_FORMAT /
  SIZEFIT_LOG_INCLUDE_STDERR: Logging overrides

Unknown keys in the config file are ignored with a warning.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Mapping
from pathlib import Path

from sizefit.config.env import EnvReader
from sizefit.config.models import (
    EncoderConfig,
    LoggingConfig,
    SizefitConfig,
    ToolPathsConfig,
)

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".sizefit"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

_config_cache: SizefitConfig | None = None
_config_cache_lock = threading.Lock()


def get_default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Get the default config file path.

    Can be overridden by SIZEFIT_CONFIG_PATH environment variable.
    """
    return EnvReader(env).path("CONFIG_PATH") or DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None) -> dict:
    """Load configuration from TOML file.

    Args:
        path: Path to config file. If None, uses default location.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist or
        cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


# (field, variable without prefix) pairs read for each section
_ENCODER_SETTINGS: tuple[tuple[str, str], ...] = (
    ("min_video_bitrate_kbps", "MIN_VIDEO_BITRATE"),
    ("min_audio_bitrate_kbps", "MIN_AUDIO_BITRATE"),
    ("max_audio_bitrate_kbps", "MAX_AUDIO_BITRATE"),
    ("overshoot_correction", "OVERSHOOT_CORRECTION"),
    ("extension_query_timeout", "EXTENSION_QUERY_TIMEOUT"),
    ("probe_timeout", "PROBE_TIMEOUT"),
)
_LOGGING_SETTINGS: tuple[tuple[str, str], ...] = (
    ("level", "LOG_LEVEL"),
    ("format", "LOG_FORMAT"),
)
_LOGGING_KEYS = frozenset(
    {"level", "format", "file", "include_stderr", "max_bytes", "backup_count"}
)


def _section(file_config: dict, name: str, known: set[str]) -> dict:
    section = file_config.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"[{name}] must be a table")
    for key in sorted(set(section) - known):
        logger.warning("Ignoring unknown setting %s.%s in config file", name, key)
    return {key: value for key, value in section.items() if key in known}


def _tool_path(
    cli_value: Path | None, reader: EnvReader, variable: str, section: dict, key: str
) -> Path | None:
    if cli_value is not None:
        return cli_value
    from_env = reader.path(variable, must_exist=True)
    if from_env is not None:
        return from_env
    value = section.get(key)
    return Path(value).expanduser() if value else None


def build_config(
    file_config: dict,
    env: Mapping[str, str] | None = None,
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
) -> SizefitConfig:
    """Merge CLI overrides, environment variables and file values.

    Args:
        file_config: Parsed config file contents.
        env: Environment mapping (None reads os.environ).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.

    Returns:
        SizefitConfig with merged configuration.

    Raises:
        ValueError: If an environment value is malformed or a merged value
            fails model validation.
    """
    reader = EnvReader(env)

    tools_file = _section(file_config, "tools", {"ffmpeg", "ffprobe"})
    tools = ToolPathsConfig(
        ffmpeg=_tool_path(ffmpeg_path, reader, "FFMPEG_PATH", tools_file, "ffmpeg"),
        ffprobe=_tool_path(
            ffprobe_path, reader, "FFPROBE_PATH", tools_file, "ffprobe"
        ),
    )

    encoder_file = _section(
        file_config, "encoder", {name for name, _ in _ENCODER_SETTINGS}
    )
    encoder_values = dict(encoder_file)
    for name, variable in _ENCODER_SETTINGS:
        value = reader.number(variable)
        if value is not None:
            encoder_values[name] = value

    logging_file = _section(file_config, "logging", set(_LOGGING_KEYS))
    logging_values = {k: v for k, v in logging_file.items() if k != "file"}
    for name, variable in _LOGGING_SETTINGS:
        value = reader.text(variable)
        if value is not None:
            logging_values[name] = value
    include_stderr = reader.flag("LOG_INCLUDE_STDERR")
    if include_stderr is not None:
        logging_values["include_stderr"] = include_stderr
    log_file = reader.path("LOG_FILE") or logging_file.get("file")
    if log_file:
        logging_values["file"] = Path(log_file).expanduser()

    return SizefitConfig(
        tools=tools,
        encoder=EncoderConfig(**encoder_values),
        logging=LoggingConfig(**logging_values),
    )


def get_config(
    config_path: Path | None = None,
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
) -> SizefitConfig:
    """Get sizefit configuration with full precedence handling.

    The default configuration (no arguments) is built once and cached;
    explicit arguments always build a fresh config.

    Args:
        config_path: Path to config file (overrides SIZEFIT_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.

    Returns:
        SizefitConfig with merged configuration.
    """
    global _config_cache

    use_cache = config_path is None and ffmpeg_path is None and ffprobe_path is None
    if use_cache:
        with _config_cache_lock:
            if _config_cache is not None:
                return _config_cache

    config = build_config(
        load_config_file(config_path),
        ffmpeg_path=ffmpeg_path,
        ffprobe_path=ffprobe_path,
    )

    if use_cache:
        with _config_cache_lock:
            _config_cache = config
    return config


def clear_config_cache() -> None:
    """Forget the cached default configuration."""
    global _config_cache
    with _config_cache_lock:
        _config_cache = None
