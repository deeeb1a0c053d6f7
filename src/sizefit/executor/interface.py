"""External tool resolution.

ffmpeg and ffprobe are resolved in this order:
- Configured paths (config file or SIZEFIT_FFMPEG_PATH / SIZEFIT_FFPROBE_PATH)
- System PATH
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from sizefit.config import get_config
from sizefit.config.models import SizefitConfig
from sizefit.domain.errors import ToolNotFoundError

logger = logging.getLogger(__name__)

KNOWN_TOOLS = ("ffmpeg", "ffprobe")


def get_tool_path(tool_name: str, config: SizefitConfig | None = None) -> Path | None:
    """Get path to a tool, or None if not available.

    Args:
        tool_name: Name of the tool (ffmpeg or ffprobe).
        config: Configuration to consult. Defaults to the cached global config.

    Returns:
        Path to the tool executable, or None.
    """
    config = config if config is not None else get_config()

    configured = config.get_tool_path(tool_name)
    if configured is not None:
        if configured.is_file():
            return configured
        logger.warning(
            "Configured %s path does not exist: %s, falling back to PATH",
            tool_name,
            configured,
        )

    found = shutil.which(tool_name)
    return Path(found) if found else None


def require_tool(tool_name: str, config: SizefitConfig | None = None) -> Path:
    """Get path to a required tool, raising an error if not available.

    Raises:
        ToolNotFoundError: If the tool cannot be located.
    """
    path = get_tool_path(tool_name, config)
    if path is None:
        env_var = f"SIZEFIT_{tool_name.upper()}_PATH"
        raise ToolNotFoundError(
            f"Required tool not available: {tool_name}",
            f"Install ffmpeg or set {env_var} / [tools] {tool_name} "
            "in ~/.sizefit/config.toml",
        )
    return path


def check_tool_availability(config: SizefitConfig | None = None) -> dict[str, bool]:
    """Map each known tool name to whether it can be located."""
    return {name: get_tool_path(name, config) is not None for name in KNOWN_TOOLS}
