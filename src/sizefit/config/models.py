"""Configuration data models.

This module defines dataclasses for sizefit configuration options.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class EncoderConfig:
    """Default tunables applied to every compression request."""

    # Floor for the planned video bitrate
    min_video_bitrate_kbps: float = 64.0

    # Floor for the planned audio bitrate
    min_audio_bitrate_kbps: float = 16.0

    # Audio bitrate at audio quality 1.0
    max_audio_bitrate_kbps: float = 256.0

    # Fraction of the size budget held back for muxing overhead
    overshoot_correction: float = 0.02

    # Bound on the "ffmpeg -h muxer=..." extension query
    extension_query_timeout: float = 10.0

    # Bound on the ffprobe metadata query
    probe_timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.min_video_bitrate_kbps < 0:
            raise ValueError(
                "min_video_bitrate_kbps must be non-negative, "
                f"got {self.min_video_bitrate_kbps}"
            )
        if self.min_audio_bitrate_kbps < 0:
            raise ValueError(
                "min_audio_bitrate_kbps must be non-negative, "
                f"got {self.min_audio_bitrate_kbps}"
            )
        if self.max_audio_bitrate_kbps < self.min_audio_bitrate_kbps:
            raise ValueError(
                "max_audio_bitrate_kbps must be at least min_audio_bitrate_kbps, "
                f"got {self.max_audio_bitrate_kbps}"
            )
        if not 0.0 <= self.overshoot_correction < 1.0:
            raise ValueError(
                "overshoot_correction must be in [0.0, 1.0), "
                f"got {self.overshoot_correction}"
            )
        if self.extension_query_timeout <= 0:
            raise ValueError(
                "extension_query_timeout must be positive, "
                f"got {self.extension_query_timeout}"
            )
        if self.probe_timeout <= 0:
            raise ValueError(
                f"probe_timeout must be positive, got {self.probe_timeout}"
            )


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )

    def with_overrides(self, **overrides: object) -> "LoggingConfig":
        """Copy with the given fields replaced; None leaves a field as is.

        Raises:
            ValueError: If an override fails validation.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


@dataclass
class SizefitConfig:
    """Main configuration container for sizefit.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    encoder: EncoderConfig = field(default_factory=EncoderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def get_tool_path(self, tool_name: str) -> Path | None:
        """Get configured path for a tool.

        Args:
            tool_name: Name of the tool (ffmpeg, ffprobe).

        Returns:
            Configured path or None if not configured.
        """
        return getattr(self.tools, tool_name.lower(), None)
