"""Core utilities package.

Pure catalog data and the subprocess wrapper shared by the prober, the
extension query and the encoder listing.
"""

from sizefit.core.catalog import (
    AUDIO_CODECS,
    AUDIO_ONLY_CONTAINERS,
    CONTAINERS,
    PRESETS,
    VIDEO_CODECS,
    Codec,
    Container,
    Preset,
    audio_only_container,
    codecs_to_string,
    find_audio_codec,
    find_container,
    find_preset,
    find_video_codec,
)
from sizefit.core.subprocess_utils import run_command

__all__ = [
    "AUDIO_CODECS",
    "AUDIO_ONLY_CONTAINERS",
    "CONTAINERS",
    "PRESETS",
    "VIDEO_CODECS",
    "Codec",
    "Container",
    "Preset",
    "audio_only_container",
    "codecs_to_string",
    "find_audio_codec",
    "find_container",
    "find_preset",
    "find_video_codec",
    "run_command",
]
