"""Static codec, container and preset catalog.

This module is the single source of truth for the encodable stream types
sizefit knows about:
- Video and audio codecs with their ffmpeg library names and bitrate floors
- Output containers with the codec names they can carry
- Named presets combining a video codec, audio codec and container

All catalog values are immutable. Lookups are case-insensitive and accept
either the display name or the library identifier.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Codec:
    """An encodable stream type.

    Equality and hashing only consider ``(name, library)``; the bitrate floor
    is informational and does not distinguish two codecs.
    """

    name: str
    library: str
    min_bitrate_kbps: float = field(default=0.0, compare=False)

    def matches(self, value: str) -> bool:
        """Check whether a user-supplied identifier refers to this codec."""
        folded = value.strip().casefold()
        return folded in (self.name.casefold(), self.library.casefold())


@dataclass(frozen=True)
class Container:
    """An output wrapper format.

    Attributes:
        name: Display name (e.g., "MP4").
        format_name: ffmpeg muxer name passed to ``-f`` (e.g., "mp4").
        supported_codecs: Names of the catalog codecs this container carries.
    """

    name: str
    format_name: str
    supported_codecs: frozenset[str] = frozenset()

    def supports(self, codec: Codec) -> bool:
        """Return True if the container can carry the given codec."""
        return codec.name in self.supported_codecs

    def matches(self, value: str) -> bool:
        """Check whether a user-supplied identifier refers to this container."""
        folded = value.strip().casefold()
        return folded in (self.name.casefold(), self.format_name.casefold())


@dataclass(frozen=True)
class Preset:
    """A named combination of codecs and container."""

    name: str
    video_codec: Codec | None
    audio_codec: Codec | None
    container: Container | None


# =============================================================================
# Codecs
# =============================================================================

H265 = Codec("H.265", "libx265", min_bitrate_kbps=32)
VP9 = Codec("VP9", "libvpx-vp9", min_bitrate_kbps=32)
H264 = Codec("H.264", "libx264", min_bitrate_kbps=64)

OPUS = Codec("OPUS", "libopus", min_bitrate_kbps=6)
AAC = Codec("AAC", "aac", min_bitrate_kbps=16)
VORBIS = Codec("OGG Vorbis", "libvorbis", min_bitrate_kbps=45)
MP3 = Codec("MP3", "libmp3lame", min_bitrate_kbps=8)

VIDEO_CODECS: tuple[Codec, ...] = (H265, VP9, H264)
AUDIO_CODECS: tuple[Codec, ...] = (OPUS, AAC, VORBIS, MP3)


# =============================================================================
# Containers
# =============================================================================

MP4 = Container(
    "MP4",
    "mp4",
    frozenset({H265.name, VP9.name, H264.name, OPUS.name, AAC.name, MP3.name}),
)
WEBM = Container(
    "WebM",
    "webm",
    frozenset({VP9.name, OPUS.name, VORBIS.name}),
)
MOV = Container(
    "MOV",
    "mov",
    frozenset({H265.name, H264.name, AAC.name, MP3.name}),
)
MKV = Container(
    "MKV",
    "matroska",
    frozenset(codec.name for codec in VIDEO_CODECS + AUDIO_CODECS),
)

CONTAINERS: tuple[Container, ...] = (MP4, WEBM, MOV, MKV)

# Muxers used when no video codec (and so no container) is selected.
# Keyed by audio codec name.
AUDIO_ONLY_CONTAINERS: dict[str, Container] = {
    OPUS.name: Container("Opus", "opus", frozenset({OPUS.name})),
    AAC.name: Container("AAC (ADTS)", "adts", frozenset({AAC.name})),
    VORBIS.name: Container("Ogg", "ogg", frozenset({VORBIS.name, OPUS.name})),
    MP3.name: Container("MP3", "mp3", frozenset({MP3.name})),
}


# =============================================================================
# Presets
# =============================================================================

PRESETS: tuple[Preset, ...] = (
    Preset("Web (MP4)", H264, AAC, MP4),
    Preset("Web (WebM)", VP9, OPUS, WEBM),
    Preset("Efficient (MP4)", H265, AAC, MP4),
    Preset("Archive (MKV)", H265, OPUS, MKV),
    Preset("Audio only (Opus)", None, OPUS, None),
    Preset("Audio only (MP3)", None, MP3, None),
)


def codecs_to_string(codecs: Iterable[Codec]) -> str:
    """Render codecs as a newline-separated ``name (library)`` list."""
    return "\n".join(f"{codec.name} ({codec.library})" for codec in codecs)


def _find(items: Iterable, value: str | None):
    if not value:
        return None
    for item in items:
        if item.matches(value):
            return item
    return None


def find_video_codec(value: str | None) -> Codec | None:
    """Look up a video codec by display name or library."""
    return _find(VIDEO_CODECS, value)


def find_audio_codec(value: str | None) -> Codec | None:
    """Look up an audio codec by display name or library."""
    return _find(AUDIO_CODECS, value)


def find_container(value: str | None) -> Container | None:
    """Look up a container by display name or ffmpeg format name."""
    return _find(CONTAINERS, value)


def audio_only_container(codec: Codec) -> Container | None:
    """Return the bare-stream muxer for an audio-only encode."""
    return AUDIO_ONLY_CONTAINERS.get(codec.name)


def find_preset(value: str | None) -> Preset | None:
    """Look up a preset by name (case-insensitive)."""
    if not value:
        return None
    folded = value.strip().casefold()
    for preset in PRESETS:
        if preset.name.casefold() == folded:
            return preset
    return None
