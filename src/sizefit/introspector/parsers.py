"""Pure parsing functions for ffprobe JSON output.

These functions turn the ``-print_format json -show_streams -show_format``
document into a Metadata record. They do no I/O so they can be tested
against captured ffprobe output.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from math import gcd

from sizefit.domain.errors import ProbeError
from sizefit.domain.models import AspectRatio, Metadata

logger = logging.getLogger(__name__)


def parse_float(value: object) -> float | None:
    """Parse a numeric ffprobe field ("12.345", "N/A", missing)."""
    if value is None:
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def parse_frame_rate(value: str | None) -> float | None:
    """Parse an ffprobe rate fraction such as "30000/1001".

    Returns:
        Frames per second, or None for missing or degenerate rates ("0/0").
    """
    if not value:
        return None
    try:
        rate = Fraction(value)
    except (ValueError, ZeroDivisionError):
        return None
    if rate <= 0:
        return None
    return float(rate)


def parse_aspect_ratio(
    value: str | None, width: int | None = None, height: int | None = None
) -> AspectRatio | None:
    """Parse a display aspect ratio ("16:9"), falling back to width:height.

    ffprobe reports "0:1" or "N/A" when the container carries no explicit
    ratio; in that case the frame dimensions are reduced instead.
    """
    if value and ":" in value:
        left, _, right = value.partition(":")
        try:
            x, y = int(left), int(right)
        except ValueError:
            x = y = 0
        if x > 0 and y > 0:
            return AspectRatio(x, y)

    if width and height and width > 0 and height > 0:
        divisor = gcd(width, height)
        return AspectRatio(width // divisor, height // divisor)
    return None


def _first_stream(streams: list[dict], codec_type: str) -> dict | None:
    for stream in streams:
        if stream.get("codec_type") == codec_type:
            return stream
    return None


def _kbps(value: object) -> float | None:
    bits = parse_float(value)
    if bits is None or bits <= 0:
        return None
    return bits / 1000


def _audio_metadata(
    duration: float, fmt: dict, audio: dict | None, source: str
) -> Metadata:
    logger.debug(
        "Parsed audio-only metadata: %.3fs", duration, extra={"source": source}
    )
    return Metadata(
        duration_seconds=duration,
        size_kbps=_kbps(fmt.get("bit_rate")),
        audio_bitrate_kbps=_kbps(audio.get("bit_rate")) if audio else None,
        audio_codec=audio.get("codec_name") if audio else None,
        container=fmt.get("format_name"),
    )


def parse_metadata(
    data: dict, source: str = "", require_video: bool = True
) -> Metadata:
    """Build Metadata from parsed ffprobe JSON.

    Args:
        data: Parsed ffprobe document with "streams" and "format" keys.
        source: Input path, used in error messages.
        require_video: Fail when there is no video stream with dimensions.
            Audio-only requests pass False and get Metadata without
            dimensions for inputs that have none.

    Returns:
        Metadata for the input.

    Raises:
        ProbeError: If the duration is missing or non-positive, or the
            dimensions are non-positive or missing while required.
    """
    streams = data.get("streams") or []
    fmt = data.get("format") or {}

    video = _first_stream(streams, "video")
    audio = _first_stream(streams, "audio")

    duration = parse_float(fmt.get("duration"))
    if duration is None:
        stream = video or audio
        if stream is not None:
            duration = parse_float(stream.get("duration"))
    if duration is None or duration <= 0:
        raise ProbeError(
            f"Could not determine the duration of {source or 'the input'}",
            f"format.duration={fmt.get('duration')!r}",
        )

    width = video.get("width") if video else None
    height = video.get("height") if video else None
    if not isinstance(width, int) or not isinstance(height, int):
        if not require_video:
            return _audio_metadata(duration, fmt, audio, source)
        raise ProbeError(
            f"Could not determine the dimensions of {source or 'the input'}",
            "no video stream with width and height",
        )
    if width <= 0 or height <= 0:
        raise ProbeError(
            f"Invalid dimensions {width}x{height} for {source or 'the input'}"
        )

    frame_rate = parse_frame_rate(video.get("r_frame_rate"))
    if frame_rate is None:
        frame_rate = parse_frame_rate(video.get("avg_frame_rate"))

    metadata = Metadata(
        duration_seconds=duration,
        width=width,
        height=height,
        aspect_ratio=parse_aspect_ratio(
            video.get("display_aspect_ratio"), width, height
        ),
        frame_rate=frame_rate,
        size_kbps=_kbps(fmt.get("bit_rate")),
        audio_bitrate_kbps=_kbps(audio.get("bit_rate")) if audio else None,
        video_codec=video.get("codec_name"),
        audio_codec=audio.get("codec_name") if audio else None,
        container=fmt.get("format_name"),
    )
    logger.debug(
        "Parsed metadata: %sx%s %.3fs",
        width,
        height,
        duration,
        extra={"source": source},
    )
    return metadata
