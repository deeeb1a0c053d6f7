"""Bitrate planning for size-constrained encodes.

All functions are pure. Audio is planned first because its bitrate is
taken out of the size budget before the video bitrate is derived:

    audio  = max(min_audio, quality * max_audio)
    budget = size_kbps / duration * (1 - overshoot)
    video  = max(min_video, (budget - audio) * pixel_ratio)

The floors are the configured minimums raised to the selected codec's own
minimum bitrate where that is higher.

``duration`` is the output duration, i.e. the input duration divided by
the speed multiplier when one is set.
"""

from __future__ import annotations

import logging

from sizefit.domain.errors import PlanningError
from sizefit.domain.models import ComputedOptions, Metadata, Options

logger = logging.getLogger(__name__)


def output_duration(options: Options, metadata: Metadata) -> float:
    """Duration of the encoded output in seconds.

    Raises:
        PlanningError: If the input duration is missing or non-positive.
    """
    duration = metadata.duration_seconds
    if duration is None or duration <= 0:
        raise PlanningError(
            "Cannot plan bitrates without a positive input duration",
            f"duration_seconds={duration!r}",
        )
    if options.speed:
        return duration / options.speed
    return duration


def audio_floor(options: Options) -> float:
    """Lowest audio bitrate the request and its codec allow."""
    floor = options.min_audio_bitrate_kbps
    if options.audio_codec is not None:
        floor = max(floor, options.audio_codec.min_bitrate_kbps)
    return floor


def video_floor(options: Options) -> float:
    """Lowest video bitrate the request and its codec allow."""
    floor = options.min_video_bitrate_kbps
    if options.video_codec is not None:
        floor = max(floor, options.video_codec.min_bitrate_kbps)
    return floor


def plan_audio(options: Options) -> float:
    """Audio bitrate in kbps. Unset quality means maximum quality."""
    quality = options.audio_quality if options.audio_quality is not None else 1.0
    return max(audio_floor(options), quality * options.max_audio_bitrate_kbps)


def _output_dimensions(
    options: Options, metadata: Metadata
) -> tuple[float, float] | None:
    width, height = options.output_width, options.output_height
    if width is not None and height is not None:
        return float(width), float(height)
    if width is None and height is None:
        return None

    if metadata.aspect_ratio is not None:
        ratio = metadata.aspect_ratio.value
    elif metadata.width and metadata.height:
        ratio = metadata.width / metadata.height
    else:
        return None

    if width is not None:
        return float(width), width / ratio
    return height * ratio, float(height)


def compute_pixel_ratio(options: Options, metadata: Metadata) -> float:
    """Share of input pixels kept by the output resolution.

    Only a downscale changes the ratio; upscaled or unchanged output keeps
    1.0 so the bitrate is never inflated.
    """
    input_pixels = metadata.pixel_count
    dimensions = _output_dimensions(options, metadata)
    if dimensions is None or input_pixels <= 0:
        return 1.0

    output_pixels = dimensions[0] * dimensions[1]
    if 0 < output_pixels < input_pixels:
        return output_pixels / input_pixels
    return 1.0


def plan_video(
    options: Options, computed: ComputedOptions, metadata: Metadata
) -> float:
    """Video bitrate in kbps for the requested target size.

    Raises:
        PlanningError: If no target size is set or the duration is unusable.
    """
    if options.size_kbps is None:
        raise PlanningError("Cannot plan a video bitrate without a target size")

    duration = output_duration(options, metadata)
    budget = options.size_kbps / duration * (1 - options.overshoot_correction)
    audio = computed.audio_bitrate_kbps or 0.0
    ratio = compute_pixel_ratio(options, metadata)
    video = max(video_floor(options), (budget - audio) * ratio)

    logger.debug(
        "Planned video bitrate %.2f kbps (budget %.2f, audio %.2f, ratio %.4f)",
        video,
        budget,
        audio,
        ratio,
    )
    return video


def plan_bitrates(options: Options, metadata: Metadata) -> ComputedOptions:
    """Plan every applicable bitrate and freeze the result."""
    computed = ComputedOptions()
    if options.audio_codec is not None:
        computed.audio_bitrate_kbps = plan_audio(options)
    if options.video_codec is not None and options.size_kbps is not None:
        computed.video_bitrate_kbps = plan_video(options, computed, metadata)
    computed.freeze()
    return computed
