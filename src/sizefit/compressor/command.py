"""Composition of the ffmpeg invocation for one request.

The video filter chain is always assembled in the order
scale, aspect ratio, speed, frame rate; empty slots are omitted. The
audio chain is a tempo adjustment matching the video speed.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from pathlib import Path

from sizefit.core.catalog import MKV, Container, audio_only_container
from sizefit.domain.errors import BuildError
from sizefit.domain.models import ComputedOptions, Invocation, Options

logger = logging.getLogger(__name__)

# ffmpeg's atempo filter only accepts factors in this range
ATEMPO_MIN = 0.5
ATEMPO_MAX = 100.0

ExtensionResolver = Callable[[Container], str]


def format_number(value: float) -> str:
    """Render a number for the command line without exponent notation."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text or "0"


def build_video_filters(options: Options) -> list[str]:
    """Video filters in chain order. Empty when nothing needs changing."""
    filters: list[str] = []

    width, height = options.output_width, options.output_height
    if width is not None and height is not None:
        filters.append(f"scale={width}:{height}")
        filters.append("setsar=1/1")
    elif width is not None:
        filters.append(f"scale={width}:-2")
    elif height is not None:
        filters.append(f"scale=-2:{height}")

    if options.aspect_ratio is not None:
        filters.append(f"setdar={options.aspect_ratio.x}/{options.aspect_ratio.y}")

    if options.speed is not None and options.speed != 1:
        filters.append(f"setpts=PTS/{format_number(options.speed)}")

    if options.fps is not None:
        filters.append(f"fps={format_number(options.fps)}")

    return filters


def atempo_factors(speed: float) -> list[float]:
    """Split a speed multiplier into atempo factors whose product is ``speed``."""
    if speed <= 0:
        raise ValueError(f"speed must be positive, got {speed}")
    factors: list[float] = []
    remaining = speed
    while remaining < ATEMPO_MIN:
        factors.append(ATEMPO_MIN)
        remaining /= ATEMPO_MIN
    while remaining > ATEMPO_MAX:
        factors.append(ATEMPO_MAX)
        remaining /= ATEMPO_MAX
    factors.append(remaining)
    return factors


def build_audio_filters(options: Options) -> list[str]:
    """Audio filters: a tempo chain when a speed multiplier is set."""
    if options.speed is None or options.speed == 1:
        return []
    return [f"atempo={format_number(f)}" for f in atempo_factors(options.speed)]


def output_container(options: Options) -> Container:
    """Container to mux into.

    Audio-only requests use the bare-stream muxer of their codec; a video
    request without an explicit container falls back to Matroska.
    """
    if options.container is not None:
        return options.container
    if options.video_codec is None and options.audio_codec is not None:
        container = audio_only_container(options.audio_codec)
        if container is None:
            raise BuildError(f"No output format known for {options.audio_codec.name}")
        return container
    return MKV


class CommandBuilder:
    """Builds Invocations against one ffmpeg executable."""

    def __init__(
        self,
        ffmpeg_path: Path | str,
        extension_timeout: float = 10.0,
        resolve_extension: ExtensionResolver | None = None,
    ) -> None:
        self._ffmpeg_path = str(ffmpeg_path)
        self._extension_timeout = extension_timeout
        self._resolve_extension = resolve_extension or self._query_extension

    def _query_extension(self, container: Container) -> str:
        from sizefit.executor.ffmpeg_queries import extension_for_container

        return extension_for_container(
            container, Path(self._ffmpeg_path), timeout=self._extension_timeout
        )

    def build(self, options: Options, computed: ComputedOptions) -> Invocation:
        """Compose the full command line.

        Raises:
            BuildError: If the output extension cannot be resolved.
        """
        container = output_container(options)
        extension = self._resolve_extension(container).lstrip(".")
        if not extension:
            raise BuildError(
                "Failed to query file extension for container",
                f"No extension resolved for {container.format_name}.",
            )
        output_path = options.output_path.with_name(
            f"{options.output_path.name}.{extension}"
        )

        args: list[str] = [self._ffmpeg_path, "-hide_banner", "-y"]
        args += ["-i", str(options.input_path)]

        if options.video_codec is not None:
            args += ["-c:v", options.video_codec.library]
        else:
            args.append("-vn")
        if options.audio_codec is not None:
            args += ["-c:a", options.audio_codec.library]
        else:
            args.append("-an")

        if computed.video_bitrate_kbps is not None:
            args += ["-b:v", f"{format_number(computed.video_bitrate_kbps)}k"]
        if computed.audio_bitrate_kbps is not None:
            args += ["-b:a", f"{format_number(computed.audio_bitrate_kbps)}k"]

        if options.video_codec is not None:
            video_filters = build_video_filters(options)
            if video_filters:
                args += ["-filter:v", ",".join(video_filters)]
        if options.audio_codec is not None:
            audio_filters = build_audio_filters(options)
            if audio_filters:
                args += ["-filter:a", ",".join(audio_filters)]

        if options.extra_args:
            args += shlex.split(options.extra_args)

        args += ["-f", container.format_name, str(output_path)]

        invocation = Invocation(args=tuple(args), output_path=output_path)
        logger.debug("Built invocation: %s", invocation.command_line)
        return invocation
