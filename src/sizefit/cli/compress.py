"""CLI compress command for sizefit."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from sizefit.cli.exit_codes import ExitCode, exit_code_for
from sizefit.compressor import (
    CompressionOrchestrator,
    CompressionOutcome,
    NotificationChannel,
    RequestFileError,
    StderrProgressListener,
)
from sizefit.compressor.loader import load_request_from_dict, read_request_file
from sizefit.config.models import SizefitConfig
from sizefit.domain.errors import ToolNotFoundError
from sizefit.domain.models import Options
from sizefit.executor.interface import require_tool
from sizefit.introspector import FFprobeProber

logger = logging.getLogger(__name__)

# Seconds between checks for Ctrl+C while the transcoder runs
_WAIT_INTERVAL = 0.5


def _collect_request(
    request_file: Path | None, overrides: dict[str, Any]
) -> tuple[dict[str, Any], Path | None]:
    """Merge a request file with command-line overrides."""
    data: dict[str, Any] = {}
    base_dir: Path | None = None
    if request_file is not None:
        data = read_request_file(request_file)
        base_dir = request_file.parent

    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, Path):
            # Command-line paths are relative to the working directory
            value = str(value.absolute())
        data[key] = value
    return data, base_dir


def _result_dict(outcome: CompressionOutcome) -> dict[str, Any]:
    if outcome.succeeded:
        return {
            "status": "succeeded",
            "output": outcome.output_path,
            "video_bitrate_kbps": outcome.video_bitrate_kbps,
            "audio_bitrate_kbps": outcome.audio_bitrate_kbps,
        }
    return {
        "status": "failed",
        "summary": outcome.summary,
        "details": outcome.details,
    }


def _run(
    orchestrator: CompressionOrchestrator,
    outcome: CompressionOutcome,
    options: Options,
) -> ExitCode:
    orchestrator.compress(options)
    try:
        while not orchestrator.wait(_WAIT_INTERVAL):
            pass
    except KeyboardInterrupt:
        click.echo("\nInterrupted, stopping ffmpeg...", err=True)
        orchestrator.cancel()
        orchestrator.wait()
        return ExitCode.INTERRUPTED

    if outcome.succeeded:
        return ExitCode.SUCCESS
    return exit_code_for(orchestrator.last_error)


@click.command("compress")
@click.argument("input_file", type=click.Path(path_type=Path), required=False)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path without extension (default: <input>-compressed).",
)
@click.option("--preset", "-p", default=None, help="Named codec/container preset.")
@click.option("--video-codec", default=None, help="Video codec name or library.")
@click.option("--audio-codec", default=None, help="Audio codec name or library.")
@click.option("--container", default=None, help="Container name or format.")
@click.option(
    "--size",
    "-s",
    default=None,
    help="Target size in kbit, or with a unit: 8M (megabits), 8MB (megabytes).",
)
@click.option(
    "--audio-quality",
    type=float,
    default=None,
    help="Audio quality between 0 and 1 (default: 1).",
)
@click.option("--width", type=int, default=None, help="Output width in pixels.")
@click.option("--height", type=int, default=None, help="Output height in pixels.")
@click.option("--aspect", default=None, help="Display aspect ratio, e.g. 16:9.")
@click.option("--fps", type=float, default=None, help="Output frame rate.")
@click.option("--speed", type=float, default=None, help="Playback speed multiplier.")
@click.option(
    "--extra-args",
    default=None,
    help="Extra ffmpeg arguments (letters, digits, spaces, '-' and '/' only).",
)
@click.option(
    "--request",
    "-r",
    "request_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML request file; command-line options override its fields.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Print the result as JSON.",
)
@click.option("--no-progress", is_flag=True, default=False, help="Hide progress.")
@click.pass_context
def compress_command(
    ctx: click.Context,
    input_file: Path | None,
    output: Path | None,
    preset: str | None,
    video_codec: str | None,
    audio_codec: str | None,
    container: str | None,
    size: str | None,
    audio_quality: float | None,
    width: int | None,
    height: int | None,
    aspect: str | None,
    fps: float | None,
    speed: float | None,
    extra_args: str | None,
    request_file: Path | None,
    json_output: bool,
    no_progress: bool,
) -> None:
    """Compress INPUT_FILE to fit a target size.

    Either INPUT_FILE or a --request file naming the input is required.
    """
    config: SizefitConfig = ctx.obj["config"]

    overrides = {
        "input": input_file,
        "output": output,
        "preset": preset,
        "video_codec": video_codec,
        "audio_codec": audio_codec,
        "container": container,
        "size": size,
        "audio_quality": audio_quality,
        "width": width,
        "height": height,
        "aspect_ratio": aspect,
        "fps": fps,
        "speed": speed,
        "extra_args": extra_args,
    }

    try:
        data, base_dir = _collect_request(request_file, overrides)
        if "input" not in data:
            raise click.UsageError("Provide INPUT_FILE or a --request file.")
        options = load_request_from_dict(data, base_dir, config.encoder)
    except RequestFileError as e:
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(ExitCode.REQUEST_INVALID)

    if not options.input_path.exists():
        click.echo(f"Error: File not found: {options.input_path}", err=True)
        ctx.exit(ExitCode.TARGET_NOT_FOUND)

    try:
        ffmpeg_path = require_tool("ffmpeg", config)
        prober = FFprobeProber(
            require_tool("ffprobe", config), timeout=config.encoder.probe_timeout
        )
    except ToolNotFoundError as e:
        click.echo(f"Error: {e.summary}. {e.details}", err=True)
        ctx.exit(ExitCode.TOOL_NOT_AVAILABLE)

    outcome = CompressionOutcome()
    listeners = [outcome]
    if not json_output and not no_progress:
        listeners.append(StderrProgressListener(enabled=sys.stderr.isatty()))

    orchestrator = CompressionOrchestrator(
        prober,
        channel=NotificationChannel(listeners),
        ffmpeg_path=ffmpeg_path,
        extension_timeout=config.encoder.extension_query_timeout,
    )
    exit_code = _run(orchestrator, outcome, options)

    if exit_code == ExitCode.INTERRUPTED:
        ctx.exit(exit_code)

    if json_output:
        click.echo(json.dumps(_result_dict(outcome), indent=2))
    elif outcome.succeeded:
        click.echo(f"Compressed to {outcome.output_path}")
    else:
        click.echo(f"Error: {outcome.summary}", err=True)
        if outcome.details:
            logger.debug("Failure details:\n%s", outcome.details)

    ctx.exit(exit_code)
