"""CLI probe command for sizefit."""

import json
from dataclasses import asdict
from pathlib import Path

import click

from sizefit.cli.exit_codes import ExitCode
from sizefit.domain.errors import ProbeError, ToolNotFoundError
from sizefit.domain.models import Metadata
from sizefit.executor.interface import require_tool
from sizefit.introspector import FFprobeProber


def format_metadata(metadata: Metadata) -> str:
    """Render Metadata as aligned ``key: value`` lines."""
    rows = [
        ("Duration", f"{metadata.duration_seconds:.3f} s"),
        (
            "Dimensions",
            f"{metadata.width}x{metadata.height}" if metadata.pixel_count else "-",
        ),
        ("Aspect ratio", str(metadata.aspect_ratio) if metadata.aspect_ratio else "-"),
        (
            "Frame rate",
            f"{metadata.frame_rate:.3f} fps" if metadata.frame_rate else "-",
        ),
        ("Bitrate", f"{metadata.size_kbps:.0f} kbps" if metadata.size_kbps else "-"),
        (
            "Audio bitrate",
            f"{metadata.audio_bitrate_kbps:.0f} kbps"
            if metadata.audio_bitrate_kbps
            else "-",
        ),
        ("Video codec", metadata.video_codec or "-"),
        ("Audio codec", metadata.audio_codec or "-"),
        ("Container", metadata.container or "-"),
    ]
    width = max(len(label) for label, _ in rows)
    return "\n".join(f"{label:<{width}}  {value}" for label, value in rows)


def metadata_to_dict(metadata: Metadata) -> dict:
    data = asdict(metadata)
    if metadata.aspect_ratio is not None:
        data["aspect_ratio"] = str(metadata.aspect_ratio)
    return data


@click.command("probe")
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Print metadata as JSON.",
)
@click.pass_context
def probe_command(ctx: click.Context, file: Path, json_output: bool) -> None:
    """Show the metadata sizefit plans with for FILE."""
    config = ctx.obj["config"]

    if not file.exists():
        click.echo(f"Error: File not found: {file}", err=True)
        ctx.exit(ExitCode.TARGET_NOT_FOUND)

    try:
        prober = FFprobeProber(
            require_tool("ffprobe", config), timeout=config.encoder.probe_timeout
        )
    except ToolNotFoundError as e:
        click.echo(f"Error: {e.summary}. {e.details}", err=True)
        ctx.exit(ExitCode.TOOL_NOT_AVAILABLE)

    try:
        metadata = prober.probe(file, require_video=False)
    except ProbeError as e:
        click.echo(f"Error: {e.summary}", err=True)
        ctx.exit(ExitCode.PROBE_FAILED)

    if json_output:
        click.echo(json.dumps(metadata_to_dict(metadata), indent=2))
    else:
        click.echo(format_metadata(metadata))
