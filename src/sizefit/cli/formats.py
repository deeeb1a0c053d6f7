"""CLI formats command for sizefit."""

import click

from sizefit.cli.exit_codes import ExitCode
from sizefit.core.catalog import (
    AUDIO_CODECS,
    CONTAINERS,
    PRESETS,
    VIDEO_CODECS,
    codecs_to_string,
)
from sizefit.domain.errors import ProcessError, ToolNotFoundError
from sizefit.executor.ffmpeg_queries import available_formats
from sizefit.executor.interface import require_tool


def format_catalog() -> str:
    """Render the codec, container and preset catalog."""
    sections = [
        "Video codecs:",
        _indent(codecs_to_string(VIDEO_CODECS)),
        "",
        "Audio codecs:",
        _indent(codecs_to_string(AUDIO_CODECS)),
        "",
        "Containers:",
    ]
    for container in CONTAINERS:
        supported = ", ".join(sorted(container.supported_codecs))
        sections.append(f"  {container.name} ({container.format_name}): {supported}")
    sections += ["", "Presets:"]
    for preset in PRESETS:
        parts = [
            preset.video_codec.name if preset.video_codec else "no video",
            preset.audio_codec.name if preset.audio_codec else "no audio",
        ]
        if preset.container is not None:
            parts.append(preset.container.name)
        sections.append(f"  {preset.name}: {' / '.join(parts)}")
    return "\n".join(sections)


def _indent(text: str) -> str:
    return "\n".join(f"  {line}" for line in text.splitlines())


@click.command("formats")
@click.option(
    "--encoders",
    is_flag=True,
    default=False,
    help="Print the raw encoder list of the installed ffmpeg.",
)
@click.pass_context
def formats_command(ctx: click.Context, encoders: bool) -> None:
    """List supported codecs, containers and presets."""
    if not encoders:
        click.echo(format_catalog())
        return

    config = ctx.obj["config"]
    try:
        listing = available_formats(require_tool("ffmpeg", config))
    except ToolNotFoundError as e:
        click.echo(f"Error: {e.summary}. {e.details}", err=True)
        ctx.exit(ExitCode.TOOL_NOT_AVAILABLE)
    except ProcessError as e:
        click.echo(f"Error: {e.summary}", err=True)
        ctx.exit(ExitCode.GENERAL_ERROR)

    click.echo(listing, nl=False)
