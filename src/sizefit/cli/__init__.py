"""CLI module for sizefit."""

import logging
from pathlib import Path

import click

from sizefit.cli.exit_codes import ExitCode
from sizefit.config.models import SizefitConfig

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config: SizefitConfig,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from the config and CLI options (once per process)."""
    global _logging_configured
    if _logging_configured:
        return

    from sizefit.logging import configure_logging

    logging_config = config.logging.with_overrides(
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    configure_logging(logging_config)
    _logging_configured = True


@click.group()
@click.version_option(package_name="sizefit")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.sizefit/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """sizefit - Compress media files to fit a target size."""
    ctx.ensure_object(dict)

    if "config" not in ctx.obj:
        from sizefit.config import get_config

        try:
            ctx.obj["config"] = get_config(config_path=config_path)
        except ValueError as e:
            click.echo(f"Error: Invalid configuration: {e}", err=True)
            ctx.exit(ExitCode.CONFIG_ERROR)

    try:
        _configure_logging(ctx.obj["config"], log_level, log_file, log_json)
    except ValueError as e:
        click.echo(f"Error: Invalid logging configuration: {e}", err=True)
        ctx.exit(ExitCode.CONFIG_ERROR)


# Defer import to avoid circular dependency
def _register_commands():
    from sizefit.cli.compress import compress_command
    from sizefit.cli.formats import formats_command
    from sizefit.cli.probe import probe_command

    main.add_command(compress_command)
    main.add_command(probe_command)
    main.add_command(formats_command)


_register_commands()
