"""Blocking ffmpeg help queries.

- extension_for_container(): canonical file extension of a muxer
- available_formats(): raw encoder listing
"""

from __future__ import annotations

import logging
import re
import subprocess  # nosec B404 - needed for TimeoutExpired
from pathlib import Path

from sizefit.core.catalog import Container
from sizefit.core.subprocess_utils import run_command
from sizefit.domain.errors import BuildError, ProcessError

logger = logging.getLogger(__name__)

# "    Common extensions: mkv,mk3d,mka,mks."
_EXTENSIONS_PATTERN = re.compile(r"Common extensions:\s*(?P<list>[^\r\n]+)")

_EXTENSION_QUERY_FAILED = "Failed to query file extension for container"


def parse_extensions(help_text: str) -> list[str]:
    """Extract the "Common extensions" list from ``ffmpeg -h muxer=...``.

    Returns:
        Extensions in the order ffmpeg lists them; empty if none.
    """
    match = _EXTENSIONS_PATTERN.search(help_text)
    if not match:
        return []
    listed = match.group("list").strip().rstrip(".")
    return [ext.strip() for ext in listed.split(",") if ext.strip()]


def extension_for_container(
    container: Container,
    ffmpeg_path: Path | None = None,
    timeout: float = 10.0,
) -> str:
    """Resolve the canonical file extension for a container.

    Args:
        container: Container whose ``format_name`` names the muxer.
        ffmpeg_path: Path to ffmpeg. Resolved from config/PATH if omitted.
        timeout: Seconds to wait for ffmpeg.

    Returns:
        The first extension ffmpeg lists, without the leading dot.

    Raises:
        BuildError: If the query times out, cannot start, or lists nothing.
    """
    if ffmpeg_path is None:
        from sizefit.executor.interface import require_tool

        ffmpeg_path = require_tool("ffmpeg")

    args = [ffmpeg_path, "-hide_banner", "-h", f"muxer={container.format_name}"]
    try:
        stdout, stderr, _ = run_command(args, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise BuildError(
            _EXTENSION_QUERY_FAILED,
            f"FFmpeg did not respond in time to query the file extension "
            f"for container {container.format_name}.",
        ) from e
    except OSError as e:
        raise BuildError(_EXTENSION_QUERY_FAILED, str(e)) from e

    extensions = parse_extensions(stdout) or parse_extensions(stderr)
    if not extensions:
        raise BuildError(
            _EXTENSION_QUERY_FAILED,
            f"FFmpeg did not return a file extension for container "
            f"{container.format_name}.",
        )

    logger.debug(
        "Resolved extension %s for container %s",
        extensions[0],
        container.format_name,
    )
    return extensions[0]


def available_formats(ffmpeg_path: Path | None = None, timeout: float = 30.0) -> str:
    """Return the raw ``ffmpeg -encoders`` listing.

    Raises:
        ProcessError: If ffmpeg cannot run or exits non-zero.
    """
    if ffmpeg_path is None:
        from sizefit.executor.interface import require_tool

        ffmpeg_path = require_tool("ffmpeg")

    try:
        stdout, stderr, returncode = run_command(
            [ffmpeg_path, "-hide_banner", "-encoders"], timeout=timeout
        )
    except subprocess.TimeoutExpired as e:
        raise ProcessError("ffmpeg did not list its encoders in time") from e
    except OSError as e:
        raise ProcessError(f"Could not start ffmpeg: {e}") from e

    if returncode != 0:
        raise ProcessError(
            f"ffmpeg -encoders failed (exit code {returncode})", stderr.strip()
        )
    return stdout
