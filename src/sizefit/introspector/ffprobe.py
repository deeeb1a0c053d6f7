"""FFprobe-based implementation of the MetadataProber protocol."""

from __future__ import annotations

import json
import subprocess  # nosec B404 - needed for TimeoutExpired
from pathlib import Path

from sizefit.core.subprocess_utils import run_command
from sizefit.domain.errors import ProbeError
from sizefit.domain.models import Metadata
from sizefit.introspector.parsers import parse_metadata


class FFprobeProber:
    """ffprobe-based implementation of MetadataProber.

    Runs ``ffprobe -v error -print_format json -show_streams -show_format``
    and parses the document into Metadata.
    """

    def __init__(self, ffprobe_path: Path | None = None, timeout: float = 30.0) -> None:
        """Initialize the prober.

        Args:
            ffprobe_path: Explicit path to ffprobe. If not provided, the
                configured path or system PATH is used.
            timeout: Seconds to wait for ffprobe before giving up.

        Raises:
            ToolNotFoundError: If ffprobe is not available.
        """
        if ffprobe_path is None:
            from sizefit.executor.interface import require_tool

            ffprobe_path = require_tool("ffprobe")
        self._ffprobe_path = ffprobe_path
        self._timeout = timeout

    def probe(self, path: Path, require_video: bool = True) -> Metadata:
        """Extract metadata from a media file.

        Args:
            path: Input file.
            require_video: Fail when the input has no video dimensions.

        Raises:
            ProbeError: If the file cannot be probed.
        """
        if not path.exists():
            raise ProbeError(f"File not found: {path}")

        data = self._run_ffprobe(path)
        return parse_metadata(data, str(path), require_video=require_video)

    def _run_ffprobe(self, path: Path) -> dict:
        args = [
            self._ffprobe_path,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_streams",
            "-show_format",
            path,
        ]
        try:
            stdout, stderr, returncode = run_command(args, timeout=self._timeout)
        except subprocess.TimeoutExpired as e:
            raise ProbeError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except OSError as e:
            raise ProbeError(f"Could not start ffprobe: {e}") from e

        if returncode != 0:
            raise ProbeError(
                f"ffprobe failed for {path} (exit code {returncode})",
                stderr.strip(),
            )

        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise ProbeError(f"Invalid ffprobe output for {path}", str(e)) from e

        if not isinstance(data, dict) or "format" not in data:
            raise ProbeError(
                f"Missing 'format' in ffprobe output for {path}. "
                "File may be corrupted or not a valid media file."
            )
        return data
