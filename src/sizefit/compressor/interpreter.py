"""Interpretation of the transcoder's merged output stream.

Two narrow questions are asked of the text ffmpeg writes:

- Does this piece of output carry a progress timestamp?
- What went wrong, in one line, once the run has failed?

Both depend on ffmpeg's output format, so they sit behind the
OutputInterpreter protocol and can be swapped or mocked.
"""

from __future__ import annotations

import re
from typing import Protocol

# frame=  120 fps= 60 q=28.0 size=     256kB time=00:00:04.00 bitrate= 524.3kbits/s
_TIME_PATTERN = re.compile(r"time=(\d+):(\d{2}):(\d{2}(?:\.\d+)?)")

# Printed once the encode loop starts; errors raised mid-encode follow it.
PROGRESS_MARKER = "Press [q] to stop, [?] for help"

_STREAM_LINE = re.compile(r"^[ \t]*Stream #\d+:\d+.*$", re.MULTILINE)
_BRACKET_TAG = re.compile(r"\[[^\]\r\n]*\]")
_CONVERSION_FAILED = re.compile(r"Conversion failed!?")
_BANNER_LINE = re.compile(
    r"^[ \t]*(?:ffmpeg version|built with|configuration:|lib(?:av|sw|post)\w*\s+\d).*$",
    re.MULTILINE | re.IGNORECASE,
)
_STATS_SEGMENT = re.compile(r"^\s*(?:frame|size)=.*\btime=.*$")
_WHITESPACE = re.compile(r"\s+")

_FALLBACK_TAIL_CHARS = 400


class OutputInterpreter(Protocol):
    """Strategy for reading transcoder output."""

    def extract_progress_seconds(self, text: str) -> float | None:
        """Return the latest encoded timestamp in ``text``, in seconds."""
        ...

    def extract_diagnostic(self, buffer: str) -> str:
        """Return a one-line summary of a failed run.

        Non-empty whenever ``buffer`` has non-whitespace content.
        """
        ...


def parse_timestamp(hours: str, minutes: str, seconds: str) -> float:
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


class FFmpegOutputInterpreter:
    """OutputInterpreter for ffmpeg's default (non ``-progress``) output."""

    def extract_progress_seconds(self, text: str) -> float | None:
        last = None
        for last in _TIME_PATTERN.finditer(text):
            pass
        if last is None:
            return None
        return parse_timestamp(*last.groups())

    def extract_diagnostic(self, buffer: str) -> str:
        if not buffer or not buffer.strip():
            return ""

        tail = self._error_region(buffer)
        summary = self._clean(tail)
        if summary:
            return summary

        # Nothing survived cleanup; fall back to the end of the raw output.
        return _WHITESPACE.sub(" ", buffer[-_FALLBACK_TAIL_CHARS:]).strip()

    @staticmethod
    def _error_region(buffer: str) -> str:
        _, marker, after = buffer.partition(PROGRESS_MARKER)
        if marker:
            return after

        streams = list(_STREAM_LINE.finditer(buffer))
        if streams:
            return buffer[streams[-1].end():]
        return buffer

    @staticmethod
    def _clean(text: str) -> str:
        text = _BANNER_LINE.sub("", text)
        segments = [
            segment
            for segment in re.split(r"[\r\n]+", text)
            if not _STATS_SEGMENT.match(segment)
        ]
        text = "\n".join(segments)
        text = _BRACKET_TAG.sub("", text)
        text = _CONVERSION_FAILED.sub("", text)
        return _WHITESPACE.sub(" ", text).strip()
