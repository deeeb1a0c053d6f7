"""Exception hierarchy for compression requests.

Every failure inside a request derives from CompressionError so the
orchestrator can turn it into a single ``failed`` notification carrying a
one-line summary and optional details.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sizefit.domain.enums import Violation


class CompressionError(Exception):
    """Base exception for compression request failures.

    Attributes:
        summary: Human-readable one-line description.
        details: Supporting text for debugging (command line, tool output).
    """

    def __init__(self, summary: str, details: str = "") -> None:
        self.summary = summary
        self.details = details
        super().__init__(summary)


class ValidationError(CompressionError):
    """Raised when a request is malformed or contradictory.

    Attributes:
        violation: The rule that was broken.
    """

    def __init__(self, violation: Violation, summary: str, details: str = "") -> None:
        self.violation = violation
        super().__init__(summary, details)


class ProbeError(CompressionError):
    """Raised when the metadata probe fails or returns incomplete data."""


class PlanningError(CompressionError):
    """Raised when bitrates cannot be planned from the available inputs."""


class BuildError(CompressionError):
    """Raised when the encoder invocation cannot be composed."""


class ProcessError(CompressionError):
    """Raised when the external process cannot be launched or crashes."""


class EncodeFailure(CompressionError):
    """Raised when the encoder exits non-zero or leaves no readable output."""


class BusyError(CompressionError):
    """Raised when a request is started while another one is in flight."""


class ToolNotFoundError(CompressionError):
    """Raised when ffmpeg or ffprobe cannot be located."""
