"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Request and configuration errors
    20-29: Input file errors
    30-39: Tool/dependency errors
    40-49: Encode errors
    50-59: Probe errors
"""

from enum import IntEnum

from sizefit.domain.errors import (
    BuildError,
    CompressionError,
    EncodeFailure,
    ProbeError,
    ProcessError,
    ToolNotFoundError,
    ValidationError,
)


class ExitCode(IntEnum):
    """Exit codes for sizefit CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2

    # Request and configuration errors (10-19)
    REQUEST_INVALID = 10
    CONFIG_ERROR = 11

    # Input file errors (20-29)
    TARGET_NOT_FOUND = 20

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Encode errors (40-49)
    ENCODE_FAILED = 40
    BUILD_FAILED = 41

    # Probe errors (50-59)
    PROBE_FAILED = 50


_ERROR_EXIT_CODES: tuple[tuple[type[CompressionError], ExitCode], ...] = (
    (ValidationError, ExitCode.REQUEST_INVALID),
    (ToolNotFoundError, ExitCode.TOOL_NOT_AVAILABLE),
    (ProbeError, ExitCode.PROBE_FAILED),
    (BuildError, ExitCode.BUILD_FAILED),
    (ProcessError, ExitCode.ENCODE_FAILED),
    (EncodeFailure, ExitCode.ENCODE_FAILED),
)


def exit_code_for(error: CompressionError | None) -> ExitCode:
    """Map a request failure to the exit code reported by the CLI."""
    if error is None:
        return ExitCode.GENERAL_ERROR
    for error_type, code in _ERROR_EXIT_CODES:
        if isinstance(error, error_type):
            return code
    return ExitCode.GENERAL_ERROR
