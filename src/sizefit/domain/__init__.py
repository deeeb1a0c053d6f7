"""Domain types shared across sizefit modules."""

from sizefit.domain.enums import CompressionState, Violation
from sizefit.domain.errors import (
    BuildError,
    BusyError,
    CompressionError,
    EncodeFailure,
    PlanningError,
    ProbeError,
    ProcessError,
    ToolNotFoundError,
    ValidationError,
)
from sizefit.domain.models import (
    AspectRatio,
    ComputedOptions,
    Invocation,
    Metadata,
    Options,
)

__all__ = [
    "AspectRatio",
    "BuildError",
    "BusyError",
    "ComputedOptions",
    "CompressionError",
    "CompressionState",
    "EncodeFailure",
    "Invocation",
    "Metadata",
    "Options",
    "PlanningError",
    "ProbeError",
    "ProcessError",
    "ToolNotFoundError",
    "ValidationError",
    "Violation",
]
