"""External tool execution: tool resolution, help queries, process handle."""

from sizefit.executor.ffmpeg_queries import (
    available_formats,
    extension_for_container,
    parse_extensions,
)
from sizefit.executor.interface import (
    check_tool_availability,
    get_tool_path,
    require_tool,
)
from sizefit.executor.process import (
    ProcessEvent,
    Subscription,
    TranscodeProcess,
)

__all__ = [
    "ProcessEvent",
    "Subscription",
    "TranscodeProcess",
    "available_formats",
    "check_tool_availability",
    "extension_for_container",
    "get_tool_path",
    "parse_extensions",
    "require_tool",
]
