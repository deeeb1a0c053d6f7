"""Size-constrained compression: validation, planning, command building
and orchestration of the transcoder process."""

from sizefit.compressor.command import (
    CommandBuilder,
    atempo_factors,
    build_audio_filters,
    build_video_filters,
)
from sizefit.compressor.interpreter import FFmpegOutputInterpreter, OutputInterpreter
from sizefit.compressor.loader import (
    RequestFileError,
    load_request,
    load_request_from_dict,
    parse_size_kbps,
)
from sizefit.compressor.notifications import (
    CompressionListener,
    CompressionOutcome,
    NotificationChannel,
    StderrProgressListener,
)
from sizefit.compressor.orchestrator import CompressionOrchestrator
from sizefit.compressor.planner import (
    audio_floor,
    compute_pixel_ratio,
    plan_audio,
    plan_bitrates,
    plan_video,
    video_floor,
)
from sizefit.compressor.validation import ValidationResult, validate_options

__all__ = [
    "CommandBuilder",
    "CompressionListener",
    "CompressionOrchestrator",
    "CompressionOutcome",
    "FFmpegOutputInterpreter",
    "NotificationChannel",
    "OutputInterpreter",
    "RequestFileError",
    "StderrProgressListener",
    "ValidationResult",
    "atempo_factors",
    "audio_floor",
    "build_audio_filters",
    "build_video_filters",
    "compute_pixel_ratio",
    "load_request",
    "load_request_from_dict",
    "parse_size_kbps",
    "plan_audio",
    "plan_bitrates",
    "plan_video",
    "validate_options",
    "video_floor",
]
