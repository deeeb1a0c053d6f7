"""Domain enums for sizefit."""

from enum import Enum


class CompressionState(Enum):
    """Lifecycle of one compression request.

    State transitions:
        idle → validating
        validating → probing | planning | failed
        probing → planning | failed
        planning → building | failed
        building → running | failed
        running → succeeded | failed
    """

    IDLE = "idle"
    VALIDATING = "validating"
    PROBING = "probing"
    PLANNING = "planning"
    BUILDING = "building"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CompressionState.SUCCEEDED, CompressionState.FAILED)


class Violation(Enum):
    """Reasons a compression request is rejected before anything runs."""

    NO_CODEC = "no_codec"
    CONTAINER_WITHOUT_VIDEO = "container_without_video"
    UNSUPPORTED_CODEC = "unsupported_codec"
    INVALID_WIDTH = "invalid_width"
    INVALID_HEIGHT = "invalid_height"
    INVALID_ASPECT_RATIO = "invalid_aspect_ratio"
    INVALID_FPS = "invalid_fps"
    INVALID_SPEED = "invalid_speed"
    INVALID_SIZE = "invalid_size"
    INVALID_AUDIO_QUALITY = "invalid_audio_quality"
    INVALID_EXTRA_ARGS = "invalid_extra_args"
