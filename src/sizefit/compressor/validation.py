"""Single-pass validation of compression requests.

validate_options() runs every rule against an Options record and returns a
ValidationResult: either valid, or the first violation found with a
message suitable for the user. Nothing here touches the filesystem or
starts a process.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sizefit.domain.enums import Violation
from sizefit.domain.errors import ValidationError
from sizefit.domain.models import Options

# Raw extra arguments may only contain letters, digits, space, hyphen and
# slash. This narrows what can be smuggled into the ffmpeg command line but
# is a heuristic allow-list, not a security boundary.
_DISALLOWED_ARG_CHARS = re.compile(r"[^A-Za-z0-9 /-]")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate_options().

    ``violation`` is None for a valid request.
    """

    violation: Violation | None = None
    message: str = ""

    @property
    def is_valid(self) -> bool:
        return self.violation is None

    def raise_if_invalid(self) -> None:
        """Raise ValidationError for an invalid result."""
        if self.violation is not None:
            raise ValidationError(self.violation, self.message)


VALID = ValidationResult()


def _invalid(violation: Violation, message: str) -> ValidationResult:
    return ValidationResult(violation, message)


def validate_options(options: Options) -> ValidationResult:
    """Check an Options record against every request rule."""
    if options.video_codec is None and options.audio_codec is None:
        return _invalid(Violation.NO_CODEC, "No video or audio codec was selected.")

    if options.container is not None:
        if options.video_codec is None:
            return _invalid(
                Violation.CONTAINER_WITHOUT_VIDEO,
                "A container was selected but audio-only encoding was specified.",
            )
        for codec in (options.video_codec, options.audio_codec):
            if codec is not None and not options.container.supports(codec):
                return _invalid(
                    Violation.UNSUPPORTED_CODEC,
                    f"{options.container.name} cannot carry {codec.name}.",
                )

    if options.output_width is not None and options.output_width <= 0:
        return _invalid(
            Violation.INVALID_WIDTH,
            f"Output width must be positive, got {options.output_width}.",
        )
    if options.output_height is not None and options.output_height <= 0:
        return _invalid(
            Violation.INVALID_HEIGHT,
            f"Output height must be positive, got {options.output_height}.",
        )

    aspect = options.aspect_ratio
    if aspect is not None and (aspect.x <= 0 or aspect.y <= 0):
        return _invalid(
            Violation.INVALID_ASPECT_RATIO,
            f"Aspect ratio components must be positive, got {aspect.x}:{aspect.y}.",
        )

    if options.fps is not None and options.fps <= 0:
        return _invalid(
            Violation.INVALID_FPS,
            f"Frame rate must be positive, got {options.fps}.",
        )
    if options.speed is not None and options.speed <= 0:
        return _invalid(
            Violation.INVALID_SPEED,
            f"Speed must be positive, got {options.speed}.",
        )

    if options.size_kbps is not None and options.size_kbps <= 0:
        return _invalid(
            Violation.INVALID_SIZE,
            f"Target size must be positive, got {options.size_kbps} kbit.",
        )
    if options.audio_quality is not None and not 0.0 <= options.audio_quality <= 1.0:
        return _invalid(
            Violation.INVALID_AUDIO_QUALITY,
            f"Audio quality must be between 0 and 1, got {options.audio_quality}.",
        )

    if options.extra_args:
        bad = _DISALLOWED_ARG_CHARS.search(options.extra_args)
        if bad:
            return _invalid(
                Violation.INVALID_EXTRA_ARGS,
                f"Extra arguments contain a disallowed character: {bad.group()!r}. "
                "Only letters, digits, spaces, hyphens and slashes are allowed.",
            )

    return VALID
