"""Domain models for sizefit.

These records describe one compression request: what the caller asked for
(Options), what is known about the input (Metadata), what the planner
derived (ComputedOptions) and the command that will run (Invocation).
"""

from __future__ import annotations

import shlex
from dataclasses import FrozenInstanceError, dataclass, field
from pathlib import Path

from sizefit.core.catalog import Codec, Container


@dataclass(frozen=True)
class AspectRatio:
    """Display aspect ratio as two integer components (x:y)."""

    x: int
    y: int

    @property
    def value(self) -> float:
        return self.x / self.y

    def __str__(self) -> str:
        return f"{self.x}:{self.y}"


@dataclass(frozen=True)
class Metadata:
    """Probed or caller-supplied facts about an input file."""

    duration_seconds: float
    width: int | None = None
    height: int | None = None
    aspect_ratio: AspectRatio | None = None
    frame_rate: float | None = None
    size_kbps: float | None = None  # Whole-file bitrate
    audio_bitrate_kbps: float | None = None
    video_codec: str | None = None
    audio_codec: str | None = None
    container: str | None = None

    @property
    def pixel_count(self) -> int:
        """Input pixel count, or 0 when dimensions are unknown."""
        if not self.width or not self.height:
            return 0
        return self.width * self.height


@dataclass(frozen=True)
class Options:
    """An immutable compression request.

    ``output_path`` has no extension; the extension is resolved from the
    container (or the audio codec) when the invocation is built.
    """

    input_path: Path
    output_path: Path
    video_codec: Codec | None = None
    audio_codec: Codec | None = None
    container: Container | None = None
    size_kbps: float | None = None
    audio_quality: float | None = None  # Fraction in [0, 1]
    output_width: int | None = None
    output_height: int | None = None
    aspect_ratio: AspectRatio | None = None
    fps: float | None = None
    speed: float | None = None
    extra_args: str | None = None
    input_metadata: Metadata | None = None

    # Tunables
    min_video_bitrate_kbps: float = 64.0
    min_audio_bitrate_kbps: float = 16.0
    max_audio_bitrate_kbps: float = 256.0
    overshoot_correction: float = 0.02


@dataclass
class ComputedOptions:
    """Bitrates derived by the planner.

    Filled in audio first, then video, and frozen once planning completes.
    Assigning to a frozen instance raises FrozenInstanceError.
    """

    video_bitrate_kbps: float | None = None
    audio_bitrate_kbps: float | None = None
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def freeze(self) -> None:
        object.__setattr__(self, "_frozen", True)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __setattr__(self, name: str, value: object) -> None:
        if getattr(self, "_frozen", False):
            raise FrozenInstanceError(f"cannot assign to field {name!r}")
        super().__setattr__(name, value)


@dataclass(frozen=True)
class Invocation:
    """A fully composed transcoder command."""

    args: tuple[str, ...]
    output_path: Path

    @property
    def command_line(self) -> str:
        """Shell-quoted rendering of the command, for diagnostics."""
        return shlex.join(self.args)
