"""Compression request loading and validation.

A request can be written as a YAML file:

    input: clip.mov
    output: clip-small        # extension is added from the container
    preset: Web (MP4)
    size: 8M                  # 8 megabits; "64MB" would be 64 megabytes
    audio_quality: 0.5
    width: 1280

Documents are checked with Pydantic models and converted to Options.
The CLI feeds its own flags through the same path.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from sizefit.config.models import EncoderConfig
from sizefit.core.catalog import (
    find_audio_codec,
    find_container,
    find_preset,
    find_video_codec,
)
from sizefit.domain.models import AspectRatio, Options

_SIZE_PATTERN = re.compile(
    r"^\s*(?P<number>\d+(?:\.\d*)?|\.\d+)\s*(?P<unit>(?:[kmg]b?)?)\s*$"
)
_UNIT_KILOBITS = {"": 1.0, "k": 1.0, "m": 1_000.0, "g": 1_000_000.0}
_ASPECT_PATTERN = re.compile(r"^\s*(\d+)\s*[:/]\s*(\d+)\s*$")


class RequestFileError(Exception):
    """Error loading or validating a compression request."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


def parse_size_kbps(value: str | float | int) -> float:
    """Parse a target size into kilobits.

    Plain numbers are kilobits. ``k``/``M``/``G`` suffixes are kilo-, mega-
    and gigabits; adding ``B`` (``KB``, ``MB``, ``GB``) means bytes.

    Examples:
        parse_size_kbps("8000") -> 8000.0
        parse_size_kbps("8M") -> 8000.0
        parse_size_kbps("8MB") -> 64000.0

    Raises:
        ValueError: If the format is invalid.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid size: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    match = _SIZE_PATTERN.match(value.casefold())
    if not match:
        raise ValueError(f"Invalid size format: {value!r}")
    number = float(match.group("number"))
    unit = match.group("unit")
    in_bytes = unit.endswith("b")
    kilobits = number * _UNIT_KILOBITS[unit.rstrip("b")]
    return kilobits * 8 if in_bytes else kilobits


def parse_aspect_ratio(value: str) -> AspectRatio:
    """Parse ``"16:9"`` or ``"16/9"``.

    Raises:
        ValueError: If the format is invalid.
    """
    match = _ASPECT_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid aspect ratio {value!r}, expected X:Y")
    return AspectRatio(int(match.group(1)), int(match.group(2)))


class CompressionRequestModel(BaseModel):
    """Pydantic model for a compression request document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    input: str = Field(min_length=1)
    output: str | None = None
    preset: str | None = None
    video_codec: str | None = None
    audio_codec: str | None = None
    container: str | None = None
    size: str | float | None = None
    audio_quality: float | None = Field(default=None, ge=0.0, le=1.0)
    width: int | None = None
    height: int | None = None
    aspect_ratio: str | None = None
    fps: float | None = None
    speed: float | None = None
    extra_args: str | None = None

    @field_validator("preset")
    @classmethod
    def validate_preset(cls, v: str | None) -> str | None:
        if v is not None and find_preset(v) is None:
            raise ValueError(f"unknown preset {v!r}")
        return v

    @field_validator("video_codec")
    @classmethod
    def validate_video_codec(cls, v: str | None) -> str | None:
        if v is not None and find_video_codec(v) is None:
            raise ValueError(f"unknown video codec {v!r}")
        return v

    @field_validator("audio_codec")
    @classmethod
    def validate_audio_codec(cls, v: str | None) -> str | None:
        if v is not None and find_audio_codec(v) is None:
            raise ValueError(f"unknown audio codec {v!r}")
        return v

    @field_validator("container")
    @classmethod
    def validate_container(cls, v: str | None) -> str | None:
        if v is not None and find_container(v) is None:
            raise ValueError(f"unknown container {v!r}")
        return v

    @field_validator("size")
    @classmethod
    def validate_size(cls, v: str | float | None) -> str | float | None:
        if v is not None:
            parse_size_kbps(v)
        return v

    @field_validator("aspect_ratio")
    @classmethod
    def validate_aspect_ratio(cls, v: str | None) -> str | None:
        if v is not None:
            parse_aspect_ratio(v)
        return v


def _format_validation_error(error: Exception) -> tuple[str, str | None]:
    from pydantic import ValidationError

    if isinstance(error, ValidationError):
        errors = error.errors()
        if errors:
            first_error = errors[0]
            loc = ".".join(str(x) for x in first_error.get("loc", []))
            msg = first_error.get("msg", str(error))
            if loc:
                return f"Invalid request: {loc}: {msg}", loc
            return f"Invalid request: {msg}", None
    return f"Invalid request: {error}", None


def default_output_path(input_path: Path) -> Path:
    """Output path (without extension) used when none is given."""
    return input_path.with_name(f"{input_path.stem}-compressed")


def _resolve(path: str, base_dir: Path | None) -> Path:
    result = Path(path).expanduser()
    if base_dir is not None and not result.is_absolute():
        result = base_dir / result
    return result


def _to_options(
    model: CompressionRequestModel,
    base_dir: Path | None,
    encoder: EncoderConfig,
) -> Options:
    preset = find_preset(model.preset)

    video_codec = find_video_codec(model.video_codec)
    audio_codec = find_audio_codec(model.audio_codec)
    container = find_container(model.container)
    if preset is not None:
        video_codec = video_codec or preset.video_codec
        audio_codec = audio_codec or preset.audio_codec
        container = container or preset.container

    input_path = _resolve(model.input, base_dir)
    output_path = (
        _resolve(model.output, base_dir)
        if model.output
        else default_output_path(input_path)
    )

    return Options(
        input_path=input_path,
        output_path=output_path,
        video_codec=video_codec,
        audio_codec=audio_codec,
        container=container,
        size_kbps=parse_size_kbps(model.size) if model.size is not None else None,
        audio_quality=model.audio_quality,
        output_width=model.width,
        output_height=model.height,
        aspect_ratio=(
            parse_aspect_ratio(model.aspect_ratio) if model.aspect_ratio else None
        ),
        fps=model.fps,
        speed=model.speed,
        extra_args=model.extra_args,
        min_video_bitrate_kbps=encoder.min_video_bitrate_kbps,
        min_audio_bitrate_kbps=encoder.min_audio_bitrate_kbps,
        max_audio_bitrate_kbps=encoder.max_audio_bitrate_kbps,
        overshoot_correction=encoder.overshoot_correction,
    )


def load_request_from_dict(
    data: dict[str, Any],
    base_dir: Path | None = None,
    encoder: EncoderConfig | None = None,
) -> Options:
    """Validate a request mapping and convert it to Options.

    Args:
        data: Request fields.
        base_dir: Directory that relative paths are resolved against.
        encoder: Source of the bitrate floors, ceiling and overshoot
            correction. Defaults to EncoderConfig().

    Raises:
        RequestFileError: If the mapping is invalid.
    """
    try:
        model = CompressionRequestModel.model_validate(data)
    except Exception as e:
        message, field = _format_validation_error(e)
        raise RequestFileError(message, field) from e

    return _to_options(model, base_dir, encoder or EncoderConfig())


def load_request(path: Path, encoder: EncoderConfig | None = None) -> Options:
    """Load a compression request from a YAML file.

    Relative ``input`` and ``output`` paths are resolved against the
    directory containing the file.

    Raises:
        RequestFileError: If the file is invalid.
        FileNotFoundError: If the file does not exist.
    """
    data = read_request_file(path)
    return load_request_from_dict(data, path.parent, encoder)


def read_request_file(path: Path) -> dict[str, Any]:
    """Read a request YAML file into a mapping without validating fields.

    Raises:
        RequestFileError: If the file is not a YAML mapping.
        FileNotFoundError: If the file does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Request file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RequestFileError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise RequestFileError("Request file is empty")
    if not isinstance(data, dict):
        raise RequestFileError("Request file must be a YAML mapping")
    return data
