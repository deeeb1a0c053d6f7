"""Metadata probing for compression inputs."""

from sizefit.introspector.ffprobe import FFprobeProber
from sizefit.introspector.interface import MetadataProber, ProbeError
from sizefit.introspector.parsers import parse_metadata
from sizefit.introspector.stub import StubProber

__all__ = [
    "FFprobeProber",
    "MetadataProber",
    "ProbeError",
    "StubProber",
    "parse_metadata",
]
