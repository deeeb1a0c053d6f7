"""MetadataProber interface for input metadata extraction."""

from pathlib import Path
from typing import Protocol

from sizefit.domain.errors import ProbeError
from sizefit.domain.models import Metadata

__all__ = ["MetadataProber", "ProbeError"]


class MetadataProber(Protocol):
    """Protocol for metadata probe implementations.

    Implementations run an external tool synchronously (with a bounded
    timeout) and translate its structured output into Metadata.
    """

    def probe(self, path: Path, require_video: bool = True) -> Metadata:
        """Extract metadata from a media file.

        Args:
            path: Path to the input file.
            require_video: When False, an input without a video stream
                yields Metadata without dimensions instead of failing.

        Returns:
            Metadata with a positive duration, and dimensions unless
            require_video is False and the input has none.

        Raises:
            ProbeError: If the tool fails, times out, or returns
                unparseable or incomplete data.
        """
        ...
