"""In-memory MetadataProber for tests and pre-probed inputs."""

from pathlib import Path

from sizefit.domain.errors import ProbeError
from sizefit.domain.models import Metadata


class StubProber:
    """Return canned Metadata keyed by path.

    A single ``default`` record answers every path not listed in
    ``by_path``. Paths with no answer raise ProbeError.
    """

    def __init__(
        self,
        default: Metadata | None = None,
        by_path: dict[Path, Metadata] | None = None,
    ) -> None:
        self._default = default
        self._by_path = dict(by_path or {})
        self.calls: list[Path] = []

    def probe(self, path: Path, require_video: bool = True) -> Metadata:
        self.calls.append(path)
        metadata = self._by_path.get(path, self._default)
        if metadata is None:
            raise ProbeError(f"No metadata registered for {path}")
        return metadata
