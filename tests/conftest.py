"""Shared test fixtures for sizefit."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from sizefit.core.catalog import AAC, H264, MP4, OPUS
from sizefit.domain.models import AspectRatio, Metadata, Options

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_ffprobe_fixture(name: str) -> dict:
    """Load an ffprobe JSON fixture by name (without .json extension)."""
    fixture_path = FIXTURES_DIR / "ffprobe" / f"{name}.json"
    return json.loads(fixture_path.read_text())


def load_ffmpeg_output(name: str) -> str:
    """Load captured ffmpeg console output by name (without .txt extension)."""
    return (FIXTURES_DIR / "ffmpeg" / f"{name}.txt").read_text()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_config(temp_dir: Path):
    """Point the config loader at an empty per-test config file.

    Keeps tests independent of ~/.sizefit/config.toml and SIZEFIT_*
    variables set in the developer's shell.
    """
    from sizefit.config import clear_config_cache

    env = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith("SIZEFIT_")
    }
    env["SIZEFIT_CONFIG_PATH"] = str(temp_dir / "config.toml")
    clear_config_cache()
    with patch.dict(os.environ, env, clear=True):
        yield
    clear_config_cache()


@pytest.fixture
def h264_aac_fixture() -> dict:
    """ffprobe output for a 1080p H.264/AAC MP4."""
    return load_ffprobe_fixture("h264_aac_1080p")


@pytest.fixture
def anamorphic_fixture() -> dict:
    """ffprobe output for an anamorphic DVD rip without container bitrate."""
    return load_ffprobe_fixture("anamorphic_dvd")


@pytest.fixture
def audio_only_fixture() -> dict:
    """ffprobe output for an audio-only file."""
    return load_ffprobe_fixture("audio_only")


@pytest.fixture
def metadata_1080p() -> Metadata:
    """Two minutes of 1920x1080 16:9 video."""
    return Metadata(
        duration_seconds=120.0,
        width=1920,
        height=1080,
        aspect_ratio=AspectRatio(16, 9),
        frame_rate=30.0,
        size_kbps=5000.0,
        audio_bitrate_kbps=192.0,
        video_codec="h264",
        audio_codec="aac",
        container="mov,mp4,m4a,3gp,3g2,mj2",
    )


@pytest.fixture
def make_options(temp_dir: Path, metadata_1080p: Metadata):
    """Factory for Options with sensible defaults (H.264/AAC in MP4)."""

    def _make(**overrides) -> Options:
        fields = {
            "input_path": temp_dir / "input.mov",
            "output_path": temp_dir / "output",
            "video_codec": H264,
            "audio_codec": AAC,
            "container": MP4,
            "size_kbps": 80_000.0,
            "input_metadata": metadata_1080p,
        }
        fields.update(overrides)
        return Options(**fields)

    return _make


@pytest.fixture
def audio_only_options(make_options):
    """Factory for audio-only Opus Options."""

    def _make(**overrides) -> Options:
        fields = {"video_codec": None, "audio_codec": OPUS, "container": None}
        fields.update(overrides)
        return make_options(**fields)

    return _make


@pytest.fixture
def ffmpeg_output():
    """Loader for captured ffmpeg console output fixtures."""
    return load_ffmpeg_output
