"""Fixtures for CLI tests."""

import pytest
from click.testing import CliRunner

from sizefit.config.models import SizefitConfig


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def skip_logging_setup(monkeypatch):
    """Keep CLI invocations from reconfiguring the root logger."""
    monkeypatch.setattr("sizefit.cli._logging_configured", True)


@pytest.fixture
def cli_obj() -> dict:
    return {"config": SizefitConfig()}


@pytest.fixture
def input_file(temp_dir):
    path = temp_dir / "clip.mov"
    path.write_bytes(b"\x00\x00")
    return path
