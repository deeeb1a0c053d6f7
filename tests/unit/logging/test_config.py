"""Unit tests for logging configuration and the JSON formatter."""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from sizefit.config.models import LoggingConfig
from sizefit.logging.config import configure_logging
from sizefit.logging.context import request_context
from sizefit.logging.handlers import JSONFormatter


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Save and restore root logger state between tests."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers[:] = original_handlers
    root.setLevel(original_level)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_default_level_is_info(self) -> None:
        configure_logging(LoggingConfig())
        assert logging.getLogger().level == logging.INFO

    def test_stderr_handler_without_file(self) -> None:
        configure_logging(LoggingConfig(level="warning"))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
        assert handlers[0].level == logging.WARNING

    def test_file_handler_only(self, temp_dir: Path) -> None:
        log_file = temp_dir / "nested" / "sizefit.log"

        configure_logging(LoggingConfig(file=log_file))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)
        assert log_file.parent.is_dir()

    def test_file_and_stderr(self, temp_dir: Path) -> None:
        configure_logging(
            LoggingConfig(file=temp_dir / "sizefit.log", include_stderr=True)
        )
        assert len(logging.getLogger().handlers) == 2

    def test_reconfigure_closes_previous_handlers(self, temp_dir: Path) -> None:
        configure_logging(LoggingConfig(file=temp_dir / "first.log"))
        first = logging.getLogger().handlers[0]

        configure_logging(LoggingConfig(file=temp_dir / "second.log"))

        assert first not in logging.getLogger().handlers
        assert first.stream is None
        assert len(logging.getLogger().handlers) == 1

    def test_unwritable_file_falls_back_to_stderr(
        self, temp_dir: Path, capsys: pytest.CaptureFixture
    ) -> None:
        blocker = temp_dir / "blocker"
        blocker.write_text("")

        configure_logging(LoggingConfig(file=blocker / "sizefit.log"))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0], RotatingFileHandler)
        assert "Could not open log file" in capsys.readouterr().err

    def test_text_format_includes_request_tag(self, temp_dir: Path) -> None:
        log_file = temp_dir / "sizefit.log"
        configure_logging(LoggingConfig(file=log_file))

        with request_context("a1b2c3d4"):
            logging.getLogger("sizefit.test").info("planning")
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text().strip()
        assert "[a1b2c3d4] sizefit.test - INFO - planning" in line

    def test_json_format(self, temp_dir: Path) -> None:
        log_file = temp_dir / "sizefit.log"
        configure_logging(LoggingConfig(file=log_file, format="json"))

        logging.getLogger("sizefit.test").warning("careful")
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip())
        assert entry["level"] == "WARNING"
        assert entry["message"] == "careful"


class TestJSONFormatter:
    """Tests for JSONFormatter output."""

    def _format(self, record: logging.LogRecord) -> dict:
        return json.loads(JSONFormatter().format(record))

    def test_basic_fields(self) -> None:
        record = logging.LogRecord(
            "sizefit.compressor", logging.INFO, "", 0, "Encoding %s", ("clip",), None
        )
        entry = self._format(record)

        assert entry["level"] == "INFO"
        assert entry["message"] == "Encoding clip"
        assert entry["logger"] == "sizefit.compressor"
        assert entry["timestamp"].endswith("+00:00")
        assert "request" not in entry
        assert "context" not in entry

    def test_request_and_extra_context(self) -> None:
        record = logging.LogRecord("sizefit", logging.INFO, "", 0, "msg", None, None)
        record.request_id = "a1b2c3d4"
        record.request_tag = "[a1b2c3d4] "
        record.video_kbps = 512

        entry = self._format(record)

        assert entry["request"] == "a1b2c3d4"
        assert entry["context"] == {"video_kbps": 512}

    def test_exception_included(self) -> None:
        try:
            raise ValueError("bad value")
        except ValueError:
            exc_info = sys.exc_info()
        record = logging.LogRecord(
            "sizefit", logging.ERROR, "", 0, "failed", None, exc_info
        )

        entry = self._format(record)

        assert "ValueError: bad value" in entry["exception"]

    def test_non_serializable_context_uses_str(self) -> None:
        record = logging.LogRecord("sizefit", logging.INFO, "", 0, "msg", None, None)
        record.path = Path("/videos/clip.mov")

        assert self._format(record)["context"] == {"path": "/videos/clip.mov"}
