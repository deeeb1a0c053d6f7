"""Tests for the formats command."""

from pathlib import Path

from sizefit.cli import main
from sizefit.cli.exit_codes import ExitCode
from sizefit.cli.formats import format_catalog
from sizefit.domain.errors import ProcessError


class TestFormatCatalog:
    """Tests for format_catalog."""

    def test_sections(self):
        text = format_catalog()

        for heading in ("Video codecs:", "Audio codecs:", "Containers:", "Presets:"):
            assert heading in text

    def test_contents(self):
        text = format_catalog()

        assert "  H.264 (libx264)" in text
        assert "  WebM (webm): OGG Vorbis, OPUS, VP9" in text
        assert "  Web (MP4): H.264 / AAC / MP4" in text
        assert "  Audio only (Opus): no video / OPUS" in text


class TestFormatsCommand:
    """Tests for `sizefit formats`."""

    def test_catalog(self, runner, cli_obj):
        result = runner.invoke(main, ["formats"], obj=cli_obj)

        assert result.exit_code == 0
        assert "Presets:" in result.output

    def test_encoders(self, runner, cli_obj, monkeypatch):
        calls = []

        def fake_formats(ffmpeg_path):
            calls.append(ffmpeg_path)
            return "Encoders:\n V..... libx264\n"

        monkeypatch.setattr(
            "sizefit.cli.formats.require_tool", lambda name, config=None: Path("/x")
        )
        monkeypatch.setattr("sizefit.cli.formats.available_formats", fake_formats)

        result = runner.invoke(main, ["formats", "--encoders"], obj=cli_obj)

        assert result.exit_code == 0
        assert result.output == "Encoders:\n V..... libx264\n"
        assert calls == [Path("/x")]

    def test_encoders_failure(self, runner, cli_obj, monkeypatch):
        def failing(ffmpeg_path):
            raise ProcessError("ffmpeg -encoders failed (exit code 1)")

        monkeypatch.setattr(
            "sizefit.cli.formats.require_tool", lambda name, config=None: Path("/x")
        )
        monkeypatch.setattr("sizefit.cli.formats.available_formats", failing)

        result = runner.invoke(main, ["formats", "--encoders"], obj=cli_obj)

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "exit code 1" in result.output
