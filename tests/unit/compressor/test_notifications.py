"""Tests for the notification channel and bundled listeners."""

import io
from unittest.mock import MagicMock

import pytest

from sizefit.compressor.notifications import (
    CompressionOutcome,
    NotificationChannel,
    StderrProgressListener,
)
from sizefit.domain.models import ComputedOptions


@pytest.fixture
def channel(listener) -> NotificationChannel:
    return NotificationChannel([listener])


class TestNotificationChannelOrdering:
    """Tests for delivery order enforcement."""

    def test_full_sequence(self, channel, listener, make_options):
        computed = ComputedOptions(video_bitrate_kbps=500.0, audio_bitrate_kbps=96.0)

        assert channel.started(500.0, 96.0)
        assert channel.progress(10)
        assert channel.progress(50)
        assert channel.succeeded(make_options(), computed, io.BytesIO(b"data"))

        assert listener.kinds == ["started", "progress", "progress", "succeeded"]

    def test_progress_before_started_is_dropped(self, channel, listener):
        assert not channel.progress(10)
        assert listener.events == []

    def test_succeeded_before_started_is_dropped(self, channel, listener, make_options):
        assert not channel.succeeded(make_options(), ComputedOptions(), io.BytesIO())
        assert listener.events == []

    def test_failed_without_started(self, channel, listener):
        assert channel.failed("No video or audio codec was selected.")
        assert listener.events == [
            ("failed", "No video or audio codec was selected.", "")
        ]

    def test_nothing_after_terminal(self, channel, listener):
        channel.started(0.0, 128.0)
        channel.failed("boom", "details")

        assert not channel.progress(90)
        assert not channel.failed("again")
        assert not channel.started(0.0, 128.0)
        assert listener.kinds == ["started", "failed"]

    def test_duplicate_started_dropped(self, channel, listener):
        channel.started(1.0, 2.0)
        assert not channel.started(3.0, 4.0)
        assert listener.events == [("started", 1.0, 2.0)]

    def test_reset_allows_new_request(self, channel, listener):
        channel.started(1.0, 2.0)
        channel.failed("first")
        channel.reset()

        assert channel.started(1.0, 2.0)
        assert not channel.terminal_emitted
        assert channel.started_emitted


class TestNotificationChannelListeners:
    """Tests for listener management and isolation."""

    def test_listener_exception_is_contained(self, channel, listener, caplog):
        broken = MagicMock()
        broken.on_started.side_effect = RuntimeError("listener bug")
        channel.add_listener(broken)

        assert channel.started(1.0, 2.0)

        assert listener.kinds == ["started"]
        assert "raised in on_started" in caplog.text

    def test_remove_listener(self, channel, listener):
        channel.remove_listener(listener)
        channel.remove_listener(listener)
        channel.failed("nobody hears this")

        assert listener.events == []


class TestCompressionOutcome:
    """Tests for CompressionOutcome."""

    def test_records_success(self, make_options, temp_dir):
        outcome = CompressionOutcome()
        path = temp_dir / "out.mp4"
        path.write_bytes(b"x")

        outcome.on_started(500.0, 96.0)
        outcome.on_progress(42)
        with open(path, "rb") as handle:
            outcome.on_succeeded(make_options(), ComputedOptions(), handle)

        assert outcome.done
        assert outcome.wait(0)
        assert outcome.succeeded is True
        assert outcome.output_path == str(path)
        assert outcome.video_bitrate_kbps == 500.0
        assert outcome.progress == [42]

    def test_records_failure(self):
        outcome = CompressionOutcome()
        outcome.on_failed("Compression was cancelled", "ffmpeg -i in.mov")

        assert outcome.succeeded is False
        assert outcome.summary == "Compression was cancelled"
        assert outcome.details == "ffmpeg -i in.mov"

    def test_wait_times_out(self):
        assert CompressionOutcome().wait(0.01) is False


class TestStderrProgressListener:
    """Tests for StderrProgressListener."""

    def test_renders_progress_line(self, capsys, make_options):
        listener = StderrProgressListener()

        listener.on_started(512.4, 128.0)
        listener.on_progress(5)
        listener.on_progress(5)
        listener.on_progress(100)
        listener.on_succeeded(make_options(), ComputedOptions(), io.BytesIO())

        assert capsys.readouterr().err == (
            "Encoding (video 512 kbps, audio 128 kbps)\n"
            "\rProgress:   5%\rProgress: 100%\n"
        )

    def test_no_trailing_newline_without_progress(self, capsys):
        listener = StderrProgressListener()
        listener.on_failed("boom")
        assert capsys.readouterr().err == ""

    def test_disabled(self, capsys):
        listener = StderrProgressListener(enabled=False)
        listener.on_started(1.0, 2.0)
        listener.on_progress(50)
        assert capsys.readouterr().err == ""
