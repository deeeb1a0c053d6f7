"""Fixtures for driving the orchestrator without a real ffmpeg."""

from collections.abc import Sequence

import pytest

from sizefit.compressor.command import CommandBuilder
from sizefit.compressor.notifications import NotificationChannel
from sizefit.compressor.orchestrator import CompressionOrchestrator
from sizefit.domain.errors import ProcessError
from sizefit.executor.process import ProcessEvent


class FakeProcess:
    """Stand-in for TranscodeProcess whose events are fired by the test."""

    def __init__(self, args: Sequence[str], start_error: Exception | None = None):
        self.args = list(args)
        self.output: ProcessEvent[str] = ProcessEvent("output")
        self.exited: ProcessEvent[int] = ProcessEvent("exited")
        self.started = False
        self.terminated = False
        self._start_error = start_error

    def start(self) -> None:
        if self._start_error is not None:
            raise self._start_error
        self.started = True

    def emit(self, text: str) -> None:
        self.output.emit(text)

    def finish(self, returncode: int) -> None:
        self.exited.emit(returncode)

    def terminate(self) -> None:
        self.terminated = True
        self.finish(-9)


class FakeProcessFactory:
    """Records every FakeProcess the orchestrator creates."""

    def __init__(self) -> None:
        self.processes: list[FakeProcess] = []
        self.start_error: Exception | None = None

    def __call__(self, args: Sequence[str]) -> FakeProcess:
        process = FakeProcess(args, self.start_error)
        self.processes.append(process)
        return process

    @property
    def last(self) -> FakeProcess:
        return self.processes[-1]


class RecordingListener:
    """Listener that records notifications in arrival order."""

    def __init__(self) -> None:
        self.events: list[tuple] = []
        self.output_handle = None
        self.output_bytes = b""

    def on_started(self, video_bitrate_kbps, audio_bitrate_kbps):
        self.events.append(("started", video_bitrate_kbps, audio_bitrate_kbps))

    def on_progress(self, percent):
        self.events.append(("progress", percent))

    def on_succeeded(self, options, computed, output):
        self.output_handle = output
        self.output_bytes = output.read()
        self.events.append(("succeeded", computed))

    def on_failed(self, summary, details=""):
        self.events.append(("failed", summary, details))

    @property
    def kinds(self) -> list[str]:
        return [event[0] for event in self.events]

    @property
    def progress(self) -> list[int]:
        return [event[1] for event in self.events if event[0] == "progress"]

    @property
    def terminal(self) -> tuple:
        return self.events[-1]


@pytest.fixture
def process_factory() -> FakeProcessFactory:
    return FakeProcessFactory()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def make_orchestrator(process_factory, listener):
    """Factory for an orchestrator wired to fakes.

    The container extension is answered locally unless a resolver is given.
    """

    def _make(resolve_extension=None, **kwargs) -> CompressionOrchestrator:
        builder = CommandBuilder(
            "ffmpeg",
            resolve_extension=resolve_extension or (lambda container: "mp4"),
        )
        kwargs.setdefault("channel", NotificationChannel([listener]))
        return CompressionOrchestrator(
            process_factory=process_factory,
            command_builder=builder,
            **kwargs,
        )

    return _make


@pytest.fixture
def start_error() -> ProcessError:
    return ProcessError("Could not start ffmpeg", "[Errno 2] No such file")
