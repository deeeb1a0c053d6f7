"""Notification contract between the orchestrator and its callers.

The orchestrator never calls listeners directly; it goes through a
NotificationChannel, which enforces the delivery order of one request:

    started → progress* → (succeeded | failed)

``failed`` may also arrive without ``started`` when a request is rejected
before the process launches. Nothing is delivered after the terminal
notification.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from sizefit.domain.models import ComputedOptions, Options

logger = logging.getLogger(__name__)


class CompressionListener(Protocol):
    """Receiver of compression notifications."""

    def on_started(self, video_bitrate_kbps: float, audio_bitrate_kbps: float) -> None:
        """The transcoder is running with these bitrates (0 when unused)."""
        ...

    def on_progress(self, percent: int) -> None:
        """Encoding progress, 0-100."""
        ...

    def on_succeeded(
        self, options: Options, computed: ComputedOptions, output: BinaryIO
    ) -> None:
        """The output file is complete.

        ``output`` is open for reading only for the duration of this call.
        """
        ...

    def on_failed(self, summary: str, details: str = "") -> None:
        """The request failed; ``details`` holds the command and raw output."""
        ...


class NotificationChannel:
    """Fan-out of notifications with ordering enforcement.

    Listener exceptions are logged and never propagate into the
    orchestrator.
    """

    def __init__(self, listeners: list[CompressionListener] | None = None) -> None:
        self._listeners: list[CompressionListener] = list(listeners or [])
        self._lock = threading.Lock()
        self._started = False
        self._terminal = False

    def add_listener(self, listener: CompressionListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: CompressionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @property
    def started_emitted(self) -> bool:
        return self._started

    @property
    def terminal_emitted(self) -> bool:
        return self._terminal

    def reset(self) -> None:
        """Prepare for a new request."""
        with self._lock:
            self._started = False
            self._terminal = False

    def _deliver(self, method: str, *args: object) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                getattr(listener, method)(*args)
            except Exception:
                logger.exception(
                    "Listener %r raised in %s", type(listener).__name__, method
                )

    def _claim(self, kind: str, *, needs_started: bool, terminal: bool) -> bool:
        with self._lock:
            if self._terminal:
                logger.warning(
                    "Dropped %s notification after terminal notification", kind
                )
                return False
            if needs_started and not self._started:
                logger.warning("Dropped %s notification before started", kind)
                return False
            if kind == "started":
                if self._started:
                    logger.warning("Dropped duplicate started notification")
                    return False
                self._started = True
            if terminal:
                self._terminal = True
            return True

    def started(self, video_bitrate_kbps: float, audio_bitrate_kbps: float) -> bool:
        if not self._claim("started", needs_started=False, terminal=False):
            return False
        self._deliver("on_started", video_bitrate_kbps, audio_bitrate_kbps)
        return True

    def progress(self, percent: int) -> bool:
        if not self._claim("progress", needs_started=True, terminal=False):
            return False
        self._deliver("on_progress", percent)
        return True

    def succeeded(
        self, options: Options, computed: ComputedOptions, output: BinaryIO
    ) -> bool:
        if not self._claim("succeeded", needs_started=True, terminal=True):
            return False
        self._deliver("on_succeeded", options, computed, output)
        return True

    def failed(self, summary: str, details: str = "") -> bool:
        if not self._claim("failed", needs_started=False, terminal=True):
            return False
        self._deliver("on_failed", summary, details)
        return True


class CompressionOutcome:
    """Listener that records what happened and lets a caller block on it."""

    def __init__(self) -> None:
        self.video_bitrate_kbps: float | None = None
        self.audio_bitrate_kbps: float | None = None
        self.progress: list[int] = []
        self.succeeded: bool | None = None
        self.output_path: str | None = None
        self.summary = ""
        self.details = ""
        self._done = threading.Event()

    def on_started(self, video_bitrate_kbps: float, audio_bitrate_kbps: float) -> None:
        self.video_bitrate_kbps = video_bitrate_kbps
        self.audio_bitrate_kbps = audio_bitrate_kbps

    def on_progress(self, percent: int) -> None:
        self.progress.append(percent)

    def on_succeeded(
        self, options: Options, computed: ComputedOptions, output: BinaryIO
    ) -> None:
        self.succeeded = True
        self.output_path = getattr(output, "name", None)
        self._done.set()

    def on_failed(self, summary: str, details: str = "") -> None:
        self.succeeded = False
        self.summary = summary
        self.details = details
        self._done.set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a terminal notification arrives.

        Returns:
            True if the request finished within the timeout.
        """
        return self._done.wait(timeout)


class StderrProgressListener:
    """Listener that draws a single self-updating progress line on stderr."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._last_percent = -1

    def _write(self, text: str) -> None:
        if self.enabled:
            sys.stderr.write(text)
            sys.stderr.flush()

    def on_started(self, video_bitrate_kbps: float, audio_bitrate_kbps: float) -> None:
        self._write(
            f"Encoding (video {video_bitrate_kbps:.0f} kbps, "
            f"audio {audio_bitrate_kbps:.0f} kbps)\n"
        )

    def on_progress(self, percent: int) -> None:
        if percent == self._last_percent:
            return
        self._last_percent = percent
        self._write(f"\rProgress: {percent:3d}%")

    def on_succeeded(
        self, options: Options, computed: ComputedOptions, output: BinaryIO
    ) -> None:
        if self._last_percent >= 0:
            self._write("\n")

    def on_failed(self, summary: str, details: str = "") -> None:
        if self._last_percent >= 0:
            self._write("\n")
