"""Background handle for the running transcoder process.

TranscodeProcess starts ffmpeg with stdout and stderr merged, reads the
stream on a daemon thread and publishes two events:

- ``output``: each decoded chunk of text, as soon as it is read
- ``exited``: the return code, after the stream has been drained

ffmpeg rewrites its progress line with carriage returns, so the stream is
read in raw chunks rather than lines.
"""

from __future__ import annotations

import codecs
import logging
import subprocess  # nosec B404 - subprocess is required for ffmpeg invocation
import threading
from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from sizefit.domain.errors import ProcessError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CHUNK_SIZE = 4096


class Subscription:
    """Handle for one registered event handler.

    Usable as a context manager; ``release()`` may be called any number of
    times.
    """

    def __init__(self, event: ProcessEvent, handler: Callable) -> None:
        self._event = event
        self._handler = handler
        self._released = False

    @property
    def active(self) -> bool:
        return not self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._event._remove(self._handler)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


class ProcessEvent(Generic[T]):
    """A typed event with explicit subscriptions."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: list[Callable[[T], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: Callable[[T], None]) -> Subscription:
        with self._lock:
            self._handlers.append(handler)
        return Subscription(self, handler)

    def _remove(self, handler: Callable[[T], None]) -> None:
        with self._lock:
            try:
                self._handlers.remove(handler)
            except ValueError:
                pass

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._handlers)

    def emit(self, value: T) -> None:
        """Deliver a value to every current subscriber.

        A failing handler is logged and does not stop delivery to the others.
        """
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(value)
            except Exception:
                logger.exception("Handler for %s event failed", self.name)


class TranscodeProcess:
    """A single external transcoder run."""

    def __init__(self, args: Sequence[str]) -> None:
        self.args = list(args)
        self.output: ProcessEvent[str] = ProcessEvent("output")
        self.exited: ProcessEvent[int] = ProcessEvent("exited")
        self._process: subprocess.Popen | None = None
        self._reader: threading.Thread | None = None
        self._returncode: int | None = None
        self._done = threading.Event()

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process else None

    @property
    def returncode(self) -> int | None:
        return self._returncode

    @property
    def running(self) -> bool:
        return self._process is not None and not self._done.is_set()

    def start(self) -> None:
        """Launch the process and the reader thread.

        Raises:
            ProcessError: If the executable cannot be started.
        """
        if self._process is not None:
            raise RuntimeError("process already started")

        try:
            self._process = subprocess.Popen(  # nosec B603 - args built from catalog
                self.args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            raise ProcessError(
                f"Could not start {self.args[0] if self.args else 'process'}",
                str(e),
            ) from e

        logger.debug("Started transcoder pid=%s", self._process.pid)
        self._reader = threading.Thread(
            target=self._read_output, name="sizefit-transcoder-reader", daemon=True
        )
        self._reader.start()

    def _read_output(self) -> None:
        process = self._process
        assert process is not None and process.stdout is not None
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while True:
                chunk = process.stdout.read1(_CHUNK_SIZE)
                if not chunk:
                    break
                text = decoder.decode(chunk)
                if text:
                    self.output.emit(text)
            tail = decoder.decode(b"", final=True)
            if tail:
                self.output.emit(tail)
        except (ValueError, OSError) as e:
            # Pipe closed or process terminated
            logger.debug("Output reader stopped: %s", e)
        finally:
            self._returncode = process.wait()
            try:
                process.stdout.close()
            except OSError:
                pass
            logger.debug(
                "Transcoder pid=%s exited with %s", process.pid, self._returncode
            )
            self._done.set()
            self.exited.emit(self._returncode)

    def terminate(self) -> None:
        """Kill the process. The exit is still published through ``exited``."""
        if self._process is None or self._done.is_set():
            return
        logger.info("Terminating transcoder pid=%s", self._process.pid)
        try:
            self._process.kill()
        except OSError as e:
            logger.debug("Kill failed: %s", e)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the exit event has been published.

        Returns:
            True if the process finished within the timeout.
        """
        if self._process is None:
            return True
        return self._done.wait(timeout)


ProcessFactory = Callable[[Sequence[str]], TranscodeProcess]
