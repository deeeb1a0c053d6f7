"""Compression orchestrator: one request from validation to terminal outcome.

compress() runs the synchronous stages (validate, probe, plan, build) on
the caller's thread and starts the transcoder. From then on the process
handle's ``output`` and ``exited`` events drive the request to
``succeeded`` or ``failed`` on the reader thread.

Every failure inside a request becomes a ``failed`` notification. Only
BusyError, raised when a second request is started while one is in
flight, is raised to the caller.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from sizefit.compressor.command import CommandBuilder
from sizefit.compressor.interpreter import FFmpegOutputInterpreter, OutputInterpreter
from sizefit.compressor.notifications import NotificationChannel
from sizefit.compressor.planner import output_duration, plan_bitrates
from sizefit.compressor.validation import validate_options
from sizefit.domain.enums import CompressionState
from sizefit.domain.errors import BusyError, CompressionError, EncodeFailure
from sizefit.domain.models import ComputedOptions, Invocation, Metadata, Options
from sizefit.executor.process import ProcessFactory, Subscription, TranscodeProcess
from sizefit.introspector.interface import MetadataProber
from sizefit.logging.context import request_context

logger = logging.getLogger(__name__)


@dataclass
class CompressionRequest:
    """Live state of the single in-flight request."""

    id: str
    options: Options
    state: CompressionState = CompressionState.IDLE
    metadata: Metadata | None = None
    computed: ComputedOptions | None = None
    invocation: Invocation | None = None
    process: TranscodeProcess | None = None
    duration: float = 0.0
    chunks: list[str] = field(default_factory=list)
    pending: str = ""
    last_percent: int = -1
    subscriptions: list[Subscription] = field(default_factory=list)
    cancelled: bool = False
    error: CompressionError | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def output_text(self) -> str:
        return "".join(self.chunks)

    def release_subscriptions(self) -> None:
        for subscription in self.subscriptions:
            subscription.release()
        self.subscriptions.clear()

    def clear_output(self) -> None:
        self.chunks.clear()
        self.pending = ""


class CompressionOrchestrator:
    """Drives one compression request at a time.

    Args:
        prober: Metadata source. Defaults to ffprobe, created on first use.
        interpreter: Reads progress and diagnostics from ffmpeg output.
        channel: Where notifications are delivered.
        ffmpeg_path: ffmpeg executable. Resolved from config/PATH if omitted.
        extension_timeout: Bound on the container extension query.
        probe_timeout: Bound on the ffprobe query of the default prober.
        process_factory: Creates the process handle for an argument list.
        command_builder: Overrides the default CommandBuilder.
    """

    def __init__(
        self,
        prober: MetadataProber | None = None,
        interpreter: OutputInterpreter | None = None,
        channel: NotificationChannel | None = None,
        *,
        ffmpeg_path: Path | None = None,
        extension_timeout: float = 10.0,
        probe_timeout: float = 30.0,
        process_factory: ProcessFactory = TranscodeProcess,
        command_builder: CommandBuilder | None = None,
    ) -> None:
        self._prober = prober
        self._interpreter = interpreter or FFmpegOutputInterpreter()
        self.channel = channel or NotificationChannel()
        self._ffmpeg_path = ffmpeg_path
        self._extension_timeout = extension_timeout
        self._probe_timeout = probe_timeout
        self._process_factory = process_factory
        self._command_builder = command_builder

        self._lock = threading.Lock()
        self._request: CompressionRequest | None = None
        self._done = threading.Event()
        self._done.set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> CompressionState:
        request = self._request
        return request.state if request is not None else CompressionState.IDLE

    @property
    def last_error(self) -> CompressionError | None:
        """Error behind the most recent failed request, if any."""
        request = self._request
        return request.error if request is not None else None

    @property
    def busy(self) -> bool:
        request = self._request
        return request is not None and not request.state.is_terminal

    def compress(self, options: Options) -> CompressionState:
        """Start a compression request.

        Returns once the transcoder is running or the request has already
        failed. Use wait() or a listener to learn the final outcome.

        Raises:
            BusyError: If another request is still in flight.
        """
        with self._lock:
            if self.busy:
                raise BusyError(
                    "A compression is already in progress",
                    f"request {self._request.id} is {self._request.state.value}",
                )
            request = CompressionRequest(id=uuid.uuid4().hex[:8], options=options)
            self._request = request
            self.channel.reset()
            self._done.clear()

        with request_context(request.id, options.input_path):
            logger.info(
                "Compressing %s -> %s", options.input_path, options.output_path
            )
            try:
                self._prepare_and_start(request)
            except CompressionError as e:
                self._finish_failed(request, e)
            except Exception as e:
                logger.exception("Unexpected error while preparing compression")
                self._finish_failed(
                    request,
                    CompressionError(
                        "Unexpected error while preparing compression", str(e)
                    ),
                )
        return request.state

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current request is terminal.

        Returns:
            True if no request is in flight when this returns.
        """
        return self._done.wait(timeout)

    def cancel(self) -> bool:
        """Kill the running transcoder.

        The request then fails through the normal exit path.

        Returns:
            True if a running process was signalled.
        """
        request = self._request
        if request is None or request.state is not CompressionState.RUNNING:
            return False
        request.cancelled = True
        if request.process is not None:
            request.process.terminate()
        return True

    def get_metadata(self, path: Path, require_video: bool = True) -> Metadata:
        """Probe an input file without compressing it.

        Raises:
            ProbeError: If the file cannot be probed.
        """
        return self._get_prober().probe(path, require_video=require_video)

    def available_formats(self) -> str:
        """Raw encoder listing of the ffmpeg in use."""
        from sizefit.executor.ffmpeg_queries import available_formats

        return available_formats(self._get_ffmpeg_path())

    # ------------------------------------------------------------------
    # Synchronous stages
    # ------------------------------------------------------------------

    def _set_state(self, request: CompressionRequest, state: CompressionState) -> None:
        logger.debug(
            "State %s -> %s",
            request.state.value,
            state.value,
            extra={"state": state.value},
        )
        request.state = state

    def _get_prober(self) -> MetadataProber:
        if self._prober is None:
            from sizefit.introspector.ffprobe import FFprobeProber

            self._prober = FFprobeProber(timeout=self._probe_timeout)
        return self._prober

    def _get_ffmpeg_path(self) -> Path:
        if self._ffmpeg_path is None:
            from sizefit.executor.interface import require_tool

            self._ffmpeg_path = require_tool("ffmpeg")
        return self._ffmpeg_path

    def _get_command_builder(self) -> CommandBuilder:
        if self._command_builder is None:
            self._command_builder = CommandBuilder(
                self._get_ffmpeg_path(), extension_timeout=self._extension_timeout
            )
        return self._command_builder

    def _prepare_and_start(self, request: CompressionRequest) -> None:
        options = request.options

        self._set_state(request, CompressionState.VALIDATING)
        validate_options(options).raise_if_invalid()

        if options.input_metadata is None:
            self._set_state(request, CompressionState.PROBING)
            request.metadata = self._get_prober().probe(
                options.input_path, require_video=options.video_codec is not None
            )
        else:
            request.metadata = options.input_metadata

        self._set_state(request, CompressionState.PLANNING)
        request.duration = output_duration(options, request.metadata)
        request.computed = plan_bitrates(options, request.metadata)

        self._set_state(request, CompressionState.BUILDING)
        request.invocation = self._get_command_builder().build(
            options, request.computed
        )

        self._start_process(request)

    def _start_process(self, request: CompressionRequest) -> None:
        invocation = request.invocation
        computed = request.computed
        assert invocation is not None and computed is not None

        process = self._process_factory(list(invocation.args))
        request.process = process

        # Handlers block on request.lock until "started" has been delivered.
        with request.lock:
            request.subscriptions = [
                process.output.subscribe(lambda text: self._on_output(request, text)),
                process.exited.subscribe(lambda code: self._on_exited(request, code)),
            ]
            self._set_state(request, CompressionState.RUNNING)
            try:
                process.start()
            except CompressionError:
                request.release_subscriptions()
                raise

            logger.info("Started: %s", invocation.command_line)
            self.channel.started(
                computed.video_bitrate_kbps or 0.0,
                computed.audio_bitrate_kbps or 0.0,
            )

    # ------------------------------------------------------------------
    # Process events
    # ------------------------------------------------------------------

    def _on_output(self, request: CompressionRequest, text: str) -> None:
        with request.lock:
            if request.state is not CompressionState.RUNNING:
                return
            request.chunks.append(text)

            # Timestamps can straddle chunk boundaries; search the unfinished
            # line carried over from the previous chunk as well.
            window = request.pending + text
            cut = max(window.rfind("\r"), window.rfind("\n"))
            request.pending = window[cut + 1:] if cut >= 0 else window

            seconds = self._interpreter.extract_progress_seconds(window)
            if seconds is None:
                return
            percent = int(seconds * 100 / request.duration)
            percent = max(0, min(100, percent))
            if percent == request.last_percent:
                return
            request.last_percent = percent

        with request_context(request.id, request.options.input_path):
            self.channel.progress(percent)

    def _on_exited(self, request: CompressionRequest, returncode: int) -> None:
        with request.lock:
            if request.state is not CompressionState.RUNNING:
                return
            request.release_subscriptions()

        with request_context(request.id, request.options.input_path):
            try:
                self._finish_from_exit(request, returncode)
            except Exception as e:
                logger.exception("Unexpected error while finishing compression")
                self._finish_failed(
                    request,
                    CompressionError(
                        "Unexpected error while finishing compression", str(e)
                    ),
                )

    def _finish_from_exit(self, request: CompressionRequest, returncode: int) -> None:
        invocation = request.invocation
        assert invocation is not None

        if returncode != 0:
            raw = request.output_text
            summary = self._interpreter.extract_diagnostic(raw)
            if request.cancelled:
                summary = "Compression was cancelled"
            elif not summary:
                summary = f"ffmpeg exited with code {returncode}"
            logger.warning("Transcoder failed (exit code %s): %s", returncode, summary)
            self._finish_failed(
                request,
                EncodeFailure(summary, f"{invocation.command_line}\n\n{raw}"),
            )
            return

        try:
            output = open(invocation.output_path, "rb")
        except OSError as e:
            logger.warning(
                "Output %s could not be opened: %s", invocation.output_path, e
            )
            self._finish_failed(
                request, EncodeFailure("Could not open the compressed media.", str(e))
            )
            return

        logger.info("Compressed %s", invocation.output_path)
        try:
            self._set_state(request, CompressionState.SUCCEEDED)
            self.channel.succeeded(request.options, request.computed, output)
        finally:
            output.close()
            request.clear_output()
            self._mark_done(request)

    def _finish_failed(
        self, request: CompressionRequest, error: CompressionError
    ) -> None:
        request.release_subscriptions()
        request.error = error
        self._set_state(request, CompressionState.FAILED)
        logger.error("Compression failed: %s", error.summary)
        try:
            self.channel.failed(error.summary, error.details)
        finally:
            request.clear_output()
            self._mark_done(request)

    def _mark_done(self, request: CompressionRequest) -> None:
        # A listener may already have started the next request.
        with self._lock:
            if self._request is request:
                self._done.set()
