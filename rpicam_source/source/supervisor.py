"""Owner of the camera program and the capture session state."""

import asyncio
import time
from typing import Awaitable, Callable, Optional, Sequence

from rpicam_source.capture.command import build_command, format_command
from rpicam_source.capture.options import CaptureOptions
from rpicam_source.capture.process_handle import DataEvent, ExitEvent, ProcessEvent, ProcessHandle, spawn
from rpicam_source.core.logging_utils import LoggerLike, ensure_structured_logger
from rpicam_source.errors import SpawnFailure

from .effect_executor import EffectExecutor
from .effects import Effect
from .events import DataReceived, Event, ProcessExited, ProcessSpawned, SpawnFailed
from .sink import H264_STREAM, StreamSink
from .state import CaptureSession, SourceStatus, SupervisorConfig
from .update import update

Spawner = Callable[[Sequence[str]], Awaitable[ProcessHandle]]
Clock = Callable[[], int]
Sleep = Callable[[float], Awaitable[None]]


class CaptureSupervisor:
    """Runs one camera program at a time and feeds its output to a sink.

    ``run()`` waits ``options.camera_open_delay`` once, launches the
    program, then handles its events in order until it exits. A clean exit
    returns ``SourceStatus.CLEAN`` after end of stream has been sent; every
    fatal outcome raises a ``CaptureError``.

    ``spawner``, ``clock`` and ``sleep`` are injectable so the state machine
    can be driven by scripted handles.
    """

    def __init__(
        self,
        options: CaptureOptions,
        sink: StreamSink,
        *,
        config: Optional[SupervisorConfig] = None,
        spawner: Optional[Spawner] = None,
        clock: Clock = time.monotonic_ns,
        sleep: Sleep = asyncio.sleep,
        logger: LoggerLike = None,
    ):
        self._config = config or SupervisorConfig()
        self._sink = sink
        self._clock = clock
        self._sleep = sleep
        self._logger = ensure_structured_logger(logger, fallback_name="CaptureSupervisor")
        self._spawner = spawner or self._default_spawner
        self._session = CaptureSession(options=options)
        self._handle: Optional[ProcessHandle] = None
        self._executor = EffectExecutor(sink, self._spawn, sleep, logger=self._logger)
        self._run_task: Optional[asyncio.Task] = None
        self._started = False
        self._stopping = False

    async def _default_spawner(self, argv: Sequence[str]) -> ProcessHandle:
        return await spawn(
            argv,
            terminate_timeout=self._config.terminate_timeout,
            logger=self._logger.getChild("process"),
        )

    @property
    def session(self) -> CaptureSession:
        return self._session

    @property
    def status(self) -> SourceStatus:
        return self._session.status

    @property
    def handle(self) -> Optional[ProcessHandle]:
        return self._handle

    @property
    def stopping(self) -> bool:
        """True once ``stop()`` has been requested."""
        return self._stopping

    def _dispatch(self, event: Event) -> list[Effect]:
        self._session, effects = update(self._session, event, self._config)
        return effects

    async def _spawn(self, argv: Sequence[str]) -> None:
        await self._release_handle()
        self._logger.info("Launching: %s", format_command(argv))
        try:
            handle = await self._spawner(argv)
        except SpawnFailure as e:
            self._dispatch(SpawnFailed(e))
            raise
        self._handle = handle
        self._dispatch(ProcessSpawned(handle.handle_id))

    async def start(self) -> None:
        if self._started:
            return
        self._started = True

        options = self._session.options
        if options.camera_open_delay > 0:
            self._logger.debug("Delaying camera open by %.3fs", options.camera_open_delay)
            await self._sleep(options.camera_open_delay)

        await self._spawn(build_command(options))
        self._sink.declare_format(H264_STREAM)

    def _translate(self, event: ProcessEvent) -> Event:
        if isinstance(event, DataEvent):
            return DataReceived(event.handle_id, event.data, self._clock())
        if isinstance(event, ExitEvent):
            return ProcessExited(event.handle_id, event.exit_code)
        raise TypeError(f"Unknown process event: {event!r}")

    async def run(self) -> SourceStatus:
        if self._stopping:
            return self._session.status

        self._run_task = asyncio.current_task()
        try:
            await self.start()
            while not self._session.is_terminal and not self._stopping:
                event = await self._handle.next_event()
                for effect in self._dispatch(self._translate(event)):
                    await self._executor(effect)
            return self._session.status
        finally:
            self._run_task = None
            await self._release_handle()

    async def _release_handle(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            await handle.terminate()

    async def stop(self) -> None:
        """Tear the source down, terminating the camera program if it runs."""
        if self._stopping:
            return
        self._stopping = True

        task = self._run_task
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        await self._release_handle()
        self._logger.info("Capture source stopped (status=%s)", self._session.status.name)

    async def __aenter__(self) -> "CaptureSupervisor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
