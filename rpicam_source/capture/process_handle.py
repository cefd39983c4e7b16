import asyncio
import contextlib
import itertools
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Union

from rpicam_source.core.asyncio_utils import create_logged_task
from rpicam_source.core.logging_utils import LoggerLike, ensure_structured_logger
from rpicam_source.errors import SpawnFailure

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_TERMINATE_TIMEOUT = 2.0

_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class DataEvent:
    handle_id: int
    data: bytes


@dataclass(frozen=True)
class ExitEvent:
    handle_id: int
    exit_code: int


ProcessEvent = Union[DataEvent, ExitEvent]


class ProcessHandle(Protocol):
    """One running camera program, seen as a stream of events.

    ``next_event`` yields stdout chunks as ``DataEvent`` in read order,
    followed by exactly one ``ExitEvent``. Nothing is produced after the
    exit event.
    """

    @property
    def handle_id(self) -> int: ...

    async def next_event(self) -> ProcessEvent: ...

    async def terminate(self) -> None: ...


class SubprocessHandle:
    def __init__(
        self,
        process: asyncio.subprocess.Process,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT,
        logger: LoggerLike = None,
    ):
        self._process = process
        self._handle_id = next(_handle_ids)
        self._chunk_size = chunk_size
        self._terminate_timeout = terminate_timeout
        self._logger = ensure_structured_logger(logger, fallback_name="ProcessHandle")
        self._events: asyncio.Queue[ProcessEvent] = asyncio.Queue()
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

        create_logged_task(
            self._stdout_reader(),
            logger=self._logger,
            context=f"stdout-reader-{process.pid}",
            pending=self._tasks,
        )
        if process.stderr is not None:
            create_logged_task(
                self._stderr_reader(),
                logger=self._logger,
                context=f"stderr-reader-{process.pid}",
                pending=self._tasks,
            )

    @property
    def handle_id(self) -> int:
        return self._handle_id

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode

    async def next_event(self) -> ProcessEvent:
        return await self._events.get()

    async def _stdout_reader(self) -> None:
        stdout = self._process.stdout
        if stdout is not None:
            try:
                while True:
                    data = await stdout.read(self._chunk_size)
                    if not data:
                        break
                    self._events.put_nowait(DataEvent(self._handle_id, data))
            except (OSError, ValueError) as e:
                self._logger.error("stdout reader error (pid %d): %s", self._process.pid, e)

        exit_code = await self._process.wait()
        self._logger.debug("Process %d exited with status %d", self._process.pid, exit_code)
        self._events.put_nowait(ExitEvent(self._handle_id, exit_code))

    async def _stderr_reader(self) -> None:
        stderr = self._process.stderr
        while True:
            try:
                line = await stderr.readline()
            except ValueError:
                # Over-long line; readline already discarded it.
                continue
            if not line:
                break
            text = line.decode(errors="replace").strip()
            if text:
                self._logger.debug("stderr: %s", text)

    async def terminate(self) -> None:
        if self._closed:
            return
        self._closed = True

        if self._process.returncode is None:
            self._logger.info("Terminating process %d", self._process.pid)
            with contextlib.suppress(ProcessLookupError):
                self._process.terminate()
            try:
                await asyncio.wait_for(self._process.wait(), timeout=self._terminate_timeout)
            except asyncio.TimeoutError:
                self._logger.warning("Process %d did not terminate, killing...", self._process.pid)
                with contextlib.suppress(ProcessLookupError):
                    self._process.kill()
                await self._process.wait()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


async def spawn(
    argv: Sequence[str],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT,
    logger: LoggerLike = None,
) -> SubprocessHandle:
    """Launch ``argv`` with stdout piped back to us.

    Raises ``SpawnFailure`` when the OS cannot create the process at all.
    """
    handle_logger = ensure_structured_logger(logger, fallback_name="ProcessHandle")
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise SpawnFailure(argv[0], e) from e

    handle_logger.info("Started %s with PID: %d", argv[0], process.pid)
    return SubprocessHandle(
        process,
        chunk_size=chunk_size,
        terminate_timeout=terminate_timeout,
        logger=handle_logger,
    )


__all__ = [
    "DataEvent",
    "ExitEvent",
    "ProcessEvent",
    "ProcessHandle",
    "SubprocessHandle",
    "spawn",
    "DEFAULT_CHUNK_SIZE",
]
