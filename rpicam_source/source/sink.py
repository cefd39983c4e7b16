import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional, Protocol

import aiofiles

from rpicam_source.core.asyncio_utils import create_logged_task
from rpicam_source.core.logging_utils import get_module_logger
from rpicam_source.errors import OutputError

logger = get_module_logger("Sink")


@dataclass(frozen=True)
class RemoteStream:
    type: str = "bytestream"
    content_format: str = "H264"


H264_STREAM = RemoteStream()


@dataclass(frozen=True)
class Buffer:
    payload: bytes
    pts: int  # nanoseconds since the first buffer


class StreamSink(Protocol):
    """Downstream consumer of the source.

    All calls are made from the supervisor task and must not block: the
    source never waits for the sink to become ready.
    """

    def declare_format(self, stream_format: RemoteStream) -> None: ...

    def push(self, buffer: Buffer) -> None: ...

    def end_of_stream(self) -> None: ...


class QueueSink:
    def __init__(self):
        self._queue: asyncio.Queue[Optional[Buffer]] = asyncio.Queue()
        self._stream_format: Optional[RemoteStream] = None
        self._eos = False
        self._closed = False
        self._buffer_count = 0

    def declare_format(self, stream_format: RemoteStream) -> None:
        if self._stream_format is not None:
            raise RuntimeError("Stream format already declared")
        self._stream_format = stream_format

    def push(self, buffer: Buffer) -> None:
        if self._eos:
            raise RuntimeError("Buffer pushed after end of stream")
        self._buffer_count += 1
        self._queue.put_nowait(buffer)

    def end_of_stream(self) -> None:
        if self._eos:
            raise RuntimeError("End of stream already sent")
        self._eos = True
        self._close_queue()

    def _close_queue(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def buffers(self) -> AsyncIterator[Buffer]:
        while True:
            buffer = await self._queue.get()
            if buffer is None:
                return
            yield buffer

    @property
    def stream_format(self) -> Optional[RemoteStream]:
        return self._stream_format

    @property
    def is_eos(self) -> bool:
        return self._eos

    @property
    def buffer_count(self) -> int:
        return self._buffer_count

    @property
    def pending(self) -> int:
        return self._queue.qsize()


class FileSink(QueueSink):
    """Writes buffer payloads to ``path``, or to stdout when ``path`` is None."""

    def __init__(self, path: Optional[Path] = None):
        super().__init__()
        self._path = Path(path) if path is not None else None
        self._writer_task: Optional[asyncio.Task] = None
        self._bytes_written = 0
        self._error: Optional[OutputError] = None

    def start(self) -> None:
        if self._writer_task is None:
            self._writer_task = create_logged_task(
                self._write_loop(), logger=logger, context="file-sink-writer"
            )

    def push(self, buffer: Buffer) -> None:
        if self._error is not None:
            raise self._error
        super().push(buffer)

    async def _write_loop(self) -> None:
        try:
            if self._path is None:
                target, kwargs = sys.stdout.fileno(), {"closefd": False}
            else:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                target, kwargs = self._path, {}

            async with aiofiles.open(target, "wb", **kwargs) as fh:
                async for buffer in self.buffers():
                    await fh.write(buffer.payload)
                    self._bytes_written += len(buffer.payload)
                await fh.flush()
        except OSError as e:
            self._error = OutputError(str(self._path or "stdout"), e)
            self._drop_pending()
            raise self._error from e

        logger.info("Wrote %d bytes to %s", self._bytes_written, self._path or "stdout")

    def _drop_pending(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()

    async def close(self) -> None:
        """Drain queued buffers and close the file.

        Raises ``OutputError`` if the writer failed at any point.
        """
        self._close_queue()
        if self._writer_task is not None:
            await self._writer_task

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    @property
    def error(self) -> Optional[OutputError]:
        return self._error


__all__ = ["RemoteStream", "H264_STREAM", "Buffer", "StreamSink", "QueueSink", "FileSink"]
