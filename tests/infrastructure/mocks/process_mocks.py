"""Scripted stand-ins for the camera program and its collaborators.

A ``ScriptedHandle`` replays a fixed list of events: ``bytes`` items become
stdout chunks and an ``int`` item becomes the exit status. When the script
runs out without an exit status the handle behaves like a camera that is
still streaming and blocks until terminated.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import List, Optional, Sequence, Union

from rpicam_source.capture.process_handle import DataEvent, ExitEvent, ProcessEvent
from rpicam_source.source.sink import Buffer, RemoteStream

ScriptItem = Union[bytes, int]

_ids = itertools.count(1000)


class ScriptedHandle:
    def __init__(self, script: Sequence[ScriptItem]):
        self._handle_id = next(_ids)
        self._queue: asyncio.Queue[ProcessEvent] = asyncio.Queue()
        self.terminated = False
        for item in script:
            self.feed(item)

    @property
    def handle_id(self) -> int:
        return self._handle_id

    def feed(self, item: ScriptItem) -> None:
        if isinstance(item, bytes):
            self._queue.put_nowait(DataEvent(self._handle_id, item))
        else:
            self._queue.put_nowait(ExitEvent(self._handle_id, item))

    async def next_event(self) -> ProcessEvent:
        return await self._queue.get()

    async def terminate(self) -> None:
        self.terminated = True


class ScriptedSpawner:
    """Hands out one scripted handle per spawn, in order.

    A script entry that is an exception instance is raised instead, which
    simulates the OS refusing to start the program.
    """

    def __init__(self, *scripts: Union[Sequence[ScriptItem], BaseException]):
        self._scripts = list(scripts)
        self.calls: List[tuple[str, ...]] = []
        self.handles: List[ScriptedHandle] = []

    async def __call__(self, argv: Sequence[str]) -> ScriptedHandle:
        self.calls.append(tuple(argv))
        if not self._scripts:
            raise AssertionError(f"Unexpected spawn #{len(self.calls)}: {argv}")
        script = self._scripts.pop(0)
        if isinstance(script, BaseException):
            raise script
        handle = ScriptedHandle(script)
        self.handles.append(handle)
        return handle


class FakeClock:
    """Monotonic nanosecond clock advancing by ``step`` on every read."""

    def __init__(self, start: int = 1_000_000, step: int = 33_000_000):
        self.now = start
        self.step = step
        self.reads = 0

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        self.reads += 1
        return value


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class RecordingSink:
    """StreamSink that keeps every call in order."""

    def __init__(self):
        self.calls: List[tuple] = []

    def declare_format(self, stream_format: RemoteStream) -> None:
        self.calls.append(("format", stream_format))

    def push(self, buffer: Buffer) -> None:
        self.calls.append(("push", buffer))

    def end_of_stream(self) -> None:
        self.calls.append(("eos",))

    @property
    def buffers(self) -> List[Buffer]:
        return [call[1] for call in self.calls if call[0] == "push"]

    @property
    def eos_count(self) -> int:
        return sum(1 for call in self.calls if call[0] == "eos")

    @property
    def stream_format(self) -> Optional[RemoteStream]:
        for call in self.calls:
            if call[0] == "format":
                return call[1]
        return None
