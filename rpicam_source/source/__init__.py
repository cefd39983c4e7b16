from .state import (
    SourceStatus, TERMINAL_STATUSES,
    CaptureSession, SupervisorConfig,
)
from .events import Event, ProcessSpawned, SpawnFailed, DataReceived, ProcessExited
from .effects import Effect, PushBuffer, SendEndOfStream, RespawnProcess, RaiseFatal
from .sink import RemoteStream, H264_STREAM, Buffer, StreamSink, QueueSink, FileSink
from .update import update
from .effect_executor import EffectExecutor
from .supervisor import CaptureSupervisor

__all__ = [
    "SourceStatus", "TERMINAL_STATUSES",
    "CaptureSession", "SupervisorConfig",
    "Event", "ProcessSpawned", "SpawnFailed", "DataReceived", "ProcessExited",
    "Effect", "PushBuffer", "SendEndOfStream", "RespawnProcess", "RaiseFatal",
    "RemoteStream", "H264_STREAM", "Buffer", "StreamSink", "QueueSink", "FileSink",
    "update",
    "EffectExecutor",
    "CaptureSupervisor",
]
