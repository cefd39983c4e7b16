"""Raspberry Pi camera source.

Launches ``libcamera-vid``, supervises it, and pushes its H.264 output as
timestamped buffers into a sink.
"""

from .capture import CAMERA_DEFAULT, INFINITY, CaptureOptions, build_command
from .errors import CaptureError, SpawnFailure, MidStreamFailure, OpenFailure, RetriesExhausted, OutputError
from .source import (
    Buffer, CaptureSupervisor, FileSink, QueueSink, RemoteStream,
    SourceStatus, StreamSink, SupervisorConfig,
)

__version__ = "0.1.0"

__all__ = [
    "CAMERA_DEFAULT",
    "INFINITY",
    "CaptureOptions",
    "build_command",
    "CaptureError",
    "SpawnFailure",
    "MidStreamFailure",
    "OpenFailure",
    "RetriesExhausted",
    "OutputError",
    "Buffer",
    "CaptureSupervisor",
    "FileSink",
    "QueueSink",
    "RemoteStream",
    "SourceStatus",
    "StreamSink",
    "SupervisorConfig",
    "__version__",
]
