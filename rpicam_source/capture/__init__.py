from .options import (
    CAMERA_DEFAULT, INFINITY, Sentinel,
    CaptureOptions, options_from_config, parse_framerate,
)
from .command import build_command, format_command
from .process_handle import (
    DataEvent, ExitEvent, ProcessEvent,
    ProcessHandle, SubprocessHandle, spawn,
)

__all__ = [
    "CAMERA_DEFAULT", "INFINITY", "Sentinel",
    "CaptureOptions", "options_from_config", "parse_framerate",
    "build_command", "format_command",
    "DataEvent", "ExitEvent", "ProcessEvent",
    "ProcessHandle", "SubprocessHandle", "spawn",
]
