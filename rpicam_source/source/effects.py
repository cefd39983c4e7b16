from dataclasses import dataclass
from typing import Union

from rpicam_source.errors import CaptureError

from .sink import Buffer


@dataclass(frozen=True)
class PushBuffer:
    buffer: Buffer


@dataclass(frozen=True)
class SendEndOfStream:
    pass


@dataclass(frozen=True)
class RespawnProcess:
    argv: tuple[str, ...]
    backoff: float
    exit_code: int
    attempt: int


@dataclass(frozen=True)
class RaiseFatal:
    error: CaptureError


Effect = Union[PushBuffer, SendEndOfStream, RespawnProcess, RaiseFatal]
