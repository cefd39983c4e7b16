from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional

from rpicam_source.capture.options import CaptureOptions

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BACKOFF = 0.05  # seconds
DEFAULT_TERMINATE_TIMEOUT = 2.0  # seconds


class SourceStatus(Enum):
    STARTING = auto()
    STREAMING = auto()
    CLEAN = auto()
    FAILED = auto()


TERMINAL_STATUSES = frozenset({SourceStatus.CLEAN, SourceStatus.FAILED})


@dataclass(frozen=True)
class SupervisorConfig:
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_backoff: float = DEFAULT_RETRY_BACKOFF
    terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.retry_backoff < 0:
            raise ValueError("retry_backoff must be non-negative")


@dataclass(frozen=True)
class CaptureSession:
    options: CaptureOptions
    status: SourceStatus = SourceStatus.STARTING
    handle_id: Optional[int] = None
    anchor_ns: Optional[int] = None
    camera_open: bool = False
    retries: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def with_anchor(self, anchor_ns: int) -> "CaptureSession":
        if self.anchor_ns is not None:
            raise RuntimeError(f"Timestamp anchor already set to {self.anchor_ns}")
        return replace(self, anchor_ns=anchor_ns)
