"""Errors raised by the capture source.

Everything derives from ``CaptureError`` so a host can treat any of them as
an element failure. ``OpenFailure`` is recoverable and only escapes the
supervisor once the retry budget is spent, as ``RetriesExhausted``.
"""

from typing import Optional


class CaptureError(RuntimeError):
    pass


class SpawnFailure(CaptureError):
    def __init__(self, app_name: str, reason: Optional[BaseException] = None):
        self.app_name = app_name
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Failed to launch {app_name}{detail}")


class MidStreamFailure(CaptureError):
    def __init__(self, app_name: str, exit_code: int):
        self.app_name = app_name
        self.exit_code = exit_code
        super().__init__(f"{app_name} error, exit status: {exit_code}")


class OpenFailure(CaptureError):
    def __init__(self, exit_code: int, message: Optional[str] = None):
        self.exit_code = exit_code
        super().__init__(message or f"Camera failed to open, exit status: {exit_code}")


class RetriesExhausted(OpenFailure):
    def __init__(self, exit_code: int, retries: int):
        self.retries = retries
        super().__init__(
            exit_code,
            f"Max retries exceeded, camera failed to open, exit status: {exit_code} (retries: {retries})",
        )


class OutputError(CaptureError):
    """The sink could not write the stream to its destination."""

    def __init__(self, destination: str, reason: BaseException):
        self.destination = destination
        self.reason = reason
        super().__init__(f"Failed to write stream to {destination}: {reason}")


__all__ = [
    "CaptureError",
    "SpawnFailure",
    "MidStreamFailure",
    "OpenFailure",
    "RetriesExhausted",
    "OutputError",
]
