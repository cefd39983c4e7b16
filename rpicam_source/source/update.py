from dataclasses import replace

from rpicam_source.capture.command import build_command
from rpicam_source.errors import MidStreamFailure, RetriesExhausted

from .effects import Effect, PushBuffer, RaiseFatal, RespawnProcess, SendEndOfStream
from .events import DataReceived, Event, ProcessExited, ProcessSpawned, SpawnFailed
from .sink import Buffer
from .state import CaptureSession, SourceStatus, SupervisorConfig


def update(
    session: CaptureSession,
    event: Event,
    config: SupervisorConfig,
) -> tuple[CaptureSession, list[Effect]]:
    """Advance the capture session by one event.

    A nonzero exit before any data is an open failure and is retried up to
    ``config.max_retries`` times. Once data has flowed the timestamps are
    anchored to that process, so a nonzero exit is fatal instead.
    """
    if session.is_terminal:
        return session, []

    match event:
        case ProcessSpawned(handle_id):
            return replace(session, handle_id=handle_id), []

        case SpawnFailed(error):
            return replace(session, status=SourceStatus.FAILED, handle_id=None), [RaiseFatal(error)]

        case DataReceived(handle_id, data, arrival_ns):
            if handle_id != session.handle_id:
                return session, []
            if session.anchor_ns is None:
                session = session.with_anchor(arrival_ns)
            buffer = Buffer(payload=data, pts=arrival_ns - session.anchor_ns)
            return (
                replace(session, camera_open=True, status=SourceStatus.STREAMING),
                [PushBuffer(buffer)],
            )

        case ProcessExited(handle_id, exit_code):
            if handle_id != session.handle_id:
                return session, []

            if exit_code == 0:
                return replace(session, status=SourceStatus.CLEAN), [SendEndOfStream()]

            if session.camera_open:
                error = MidStreamFailure(session.options.app_name, exit_code)
                return replace(session, status=SourceStatus.FAILED), [RaiseFatal(error)]

            if session.retries < config.max_retries:
                attempt = session.retries + 1
                return (
                    replace(session, retries=attempt, handle_id=None),
                    [RespawnProcess(
                        argv=tuple(build_command(session.options)),
                        backoff=config.retry_backoff,
                        exit_code=exit_code,
                        attempt=attempt,
                    )],
                )

            error = RetriesExhausted(exit_code, session.retries)
            return replace(session, status=SourceStatus.FAILED), [RaiseFatal(error)]

    return session, []
