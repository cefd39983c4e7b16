from typing import Awaitable, Callable, Sequence

from rpicam_source.core.logging_utils import LoggerLike, ensure_structured_logger

from .effects import Effect, PushBuffer, RaiseFatal, RespawnProcess, SendEndOfStream
from .sink import StreamSink


class EffectExecutor:
    def __init__(
        self,
        sink: StreamSink,
        respawn: Callable[[Sequence[str]], Awaitable[object]],
        sleep: Callable[[float], Awaitable[None]],
        logger: LoggerLike = None,
    ):
        self._sink = sink
        self._respawn = respawn
        self._sleep = sleep
        self._logger = ensure_structured_logger(logger, fallback_name="EffectExecutor")

    async def __call__(self, effect: Effect) -> None:
        match effect:
            case PushBuffer(buffer):
                self._sink.push(buffer)

            case SendEndOfStream():
                self._logger.info("Camera program exited cleanly, sending end of stream")
                self._sink.end_of_stream()

            case RespawnProcess(argv, backoff, exit_code, attempt):
                self._logger.warning(
                    "Camera failed to open with exit status %d, retrying (attempt %d)",
                    exit_code, attempt,
                )
                await self._sleep(backoff)
                await self._respawn(argv)

            case RaiseFatal(error):
                self._logger.error("%s", error)
                raise error
