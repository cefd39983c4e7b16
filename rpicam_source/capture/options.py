import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Union

DEFAULT_APP_NAME = "libcamera-vid"
DEFAULT_CAMERA_OPEN_DELAY = 0.05  # seconds


class Sentinel(Enum):
    CAMERA_DEFAULT = "camera_default"
    INFINITY = "infinity"

    def __repr__(self) -> str:
        return self.name


CAMERA_DEFAULT = Sentinel.CAMERA_DEFAULT
INFINITY = Sentinel.INFINITY

Framerate = Union[tuple[int, int], Sentinel]
Defaultable = Union[int, Sentinel]
Timeout = Union[float, Sentinel]


@dataclass(frozen=True)
class CaptureOptions:
    """Settings used to launch the camera program.

    ``timeout`` and ``camera_open_delay`` are in seconds. Any field may be
    left at ``CAMERA_DEFAULT`` to let the camera program choose.
    """

    timeout: Timeout = INFINITY
    framerate: Framerate = CAMERA_DEFAULT
    width: Defaultable = CAMERA_DEFAULT
    height: Defaultable = CAMERA_DEFAULT
    bitrate: Defaultable = CAMERA_DEFAULT
    libav_audio: bool = False
    camera_open_delay: float = DEFAULT_CAMERA_OPEN_DELAY
    app_name: str = DEFAULT_APP_NAME

    def __post_init__(self) -> None:
        if self.timeout is not INFINITY:
            if isinstance(self.timeout, Sentinel) or not math.isfinite(self.timeout) or self.timeout < 0:
                raise ValueError(f"timeout must be finite and non-negative or INFINITY, got {self.timeout!r}")

        if self.framerate is not CAMERA_DEFAULT:
            if isinstance(self.framerate, Sentinel) or len(self.framerate) != 2:
                raise ValueError(f"framerate must be a (num, denom) pair, got {self.framerate!r}")
            num, denom = self.framerate
            if num <= 0 or denom <= 0:
                raise ValueError(f"framerate terms must be positive, got {num}/{denom}")

        for name in ("width", "height", "bitrate"):
            value = getattr(self, name)
            if value is CAMERA_DEFAULT:
                continue
            if isinstance(value, (Sentinel, bool)) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer or CAMERA_DEFAULT, got {value!r}")

        if not math.isfinite(self.camera_open_delay) or self.camera_open_delay < 0:
            raise ValueError(f"camera_open_delay must be finite and non-negative, got {self.camera_open_delay!r}")

        if not self.app_name:
            raise ValueError("app_name must not be empty")


def parse_framerate(value: Any) -> Framerate:
    """Accept ``30``, ``"30"``, ``"30/1"``, ``(30000, 1001)`` or ``camera_default``."""
    if value is CAMERA_DEFAULT or value is None:
        return CAMERA_DEFAULT
    if isinstance(value, tuple):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return (value, 1)

    text = str(value).strip().lower()
    if text in ("", CAMERA_DEFAULT.value):
        return CAMERA_DEFAULT
    try:
        if "/" in text:
            num, denom = text.split("/", 1)
            return (int(num), int(denom))
        return (int(text), 1)
    except ValueError as exc:
        raise ValueError(f"Invalid framerate '{value}'") from exc


def _parse_defaultable(name: str, value: Any) -> Defaultable:
    if value is None or value is CAMERA_DEFAULT:
        return CAMERA_DEFAULT
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("", CAMERA_DEFAULT.value):
            return CAMERA_DEFAULT
        try:
            return int(text)
        except ValueError as exc:
            raise ValueError(f"Invalid {name} '{value}'") from exc
    return int(value)


def _parse_timeout(value: Any) -> Timeout:
    if value is None or value is INFINITY:
        return INFINITY
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("", INFINITY.value):
            return INFINITY
        try:
            seconds = float(text)
        except ValueError as exc:
            raise ValueError(f"Invalid timeout '{value}'") from exc
    else:
        seconds = float(value)
    # A float infinity means "run until stopped"; NaN is left for validation.
    if seconds == math.inf:
        return INFINITY
    return seconds


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "yes", "on", "1")


def options_from_config(config: dict[str, Any]) -> CaptureOptions:
    """Build ``CaptureOptions`` from a parsed config dict, ignoring unknown keys."""
    known = {f.name for f in fields(CaptureOptions)}
    kwargs: dict[str, Any] = {}

    for key, value in config.items():
        if key not in known:
            continue
        if key == "timeout":
            kwargs[key] = _parse_timeout(value)
        elif key == "framerate":
            kwargs[key] = parse_framerate(value)
        elif key in ("width", "height", "bitrate"):
            kwargs[key] = _parse_defaultable(key, value)
        elif key == "libav_audio":
            kwargs[key] = _parse_bool(value)
        elif key == "camera_open_delay":
            kwargs[key] = float(value)
        else:
            kwargs[key] = str(value)

    return CaptureOptions(**kwargs)
