import shlex
from typing import Sequence, TypeVar

from .options import CAMERA_DEFAULT, INFINITY, CaptureOptions

T = TypeVar("T")

DEFAULT_FRAMERATE = (-1, 1)
DEFAULT_DIMENSION = 0
DEFAULT_BITRATE = 0


def resolve_default(value, default: T) -> T:
    return default if value is CAMERA_DEFAULT else value


def timeout_ms(options: CaptureOptions) -> int:
    if options.timeout is INFINITY:
        return 0
    return round(options.timeout * 1000)


def build_command(options: CaptureOptions) -> list[str]:
    """Return the argv that launches the camera program for ``options``.

    Camera-default placeholders become the values the program treats as
    "pick your own": framerate -1, zero for sizes and bitrate. Output is
    always written to stdout.
    """
    num, denom = resolve_default(options.framerate, DEFAULT_FRAMERATE)
    width = resolve_default(options.width, DEFAULT_DIMENSION)
    height = resolve_default(options.height, DEFAULT_DIMENSION)
    bitrate = resolve_default(options.bitrate, DEFAULT_BITRATE)

    return [
        options.app_name,
        "-t", str(timeout_ms(options)),
        "--framerate", str(num / denom),
        "--width", str(width),
        "--height", str(height),
        "--bitrate", str(bitrate),
        "--libav_audio", str(int(options.libav_audio)),
        "-o", "-",
    ]


def format_command(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(arg) for arg in argv)


__all__ = ["build_command", "format_command", "resolve_default", "timeout_ms"]
