"""Command line entry point: run the camera source into a file or stdout."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import math
import signal
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

from .capture.options import INFINITY, CaptureOptions, Timeout, options_from_config
from .core.asyncio_utils import create_logged_task
from .core.config_loader import ConfigLoader
from .core.logging_config import LOG_LEVELS, configure_logging
from .core.logging_utils import get_module_logger
from .errors import CaptureError
from .source.sink import FileSink
from .source.state import SourceStatus, SupervisorConfig
from .source.supervisor import CaptureSupervisor

logger = get_module_logger("CLI")

EXIT_OK = 0
EXIT_CAPTURE_ERROR = 1
EXIT_INTERRUPTED = 130

CONFIG_DEFAULTS: dict[str, Any] = {
    "timeout": "infinity",
    "framerate": "camera_default",
    "width": "camera_default",
    "height": "camera_default",
    "bitrate": "camera_default",
    "libav_audio": False,
    "camera_open_delay": CaptureOptions.camera_open_delay,
    "app_name": CaptureOptions.app_name,
    "max_retries": SupervisorConfig.max_retries,
    "retry_backoff": SupervisorConfig.retry_backoff,
}


def _positive_number(value: str, typ: type, name: str):
    try:
        parsed = typ(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Value must be a {name}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("Value must be positive")
    return parsed


def positive_int(value: str) -> int:
    return _positive_number(value, int, "integer")


def non_negative_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Value must be a number") from exc
    if not math.isfinite(parsed):
        raise argparse.ArgumentTypeError("Value must be finite")
    if parsed < 0:
        raise argparse.ArgumentTypeError("Value must not be negative")
    return parsed


def timeout_seconds(value: str) -> Timeout:
    if value.strip().lower() in ("inf", INFINITY.value):
        return INFINITY
    return non_negative_float(value)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", type=Path, default=None)
    pre_args, _ = pre_parser.parse_known_args(argv)

    config = dict(CONFIG_DEFAULTS)
    if pre_args.config is not None:
        config = ConfigLoader.load(pre_args.config, CONFIG_DEFAULTS)

    parser = argparse.ArgumentParser(
        prog="rpicam-source",
        description="Stream H.264 video from a Raspberry Pi camera via libcamera-vid.",
        parents=[pre_parser],
    )
    parser.add_argument("--timeout", type=timeout_seconds, default=None,
                        help="Capture duration in seconds, or 'inf' to run until stopped (the default)")
    parser.add_argument("--framerate", default=None,
                        help="Frame rate as N or N/D (default: camera default)")
    parser.add_argument("--width", type=positive_int, default=None, help="Output width in pixels")
    parser.add_argument("--height", type=positive_int, default=None, help="Output height in pixels")
    parser.add_argument("--bitrate", type=positive_int, default=None, help="H.264 bitrate in bits/s")
    parser.add_argument("--libav-audio", action="store_true", default=None,
                        help="Encode audio together with the video stream")
    parser.add_argument("--camera-open-delay", type=non_negative_float, default=None,
                        help="Seconds to wait before opening the camera")
    parser.add_argument("--app", dest="app_name", default=None, help="Camera program to launch")
    parser.add_argument("--max-retries", type=int, default=None,
                        help="Attempts to reopen a camera that fails before streaming")
    parser.add_argument("--retry-backoff", type=non_negative_float, default=None,
                        help="Seconds to wait between open attempts")
    parser.add_argument("--output", "-o", default="-",
                        help="Output file for the H.264 stream, '-' for stdout")
    parser.add_argument("--log-level", choices=sorted(LOG_LEVELS), default="info",
                        help="Logging verbosity")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="Optional path to write logs to")

    args = parser.parse_args(argv)

    for key in CONFIG_DEFAULTS:
        if getattr(args, key, None) is None:
            setattr(args, key, config.get(key, CONFIG_DEFAULTS[key]))

    return args


def build_options(args: argparse.Namespace) -> CaptureOptions:
    keys = asdict(CaptureOptions()).keys()
    return options_from_config({key: getattr(args, key) for key in keys})


def build_config(args: argparse.Namespace) -> SupervisorConfig:
    return SupervisorConfig(
        max_retries=int(args.max_retries),
        retry_backoff=float(args.retry_backoff),
    )


def install_signal_handlers(supervisor: CaptureSupervisor, loop: asyncio.AbstractEventLoop) -> None:
    """Register SIGINT/SIGTERM handlers that ask the supervisor to shut down."""

    def signal_handler() -> None:
        logger.info("Shutdown requested")
        create_logged_task(supervisor.stop(), logger=logger, context="signal-shutdown")

    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, signal_handler)


async def run(args: argparse.Namespace) -> int:
    options = build_options(args)
    sink = FileSink(None if args.output == "-" else Path(args.output))
    supervisor = CaptureSupervisor(options, sink, config=build_config(args))
    install_signal_handlers(supervisor, asyncio.get_running_loop())

    sink.start()
    status = SourceStatus.STARTING
    try:
        try:
            status = await asyncio.create_task(supervisor.run(), name="capture-supervisor")
        except asyncio.CancelledError:
            # Only a shutdown request ends the run quietly.
            if not supervisor.stopping:
                raise
        finally:
            await supervisor.stop()
            await sink.close()
    except CaptureError as e:
        logger.error("Capture failed: %s", e)
        return EXIT_CAPTURE_ERROR

    if status is SourceStatus.CLEAN:
        return EXIT_OK
    return EXIT_INTERRUPTED


def main(argv: Optional[list[str]] = None) -> int:
    try:
        args = parse_args(argv)
        options = build_options(args)
        build_config(args)
    except ValueError as e:
        print(f"rpicam-source: {e}", file=sys.stderr)
        return 2

    configure_logging(args.log_level, log_file=args.log_file)
    logger.info("Starting capture with %s", options)

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


__all__ = ["main", "parse_args", "build_options", "build_config", "run"]
