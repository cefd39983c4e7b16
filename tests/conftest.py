"""Shared pytest configuration and fixtures for the rpicam_source test suite."""

import os
import stat
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    config.addinivalue_line("markers", "hardware: mark test as requiring a Raspberry Pi camera")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_addoption(parser):
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require physical hardware",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def fake_camera_app(tmp_path: Path):
    """Factory writing an executable that stands in for libcamera-vid.

    The generated program ignores its arguments, writes ``chunks`` to stdout
    with a short pause between them, and exits with ``exit_code``. With
    ``forever`` it repeats the chunks until it is terminated.
    """

    def _make(
        chunks=(b"\x00\x00\x00\x01frame",),
        exit_code: int = 0,
        name: str = "fake-libcamera-vid",
        forever: bool = False,
    ) -> str:
        path = tmp_path / name
        path.write_text(
            f"#!{sys.executable}\n"
            "import sys, time\n"
            "while True:\n"
            f"    for chunk in {list(chunks)!r}:\n"
            "        sys.stdout.buffer.write(chunk)\n"
            "        sys.stdout.buffer.flush()\n"
            "        time.sleep(0.01)\n"
            f"    if not {forever!r}:\n"
            "        break\n"
            f"sys.exit({exit_code})\n"
        )
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    if os.name == "nt":
        pytest.skip("fake camera program relies on a shebang line")
    return _make
