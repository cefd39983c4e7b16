import asyncio
import logging

import pytest

from rpicam_source.core.asyncio_utils import create_logged_task
from rpicam_source.core.logging_utils import StructuredLogger, ensure_structured_logger, get_module_logger


class TestStructuredLogger:
    def test_namespaced_under_package(self):
        logger = get_module_logger("CaptureSupervisor")

        assert logger.name == "rpicam_source.CaptureSupervisor"
        assert logger.component == "CaptureSupervisor"

    def test_messages_prefixed_with_component(self, caplog):
        logger = get_module_logger("Sink")

        with caplog.at_level(logging.INFO, logger="rpicam_source"):
            logger.info("Wrote %d bytes", 42)

        assert "[Sink] Wrote 42 bytes" in caplog.messages

    def test_child_component(self):
        child = get_module_logger("CaptureSupervisor").getChild("process")

        assert child.component == "CaptureSupervisor.process"
        assert child.name == "rpicam_source.CaptureSupervisor.process"

    def test_ensure_wraps_plain_logger(self):
        wrapped = ensure_structured_logger(logging.getLogger("somewhere"), component="X")

        assert isinstance(wrapped, StructuredLogger)
        assert wrapped.component == "X"

    def test_ensure_falls_back_to_module_logger(self):
        assert ensure_structured_logger(None, fallback_name="Fallback").name == "rpicam_source.Fallback"


class TestCreateLoggedTask:
    @pytest.mark.asyncio
    async def test_failure_is_logged(self, caplog):
        async def boom():
            raise ValueError("reader broke")

        with caplog.at_level(logging.ERROR, logger="rpicam_source"):
            task = create_logged_task(boom(), logger=get_module_logger("Test"), context="reader")
            await asyncio.gather(task, return_exceptions=True)
            await asyncio.sleep(0)

        assert any("Unhandled exception in reader" in m for m in caplog.messages)

    @pytest.mark.asyncio
    async def test_pending_set_tracks_task(self):
        pending: set = set()

        task = create_logged_task(asyncio.sleep(0), pending=pending)
        assert task in pending

        await task
        await asyncio.sleep(0)
        assert task not in pending
