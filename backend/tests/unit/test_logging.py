"""Unit tests for structured logging and operation logging"""

import asyncio
import json
import logging

import pytest

from adms.observability.logging_config import JSONFormatter, OperationIDFilter, configure_logging
from adms.observability.operation_id import get_operation_id, operation_id_var, reset_operation_id, set_operation_id
from adms.observability.operations import logged_operation

OPERATIONS_LOGGER = "adms.observability.operations"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(message="hello", **extra):
    record = logging.LogRecord("adms.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """JSON log lines"""

    def test_formats_base_fields_and_extra(self):
        record = _record(document_id="abc", duration_ms=1.5)
        OperationIDFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "adms.test"
        assert data["message"] == "hello"
        assert data["operation_id"] == "no-operation-id"
        assert data["document_id"] == "abc"
        assert data["duration_ms"] == 1.5

    def test_operation_id_from_context(self):
        token = set_operation_id("op-123")
        try:
            record = _record()
            OperationIDFilter().filter(record)
        finally:
            reset_operation_id(token)

        assert json.loads(JSONFormatter().format(record))["operation_id"] == "op-123"
        assert get_operation_id() == "no-operation-id"

    def test_configure_logging_installs_single_handler(self, restore_root_logger):
        configure_logging(level="DEBUG", json_format=True)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)


class _Service:
    @logged_operation("do_work")
    async def do_work(self, document_id, result):
        return result

    @logged_operation("explode")
    async def explode(self, document_id):
        raise RuntimeError("boom")

    @logged_operation("outer")
    async def outer(self):
        outer_id = operation_id_var.get()
        inner_id = await self.inner()
        return outer_id, inner_id

    @logged_operation("inner")
    async def inner(self):
        return operation_id_var.get()


class TestLoggedOperation:
    """Operation outcome logging"""

    @pytest.mark.asyncio
    async def test_success_logged_with_ids_and_duration(self, caplog):
        caplog.set_level(logging.INFO, logger=OPERATIONS_LOGGER)

        assert await _Service().do_work("doc-1", True) is True

        record = next(r for r in caplog.records if r.name == OPERATIONS_LOGGER)
        assert record.levelno == logging.INFO
        assert record.operation == "do_work"
        assert record.document_id == "doc-1"
        assert record.duration_ms >= 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [None, False])
    async def test_expected_failure_logged_as_warning(self, caplog, result):
        caplog.set_level(logging.INFO, logger=OPERATIONS_LOGGER)

        assert await _Service().do_work("doc-1", result) is result

        record = next(r for r in caplog.records if r.name == OPERATIONS_LOGGER)
        assert record.levelno == logging.WARNING
        assert "failed" in record.getMessage()

    @pytest.mark.asyncio
    async def test_exception_logged_and_reraised(self, caplog):
        caplog.set_level(logging.INFO, logger=OPERATIONS_LOGGER)

        with pytest.raises(RuntimeError):
            await _Service().explode("doc-1")

        record = next(r for r in caplog.records if r.name == OPERATIONS_LOGGER)
        assert record.levelno == logging.ERROR
        assert record.error_type == "RuntimeError"

    @pytest.mark.asyncio
    async def test_nested_operations_share_operation_id(self):
        outer_id, inner_id = await _Service().outer()

        assert outer_id is not None
        assert outer_id == inner_id
        assert operation_id_var.get() is None

    @pytest.mark.asyncio
    async def test_cancellation_is_reraised(self):
        class _Slow:
            @logged_operation("slow")
            async def slow(self):
                await asyncio.sleep(10)

        task = asyncio.create_task(_Slow().slow())
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
