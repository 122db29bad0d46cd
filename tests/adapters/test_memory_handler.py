from __future__ import annotations

from datetime import datetime, timezone

import pytest

from lib_log_dispatch.adapters.memory import MemoryHandler
from lib_log_dispatch.domain.levels import INFO
from lib_log_dispatch.domain.records import LogRecord


def build_record(index: int) -> LogRecord:
    return LogRecord(INFO, f"message-{index}", datetime(2025, 9, 23, 12, index, tzinfo=timezone.utc), "tests")


def test_memory_handler_keeps_delivery_order() -> None:
    handler = MemoryHandler()
    for index in range(3):
        handler.handle(build_record(index))

    assert [record.message for record in handler] == ["message-0", "message-1", "message-2"]
    assert len(handler) == 3


def test_records_property_returns_a_snapshot() -> None:
    handler = MemoryHandler()
    handler.handle(build_record(0))

    snapshot = handler.records
    handler.handle(build_record(1))

    assert len(snapshot) == 1
    assert len(handler.records) == 2


def test_bounded_handler_keeps_newest_records() -> None:
    handler = MemoryHandler(max_records=2)
    for index in range(4):
        handler.handle(build_record(index))

    assert handler.max_records == 2
    assert [record.message for record in handler.records] == ["message-2", "message-3"]


def test_clear_empties_the_handler() -> None:
    handler = MemoryHandler()
    handler.handle(build_record(0))
    handler.clear()

    assert len(handler) == 0


def test_max_records_must_be_positive() -> None:
    with pytest.raises(ValueError, match="positive"):
        MemoryHandler(max_records=0)
