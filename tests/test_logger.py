from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future
from datetime import datetime, timezone

import pytest

from lib_log_dispatch import (
    ALL,
    DEBUG,
    ERROR,
    FATAL,
    INFO,
    OFF,
    WARNING,
    ChannelState,
    InvalidArgument,
    Level,
    LogRecord,
    Logger,
    MemoryHandler,
)
from lib_log_dispatch import logger as logger_module


class _FixedClock:
    def __init__(self) -> None:
        self.calls = 0

    def now(self) -> datetime:
        self.calls += 1
        return datetime(2025, 9, 23, 12, 0, tzinfo=timezone.utc)


def messages(handler: MemoryHandler) -> list[str]:
    return [record.message for record in handler.records]


def test_loggers_instantiated_directly_are_distinct() -> None:
    logger1 = Logger()
    logger2 = Logger()
    logger3 = Logger(name="logger")
    logger4 = Logger(name="logger")

    assert logger1 is not logger2
    assert logger3 is not logger4


def test_logger_defaults() -> None:
    logger = Logger()

    assert logger.level == INFO
    assert logger.name == ""
    assert logger.is_async is False
    assert logger.is_closed is False
    assert logger.state is ChannelState.OPEN


def test_level_is_set_properly() -> None:
    logger = Logger()

    logger.level = FATAL
    assert logger.level == FATAL

    logger.level = DEBUG
    assert logger.level == DEBUG

    logger.level = ALL
    assert logger.level == ALL


def test_level_rejects_none_and_keeps_previous_value() -> None:
    logger = Logger()
    logger.level = FATAL

    with pytest.raises(InvalidArgument):
        logger.level = None  # type: ignore[assignment]

    assert logger.level == FATAL


def test_level_accepts_names() -> None:
    logger = Logger(level="warning")

    assert logger.level == WARNING
    with pytest.raises(InvalidArgument, match="Unknown log level"):
        logger.level = "verbose"
    assert logger.level == WARNING


def test_constructor_rejects_missing_level() -> None:
    with pytest.raises(InvalidArgument):
        Logger(level=None)  # type: ignore[arg-type]


def test_invalid_argument_is_a_value_error() -> None:
    assert issubclass(InvalidArgument, ValueError)


def test_name_is_reported() -> None:
    assert Logger(name="logger1").name == "logger1"


def test_add_handler_only_delivers_later_records() -> None:
    logger = Logger()
    handler1 = MemoryHandler()
    handler2 = MemoryHandler()

    logger.add_handler(handler1)
    logger.info("1")
    logger.fatal("2", die=False)
    logger.add_handler(handler2)
    logger.warning("3")
    logger.error("4")

    assert len(handler1) == 4
    assert len(handler2) == 2
    assert messages(handler2) == ["3", "4"]
    assert logger.handler_count == 2


def test_log_fires_records_in_call_order() -> None:
    logger = Logger(name="logger1")
    handler = MemoryHandler()
    logger.level = ALL
    logger.add_handler(handler)

    logger.log(FATAL, "1")
    logger.log(INFO, "2")
    logger.log(INFO, "3")
    assert messages(handler) == ["1", "2", "3"]

    logger.log(DEBUG, "4")
    logger.log(ERROR, "5")
    assert messages(handler) == ["1", "2", "3", "4", "5"]


@pytest.mark.parametrize("sentinel", [ALL, OFF])
def test_log_rejects_sentinel_levels(sentinel: Level) -> None:
    logger = Logger(level=ALL)
    handler = MemoryHandler()
    logger.add_handler(handler)

    with pytest.raises(InvalidArgument):
        logger.log(sentinel, "x")

    assert len(handler) == 0


def test_log_rejects_non_levels() -> None:
    logger = Logger()

    with pytest.raises(InvalidArgument):
        logger.log("info", "x")  # type: ignore[arg-type]


def test_log_emits_records_with_custom_severity() -> None:
    logger = Logger(level=ALL)
    handler = MemoryHandler()
    logger.add_handler(handler)
    custom = Level("custom", 0xFF)

    logger.log(custom, "1")

    assert len(handler) == 1
    assert handler.records[0].level == custom
    assert handler.records[0].message == "1"


def test_log_throttles_records_below_threshold() -> None:
    logger = Logger()
    handler = MemoryHandler()
    logger.level = INFO
    logger.add_handler(handler)

    logger.log(INFO, "1")
    logger.log(WARNING, "2")
    logger.log(ERROR, "3")
    logger.log(FATAL, "4")
    assert len(handler) == 4

    unloggable = Level("unloggable", INFO.value - 5)
    loggable = Level("loggable", INFO.value + 5)
    logger.log(DEBUG, "5")
    logger.log(unloggable, "6")
    logger.log(loggable, "7")

    assert len(handler) == 5
    assert handler.records[4].level == loggable


def test_throttled_calls_build_no_record() -> None:
    clock = _FixedClock()
    logger = Logger(level=ERROR, clock=clock)

    logger.info("dropped")
    assert clock.calls == 0

    logger.error("kept")
    assert clock.calls == 1


def test_off_threshold_silences_everything() -> None:
    logger = Logger(level=OFF)
    handler = MemoryHandler()
    logger.add_handler(handler)

    logger.fatal("nothing", die=False)
    logger.log(Level("huge", 10**9), "nothing")

    assert len(handler) == 0


def test_shortcut_methods_use_matching_levels() -> None:
    logger = Logger(level=ALL)
    handler = MemoryHandler()
    logger.add_handler(handler)

    logger.debug("debug")
    logger.info("info")
    logger.warning("warning")
    logger.error("error")
    logger.fatal("fatal", die=False)

    assert [record.level for record in handler.records] == [DEBUG, INFO, WARNING, ERROR, FATAL]
    assert messages(handler) == ["debug", "info", "warning", "error", "fatal"]


def test_records_carry_logger_metadata() -> None:
    logger = Logger("svc.worker", clock=_FixedClock())
    handler = MemoryHandler()
    logger.add_handler(handler)

    logger.info("started")

    record = handler.records[0]
    assert isinstance(record, LogRecord)
    assert record.logger_name == "svc.worker"
    assert record.timestamp == datetime(2025, 9, 23, 12, 0, tzinfo=timezone.utc)
    assert dict(record.fields) == {}


def test_plain_callables_can_subscribe() -> None:
    logger = Logger()
    received: list[LogRecord] = []
    logger.add_handler(received.append)

    logger.info("callable")

    assert [record.message for record in received] == ["callable"]


def test_failing_handler_does_not_break_logger() -> None:
    logger = Logger()
    handler = MemoryHandler()

    def explode(record: LogRecord) -> None:
        raise RuntimeError("handler down")

    logger.add_handler(explode)
    logger.add_handler(handler)

    logger.info("survives")
    logger.info("again")

    assert messages(handler) == ["survives", "again"]
    assert logger.state is ChannelState.OPEN


def test_fatal_exits_after_delivery_by_default() -> None:
    logger = Logger()
    handler = MemoryHandler()
    logger.add_handler(handler)

    with pytest.raises(SystemExit) as excinfo:
        logger.fatal("going down")

    assert excinfo.value.code == 1
    assert messages(handler) == ["going down"]


def test_fatal_on_async_logger_drains_before_exit() -> None:
    logger = Logger(async_=True)
    handler = MemoryHandler()
    logger.add_handler(handler)

    logger.info("queued")
    with pytest.raises(SystemExit):
        logger.fatal("last words")

    assert messages(handler) == ["queued", "last words"]
    logger.close().result(timeout=5)


def test_close_returns_a_future() -> None:
    logger = Logger()
    result = logger.close()

    assert isinstance(result, Future)
    assert result.result(timeout=5) is None


def test_is_not_closed_until_close_is_called() -> None:
    logger = Logger()

    assert logger.is_closed is False
    logger.close().result(timeout=5)
    assert logger.is_closed is True
    assert logger.state is ChannelState.CLOSED


def test_close_is_idempotent() -> None:
    logger = Logger()
    first = logger.close()
    second = logger.close()

    assert first is second
    second.result(timeout=5)
    assert logger.is_closed


def test_log_after_close_is_silently_dropped() -> None:
    logger = Logger()
    handler = MemoryHandler()
    logger.add_handler(handler)
    logger.close().result(timeout=5)

    logger.info("too late")
    logger.fatal("still too late", die=False)

    assert len(handler) == 0
    assert logger.is_closed


def test_close_async_can_be_awaited() -> None:
    logger = Logger(async_=True)
    handler = MemoryHandler()
    logger.add_handler(handler)
    logger.info("before close")

    asyncio.run(logger.close_async())

    assert logger.is_closed
    assert messages(handler) == ["before close"]


def test_async_logger_delivers_every_record_in_order() -> None:
    logger = Logger(name="async", level=ALL, async_=True)
    handler = MemoryHandler()
    logger.add_handler(handler)

    for index in range(50):
        logger.log(INFO, str(index))
    logger.close().result(timeout=5)

    assert messages(handler) == [str(index) for index in range(50)]


def test_async_logger_late_subscriber_misses_queued_records() -> None:
    gate = threading.Event()
    logger = Logger(async_=True)
    first = MemoryHandler()

    def blocking(record: LogRecord) -> None:
        gate.wait(timeout=2)

    logger.add_handler(blocking)
    logger.add_handler(first)
    logger.info("1")
    logger.info("2")
    late = MemoryHandler()
    logger.add_handler(late)
    logger.info("3")
    gate.set()
    logger.close().result(timeout=5)

    assert messages(first) == ["1", "2", "3"]
    assert messages(late) == ["3"]


def test_flush_waits_for_async_delivery() -> None:
    logger = Logger(async_=True)
    handler = MemoryHandler()
    logger.add_handler(handler)

    for index in range(10):
        logger.info(str(index))

    assert logger.flush(timeout=5) is True
    assert len(handler) == 10
    logger.close().result(timeout=5)


def test_flush_is_immediate_for_sync_logger() -> None:
    assert Logger().flush() is True


def test_concurrent_emitters_each_record_delivered_once() -> None:
    logger = Logger(level=ALL)
    handler = MemoryHandler()
    logger.add_handler(handler)
    barrier = threading.Barrier(4)

    def emit(worker: int) -> None:
        barrier.wait()
        for index in range(100):
            logger.info(f"{worker}-{index}")

    threads = [threading.Thread(target=emit, args=(worker,)) for worker in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    received = messages(handler)
    assert len(received) == 400
    assert len(set(received)) == 400
    for worker in range(4):
        own = [message for message in received if message.startswith(f"{worker}-")]
        assert own == [f"{worker}-{index}" for index in range(100)]


def test_repr_mentions_name_and_state() -> None:
    text = repr(Logger("repr-test"))

    assert "repr-test" in text
    assert "open" in text


def test_fatal_off_the_main_thread_ends_the_process(monkeypatch: pytest.MonkeyPatch) -> None:
    exits: list[int] = []
    monkeypatch.setattr(logger_module, "_exit_process", exits.append)
    logger = Logger()
    handler = MemoryHandler()
    logger.add_handler(handler)
    escaped: list[BaseException] = []

    def run() -> None:
        try:
            logger.fatal("boom")
        except BaseException as exc:  # noqa: BLE001
            escaped.append(exc)

    worker = threading.Thread(target=run)
    worker.start()
    worker.join(timeout=5)

    assert exits == [1]
    assert escaped == []
    assert messages(handler) == ["boom"]


def test_handler_calling_fatal_on_async_logger_exits_after_delivery(monkeypatch: pytest.MonkeyPatch) -> None:
    logger = Logger(async_=True)
    sibling = MemoryHandler()
    exited = threading.Event()
    seen_at_exit: list[tuple[int, list[str]]] = []

    def fake_exit(code: int) -> None:
        seen_at_exit.append((code, messages(sibling)))
        exited.set()

    monkeypatch.setattr(logger_module, "_exit_process", fake_exit)

    def escalate(record: LogRecord) -> None:
        if record.message == "trigger":
            logger.fatal("going down")

    logger.add_handler(escalate)
    logger.add_handler(sibling)
    logger.info("trigger")

    assert exited.wait(timeout=5)
    assert seen_at_exit == [(1, ["trigger", "going down"])]

    logger.info("after")
    assert logger.flush(timeout=2) is True
    assert messages(sibling) == ["trigger", "going down", "after"]
    logger.close().result(timeout=5)


def test_async_handler_raising_system_exit_does_not_stall_delivery() -> None:
    logger = Logger(async_=True)
    sibling = MemoryHandler()

    def bail(record: LogRecord) -> None:
        raise SystemExit(2)

    logger.add_handler(bail)
    logger.add_handler(sibling)
    logger.info("1")
    logger.info("2")

    assert logger.flush(timeout=2) is True
    assert messages(sibling) == ["1", "2"]
    logger.close().result(timeout=5)


def test_close_timeout_bounds_a_stuck_async_close() -> None:
    gate = threading.Event()
    diagnostics: list[str] = []
    logger = Logger(async_=True, close_timeout=0.05, diagnostic=lambda name, payload: diagnostics.append(name))

    logger.add_handler(lambda record: gate.wait(timeout=2))
    logger.info("stuck")

    logger.close().result(timeout=5)

    assert logger.is_closed
    assert diagnostics == ["queue_shutdown_timeout"]
    gate.set()
