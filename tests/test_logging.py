from __future__ import annotations

import logging

import pytest

from ark_dex_adapter.core.logging import StructuredLogFormatter, bind_context, configure_logging, get_logger, log_progress


@pytest.fixture
def reset_logging_handlers():
    root = logging.getLogger()
    existing_handlers = list(root.handlers)
    yield
    root.handlers = existing_handlers


class _ListHandler(logging.Handler):
    def __init__(self, formatter: logging.Formatter):
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - trivial
        self.records.append(record)


def _collect(logger_name: str):
    root = logging.getLogger()
    collector = _ListHandler(root.handlers[0].formatter)
    collector.setLevel(logging.DEBUG)
    logging.getLogger(logger_name).setLevel(logging.DEBUG)
    root.addHandler(collector)
    return collector


def test_structured_formatter_orders_known_extras_first():
    formatter = StructuredLogFormatter(use_color=False)
    record = logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg="Fetched page",
        args=(),
        exc_info=None,
    )
    record.zeta = "last"
    record.offset = 4
    record.action = "getBlocksBetweenHeights"
    record.tags = ("ark_dex_adapter", "devnet")

    formatted = formatter.format(record)

    assert "Fetched page" in formatted
    assert formatted.index("action=getBlocksBetweenHeights") < formatted.index("offset=4") < formatted.index("zeta=last")
    assert "tags=[ark_dex_adapter, devnet]" in formatted


def test_colored_levels_do_not_leak_into_the_record():
    formatter = StructuredLogFormatter(use_color=True)
    record = logging.LogRecord("test", logging.WARNING, __file__, 1, "careful", (), None)

    formatted = formatter.format(record)

    assert "\033[33mWARNING\033[0m" in formatted
    assert record.levelname == "WARNING"


def test_configure_logging_installs_structured_formatter(reset_logging_handlers):
    configure_logging(force=True)

    root = logging.getLogger()
    assert root.handlers, "expected at least one handler configured"
    assert isinstance(root.handlers[0].formatter, StructuredLogFormatter)


def test_adapter_merges_bound_and_call_extras(reset_logging_handlers):
    configure_logging(force=True)
    logger = get_logger("test.merge", tags=("ark_dex_adapter",), extra={"wallet": "DAbc"})
    collector = _collect("test.merge")
    try:
        bind_context(logger, height=7).info("Polled", extra={"received": 3})
    finally:
        logging.getLogger().removeHandler(collector)

    [record] = collector.records
    assert record.wallet == "DAbc"
    assert record.height == 7
    assert record.received == 3
    assert record.tags == ("ark_dex_adapter",)
    assert "height" not in logger.extra


def test_log_progress_populates_record_extras(reset_logging_handlers):
    configure_logging(force=True)
    logger = get_logger("test.progress", extra={"wallet": "DAbc"})
    collector = _collect("test.progress")
    try:
        log_progress(logger, "Fetched transactions", action="getOutboundTransactions", status="ok", extra={"total": 2})
    finally:
        logging.getLogger().removeHandler(collector)

    [record] = collector.records
    assert record.action == "getOutboundTransactions"
    assert record.status == "ok"
    assert record.total == 2
    assert record.wallet == "DAbc"
    formatted = collector.format(record)
    assert "action=getOutboundTransactions" in formatted
    assert "status=ok" in formatted
