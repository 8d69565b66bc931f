"""Tests for ``rowspine.logging``: structlog configuration and context helpers."""

from __future__ import annotations

import structlog

from rowspine.logging import (
    LogContext,
    _add_service_metadata,
    _elasticsearch_compatible,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


class TestProcessors:
    def test_service_metadata(self):
        event = _add_service_metadata(None, "info", {"event": "x"})
        assert event["service.name"] == "rowspine"

    def test_service_metadata_does_not_override(self):
        event = _add_service_metadata(None, "info", {"service.name": "billing"})
        assert event["service.name"] == "billing"

    def test_elasticsearch_renames(self):
        event = _elasticsearch_compatible(None, "info", {"timestamp": "t", "level": "info", "event": "x"})
        assert event == {"@timestamp": "t", "log.level": "info", "event": "x"}


class TestConfigure:
    def test_configure_and_log(self, capsys, monkeypatch):
        monkeypatch.setattr("rowspine.logging._SERVICE_NAME", "rowspine")
        configure_logging(level="DEBUG", json_format=True, service="rowspine-test")
        logger = get_logger("rowspine.test")
        logger.info("record_created", table="users")
        captured = capsys.readouterr()
        assert "record_created" in captured.err
        assert '"service.name": "rowspine-test"' in captured.err
        structlog.reset_defaults()


class TestContext:
    def teardown_method(self):
        clear_context()

    def test_bind_and_clear(self):
        bind_context(request_id="abc")
        assert structlog.contextvars.get_contextvars()["request_id"] == "abc"
        clear_context()
        assert "request_id" not in structlog.contextvars.get_contextvars()

    def test_log_context_is_scoped(self):
        with LogContext(connection="reports"):
            assert structlog.contextvars.get_contextvars()["connection"] == "reports"
        assert "connection" not in structlog.contextvars.get_contextvars()
