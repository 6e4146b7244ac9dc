"""
Tests for the logging module.
"""

import json
import logging
from unittest.mock import MagicMock

import pytest
import structlog


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_development_mode(self):
        """Development mode uses the console renderer."""
        from core.logging import configure_logging

        configure_logging(json_logs=False, log_level="DEBUG")

    def test_configure_production_mode(self):
        """Production mode uses the JSON renderer."""
        from core.logging import configure_logging

        configure_logging(json_logs=True, log_level="INFO")

    def test_configure_log_level(self):
        from core.logging import configure_logging

        configure_logging(log_level="WARNING")

        assert logging.getLogger().level == logging.WARNING

    def test_third_party_loggers_quieted(self):
        from core.logging import configure_logging

        configure_logging(log_level="DEBUG")

        assert logging.getLogger("openai").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_named_logger(self):
        from core.logging import get_logger

        logger = get_logger("test.module")

        assert hasattr(logger, "info")
        assert hasattr(logger, "error")

    def test_logger_can_log(self):
        from core.logging import configure_logging, get_logger

        configure_logging(json_logs=False, log_level="DEBUG")
        logger = get_logger("test")

        logger.info("Test message", key="value")
        logger.warning("Warning")
        logger.error("Error", error="test error")


class TestContextBinding:
    """Tests for context binding functions."""

    def test_bind_context(self):
        from core.logging import bind_context, clear_context

        clear_context()
        bind_context(user_id="123", request_id="abc")

        ctx = structlog.contextvars.get_contextvars()
        assert ctx.get("user_id") == "123"
        assert ctx.get("request_id") == "abc"

        clear_context()

    def test_clear_context(self):
        from core.logging import bind_context, clear_context

        bind_context(user_id="123")
        clear_context()

        assert "user_id" not in structlog.contextvars.get_contextvars()

    def test_unbind_specific_context(self):
        from core.logging import bind_context, clear_context, unbind_context

        clear_context()
        bind_context(user_id="123", request_id="abc", pipeline="avatar")

        unbind_context("pipeline")

        ctx = structlog.contextvars.get_contextvars()
        assert ctx.get("user_id") == "123"
        assert "pipeline" not in ctx

        clear_context()


class TestLogStage:
    """Tests for the log_stage context manager."""

    def test_logs_start_and_completion_with_latency(self):
        from core.logging import log_stage

        logger = MagicMock()

        with log_stage(logger, "describe", user_id="u1"):
            pass

        messages = [c.args[0] for c in logger.info.call_args_list]
        assert messages == ["Stage started", "Stage completed"]
        completed = logger.info.call_args_list[-1].kwargs
        assert completed["stage"] == "describe"
        assert completed["user_id"] == "u1"
        assert completed["latency_ms"] >= 0

    def test_failure_is_logged_and_reraised(self):
        from core.logging import log_stage

        logger = MagicMock()

        with pytest.raises(RuntimeError, match="boom"):
            with log_stage(logger, "fetch"):
                raise RuntimeError("boom")

        logger.warning.assert_called_once()
        failed = logger.warning.call_args.kwargs
        assert failed["stage"] == "fetch"
        assert failed["error_type"] == "RuntimeError"
        assert [c.args[0] for c in logger.info.call_args_list] == ["Stage started"]


class TestLoggerMixin:
    """Tests for LoggerMixin class."""

    def test_mixin_logger_named_after_class(self):
        from core.logging import LoggerMixin, configure_logging

        configure_logging(json_logs=False)

        class MyService(LoggerMixin):
            def do_work(self):
                self.logger.info("Working")

        service = MyService()
        assert service.logger is not None
        service.do_work()


class TestJSONOutput:
    """Tests for JSON logging output."""

    def test_json_output_is_valid_json(self, capsys):
        from core.logging import configure_logging, get_logger

        configure_logging(json_logs=True, log_level="INFO")
        logger = get_logger("json_test")

        logger.info("Test message", key="value")

        captured = capsys.readouterr()
        if captured.out:
            for line in captured.out.strip().split("\n"):
                if line:
                    data = json.loads(line)
                    assert "event" in data or "message" in data


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
