"""Test logging helpers."""

import logging
from unittest.mock import patch

import structlog

from llm_dispatcher.utils import logger as logger_module


class TestLoggingHelpers:
    """Test structured logging helpers."""

    def test_should_truncate_prompt_on_cache_hit(self):
        """Test long prompts are truncated in log events."""
        with patch.object(logger_module, "get_logger") as mock_get_logger:
            logger_module.log_cache_hit("x" * 500, "req-1")

            kwargs = mock_get_logger.return_value.info.call_args.kwargs
            assert len(kwargs["prompt"]) == 100
            assert kwargs["request_id"] == "req-1"

    def test_should_log_error_type(self):
        """Test error events carry the exception type."""
        with patch.object(logger_module, "get_logger") as mock_get_logger:
            logger_module.log_error(ValueError("bad"), "dispatch", request_id="req-1")

            kwargs = mock_get_logger.return_value.error.call_args.kwargs
            assert kwargs["error_type"] == "ValueError"
            assert kwargs["request_id"] == "req-1"

    def test_should_return_logger(self):
        """Test logger factory returns a usable logger."""
        log = logger_module.get_logger("test")
        assert hasattr(log, "info")


class TestSetupLogging:
    """Test logging configuration."""

    def test_should_install_single_stdout_handler(self):
        """Test root logger gets one structlog-formatted handler."""
        logger_module.setup_logging("DEBUG")
        root = logging.getLogger()

        try:
            assert len(root.handlers) == 1
            assert root.level == logging.DEBUG
            assert isinstance(
                root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter
            )
        finally:
            structlog.reset_defaults()

    def test_should_quiet_vendor_loggers(self):
        """Test SDK loggers stay at WARNING when dispatcher logs at INFO."""
        logger_module.setup_logging("INFO", json_output=True)

        try:
            assert logging.getLogger("httpx").level == logging.WARNING
            assert logging.getLogger("openai").level == logging.WARNING
        finally:
            structlog.reset_defaults()
