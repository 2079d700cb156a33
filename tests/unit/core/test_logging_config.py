"""
Unit tests for logging configuration and request correlation.
"""

import logging
from unittest.mock import patch

from bigha.core.logging import CorrelationIdFilter, get_logging_config, request_id_var


def _record() -> logging.LogRecord:
    return logging.LogRecord("bigha.test", logging.INFO, __file__, 1, "hello", None, None)


class TestCorrelationIdFilter:
    def test_default_outside_request(self):
        record = _record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "no-request-id"

    def test_uses_current_request_id(self):
        token = request_id_var.set("req-42")
        try:
            record = _record()
            CorrelationIdFilter().filter(record)
        finally:
            request_id_var.reset(token)

        assert record.correlation_id == "req-42"

    def test_keeps_explicit_correlation_id(self):
        record = _record()
        record.correlation_id = "given"

        CorrelationIdFilter().filter(record)

        assert record.correlation_id == "given"


class TestLoggingConfig:
    def test_console_only_by_default(self):
        with patch("bigha.core.logging.settings") as mock_settings:
            mock_settings.log_format = "console"
            mock_settings.log_level = "INFO"
            mock_settings.log_file_enabled = False
            config = get_logging_config()

        assert list(config["handlers"]) == ["console"]
        assert config["handlers"]["console"]["formatter"] == "detailed"

    def test_json_format_and_file_handlers(self):
        with patch("bigha.core.logging.settings") as mock_settings:
            mock_settings.log_format = "json"
            mock_settings.log_level = "WARNING"
            mock_settings.log_file_enabled = True
            mock_settings.log_file_path = "logs/app.log"
            mock_settings.log_file_max_bytes = 1024
            mock_settings.log_file_backup_count = 2
            config = get_logging_config()

        assert config["formatters"]["json"]["()"] == "pythonjsonlogger.jsonlogger.JsonFormatter"
        assert config["handlers"]["file"]["formatter"] == "json"
        assert "error_file" in config["loggers"]["bigha"]["handlers"]
