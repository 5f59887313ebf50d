"""Tests for the logging utility module."""


import pytest

from style_audit.utils.logging import configure_logging, get_logger, log_operation


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_default(self):
        """Test configure_logging with defaults."""
        # Should not raise
        configure_logging()

    def test_configure_logging_debug_level(self):
        """Test configure_logging with DEBUG level."""
        configure_logging(level="debug")

    def test_configure_logging_json_format(self):
        """Test configure_logging with JSON output."""
        configure_logging(json_format=True)

    def test_configure_logging_no_timestamp(self):
        """Test configure_logging without timestamps."""
        configure_logging(include_timestamp=False)


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_with_name(self):
        """Test get_logger with name."""
        configure_logging()
        logger = get_logger("style_audit.test")

        assert logger is not None

    def test_get_logger_with_context(self):
        """Test get_logger with context."""
        configure_logging()
        logger = get_logger("style_audit.test", component="contrast_rules", url="https://example.com")

        assert logger is not None


class TestLogOperation:
    """Tests for log_operation context manager."""

    def test_log_operation_success(self):
        """Test log_operation on success."""
        configure_logging()

        with log_operation("run_audit", url="https://example.com") as op:
            op["issues"] = 3

        assert op["success"] is True
        assert op["error"] is None
        assert op["issues"] == 3

    def test_log_operation_with_logger(self):
        """Test log_operation with custom logger."""
        configure_logging()
        logger = get_logger("custom")

        with log_operation("run_audit", logger=logger) as op:
            pass

        assert op["success"] is True

    def test_log_operation_failure(self):
        """Test log_operation on failure."""
        configure_logging()

        with pytest.raises(ValueError):
            with log_operation("failing_op") as op:
                raise ValueError("Test error")

        assert op["success"] is False
        assert op["error"] == "Test error"

    def test_log_operation_records_duration(self):
        """Test the operation result carries its duration."""
        configure_logging()

        with log_operation("run_audit") as op:
            pass

        assert op["duration_ms"] >= 0


class TestConfigureLoggingValidation:
    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging(level="chatty")
