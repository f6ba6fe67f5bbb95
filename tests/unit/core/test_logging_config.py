"""
Tests for logging infrastructure.
"""

import logging
import json
import sys

import pytest

from aztables.core.config_manager import LoggingConfig
from aztables.core.logging_config import (
    setup_logging,
    configure_logging,
    log_with_context,
    redact,
    JSONFormatter,
    SensitiveDataFilter,
    TextFormatter,
    _parse_size
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo setup_logging changes to the root logger after each test."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if any(isinstance(f, SensitiveDataFilter) for f in handler.filters):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)


def make_record(msg, level=logging.INFO, args=(), exc_info=None):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=args,
        exc_info=exc_info
    )


class TestLoggingSetup:
    """Test suite for logging setup."""

    def test_setup_logging_defaults(self):
        """Test setting up logging with defaults."""
        setup_logging()

        root_logger = logging.getLogger()
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, TextFormatter)

    def test_setup_logging_with_level(self):
        """Test setting up logging with custom level."""
        setup_logging(level="debug")

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_json(self):
        setup_logging(format_type="json")
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_setup_logging_with_file(self, tmp_path):
        """Test file output is redacted."""
        log_file = tmp_path / "logs" / "tables.log"
        setup_logging(log_file=str(log_file))

        logging.getLogger(__name__).info("GET /Tables?sv=2019-02-02&sig=secretsignature")

        content = log_file.read_text()
        assert "GET /Tables?sv=2019-02-02" in content
        assert "secretsignature" not in content

    def test_setup_logging_with_module_levels(self):
        """Test setting up logging with per-module log levels."""
        setup_logging(
            level="INFO",
            module_levels={
                "test.module.debug": "DEBUG",
                "test.module.error": "ERROR"
            }
        )

        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger("test.module.debug").level == logging.DEBUG
        assert logging.getLogger("test.module.error").level == logging.ERROR

    def test_configure_logging_from_config(self, tmp_path):
        """Test a LoggingConfig section is applied."""
        log_file = tmp_path / "tables.log"
        configure_logging(LoggingConfig(level="WARNING", format="json", file=str(log_file)))

        root_logger = logging.getLogger()
        assert root_logger.level == logging.WARNING
        assert len(root_logger.handlers) == 2
        assert all(isinstance(h.formatter, JSONFormatter) for h in root_logger.handlers)


class TestFormatters:
    """Test suite for the JSON and text formatters."""

    def test_json_basic_message(self):
        """Test formatting a basic log message."""
        data = json.loads(JSONFormatter().format(make_record("Test message")))

        assert data["level"] == "INFO"
        assert data["module"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert "context" not in data

    def test_json_with_context(self):
        """Test structured context is rendered."""
        record = make_record("Azure Table Service error: boom", level=logging.ERROR)
        record.context = {"operation": "get_table", "status": 404}

        data = json.loads(JSONFormatter().format(record))

        assert data["context"] == {"operation": "get_table", "status": 404}

    def test_json_with_exception(self):
        """Test formatting with exception info."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError" in data["exception"]
        assert "Test error" in data["exception"]

    def test_text_with_context(self):
        """Test context pairs are appended and None values skipped."""
        record = make_record("Azure Table Service error: boom", level=logging.ERROR)
        record.context = {"operation": "delete_table", "table": "mytable", "status": None}

        line = TextFormatter().format(record)

        assert line.endswith("Azure Table Service error: boom (operation=delete_table table=mytable)")

    def test_text_without_context(self):
        line = TextFormatter().format(make_record("plain"))
        assert line.endswith("[INFO] test: plain")


class TestRedaction:
    """Test suite for secret redaction."""

    @pytest.mark.parametrize("text,secret", [
        ("Authorization: SharedKey acct:c2lnbmF0dXJl", "c2lnbmF0dXJl"),
        ("Authorization: Bearer secret_token_here", "secret_token_here"),
        ("DefaultEndpointsProtocol=https;AccountName=test;AccountKey=secretkey123;", "secretkey123"),
        ("SharedAccessSignature=sv=2019&sig=abc;TableEndpoint=x", "sv=2019"),
        ("https://acct.table.core.windows.net/Tables?sv=2019-02-02&sig=base64signature&se=2025", "base64signature"),
    ])
    def test_redact(self, text, secret):
        result = redact(text)
        assert secret not in result
        assert "***REDACTED***" in result

    def test_other_query_parameters_kept(self):
        result = redact("GET /Tables?sv=2019-02-02&sig=abc&se=2025-12-31")
        assert result == "GET /Tables?sv=2019-02-02&sig=***REDACTED***&se=2025-12-31"

    def test_lookalike_parameter_kept(self):
        """Test only a whole sig parameter is redacted."""
        assert redact("?xsig=visible") == "?xsig=visible"

    def test_filter_redacts_args_and_context(self):
        """Test secrets passed as arguments or context are redacted."""
        record = make_record("GET %s", args=("https://acct/Tables?sig=argsecret",))
        record.context = {"url": "https://acct/Tables?sig=ctxsecret", "status": 403}

        assert SensitiveDataFilter().filter(record) is True

        assert "argsecret" not in record.getMessage()
        assert "ctxsecret" not in record.context["url"]
        assert record.context["status"] == 403


class TestLogWithContext:
    """Test suite for contextual logging."""

    def test_context_attached(self, caplog):
        logger = logging.getLogger("aztables.test")

        with caplog.at_level(logging.ERROR, logger="aztables.test"):
            log_with_context(logger, logging.ERROR, "Test message", table="mytable", status=404)

        assert caplog.records[-1].context == {"table": "mytable", "status": 404}

    def test_without_context(self, caplog):
        logger = logging.getLogger("aztables.test")

        with caplog.at_level(logging.INFO, logger="aztables.test"):
            log_with_context(logger, logging.INFO, "Plain message")

        assert not hasattr(caplog.records[-1], "context")


class TestParseSize:
    """Test suite for size parsing."""

    def test_parse_bytes(self):
        assert _parse_size("100") == 100
        assert _parse_size("100B") == 100

    def test_parse_units(self):
        assert _parse_size("10KB") == 10240
        assert _parse_size("1MB") == 1048576
        assert _parse_size("1GB") == 1073741824

    def test_parse_lowercase_and_whitespace(self):
        assert _parse_size("5kb") == 5120
        assert _parse_size(" 10 MB ") == 10485760

    def test_parse_decimal(self):
        assert _parse_size("1.5MB") == int(1.5 * 1048576)

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            _parse_size("ten megabytes")
