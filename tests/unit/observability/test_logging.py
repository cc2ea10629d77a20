"""Tests for structured logging."""

import json
from io import StringIO

import pytest
import structlog

from refconfig.observability.logging import (
    REDACTED,
    SecretRedactor,
    get_logger,
    is_secret_key,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        """Should configure JSON format for production."""
        setup_logging(level="INFO", format="json", redact_secrets=False)
        logger = get_logger("test")
        # Should not raise
        logger.info("test_message")

    def test_setup_console_format(self) -> None:
        """Should configure console format for development."""
        setup_logging(level="DEBUG", format="console", redact_secrets=False)
        logger = get_logger("test")
        # Should not raise
        logger.debug("test_message")

    def test_setup_with_redaction(self) -> None:
        """Should configure secret redaction when enabled."""
        setup_logging(level="INFO", format="json", redact_secrets=True)
        logger = get_logger("test")
        logger.info("test_message", password="hunter2")


class TestIsSecretKey:
    """Tests for secret key detection."""

    @pytest.mark.parametrize(
        "key",
        ["password", "db.password", "API_KEY", "aws_secret_access_key", "auth-token", "private_key"],
    )
    def test_secret_keys(self, key: str) -> None:
        assert is_secret_key(key) is True

    @pytest.mark.parametrize("key", ["host", "port", "server.timeout", "source"])
    def test_plain_keys(self, key: str) -> None:
        assert is_secret_key(key) is False


class TestSecretRedactor:
    """Tests for secret redaction."""

    @pytest.fixture
    def redactor(self) -> SecretRedactor:
        """Create a SecretRedactor instance."""
        return SecretRedactor()

    def test_redacts_by_field_name(self, redactor: SecretRedactor) -> None:
        event_dict = {"password": "secret123", "data": "ok"}
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["password"] == REDACTED
        assert result["data"] == "ok"

    def test_redacts_value_of_secret_config_key(self, redactor: SecretRedactor) -> None:
        """A value logged next to a secret-looking config key is masked."""
        event_dict = {"event": "x", "key": "db.password", "value": "hunter2"}
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["value"] == REDACTED
        assert result["key"] == "db.password"

    def test_keeps_value_of_plain_config_key(self, redactor: SecretRedactor) -> None:
        event_dict = {"event": "x", "key": "db.host", "value": "localhost"}
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["value"] == "localhost"

    def test_handles_nested_dicts(self, redactor: SecretRedactor) -> None:
        event_dict = {"db": {"password": "x", "host": "h"}, "event": "e"}
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["db"]["password"] == REDACTED
        assert result["db"]["host"] == "h"

    def test_preserves_non_secret_data(self, redactor: SecretRedactor) -> None:
        event_dict = {"event": "config_resolved", "keys": 12, "references": 3}
        result = redactor(None, None, event_dict)  # type: ignore
        assert result == event_dict


class TestJSONLogging:
    """Tests for JSON log output format."""

    def test_json_output_is_redacted_and_valid(self) -> None:
        """Should produce valid JSON with secrets masked."""
        output = StringIO()
        structlog.configure(
            processors=[
                structlog.processors.add_log_level,
                SecretRedactor(),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(0),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(output),
            cache_logger_on_first_use=False,
        )

        logger = structlog.get_logger("test")
        logger.info("test_event", token="abc", source="vault")

        parsed = json.loads(output.getvalue().strip())
        assert parsed["event"] == "test_event"
        assert parsed["token"] == REDACTED
        assert parsed["source"] == "vault"
