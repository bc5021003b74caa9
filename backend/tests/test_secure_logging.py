"""Tests for log message scrubbing."""

import logging

import pytest

from alerting_api.utils.secure_logging import log_warning, sanitize_exception_message


class TestSanitizeExceptionMessage:
    """Test removal of sensitive values from error messages."""

    @pytest.mark.parametrize(
        "message,secret,placeholder",
        [
            ("401 for header Bearer eyJhbGciOi.abc.def", "eyJhbGciOi", "Bearer [TOKEN]"),
            (
                "cannot connect to postgresql+asyncpg://app:pw@db:5432/alerting",
                "app:pw@db",
                "[URL]",
            ),
            ("GET http://platform:8086/api/v2/tasks/1 failed", "platform:8086", "[URL]"),
            ("no such file /etc/alerting/secrets.env", "/etc/alerting", "[PATH]"),
            ("owner alice@example.com missing", "alice@example.com", "[EMAIL]"),
            ("routing key a" + "b" * 40, "b" * 40, "[TOKEN]"),
        ],
    )
    def test_sensitive_values_are_removed(self, message: str, secret: str, placeholder: str) -> None:
        """Verify each kind of sensitive value is replaced."""
        result = sanitize_exception_message(RuntimeError(message))

        assert secret not in result
        assert placeholder in result

    def test_platform_ids_are_kept(self) -> None:
        """Verify identifiers stay readable."""
        assert "020f755c3c082000" in sanitize_exception_message(KeyError("rule 020f755c3c082000"))

    def test_long_messages_are_truncated(self) -> None:
        """Verify messages are capped."""
        result = sanitize_exception_message(ValueError("x " * 500))

        assert len(result) == 200
        assert result.endswith("...")

    def test_empty_message_uses_type(self) -> None:
        """Verify exceptions without text are still identifiable."""
        assert sanitize_exception_message(TimeoutError()) == "TimeoutError"


class TestLogWarning:
    """Test environment dependent warning logs."""

    def test_warning_is_sanitized(self, caplog: pytest.LogCaptureFixture) -> None:
        """Verify warnings carry the sanitized error outside debug mode."""
        logger = logging.getLogger("alerting_api.tests")

        with caplog.at_level(logging.WARNING, logger="alerting_api.tests"):
            log_warning(logger, "Task lookup failed", RuntimeError("GET https://platform/api failed"))

        assert caplog.records[0].getMessage() == "Task lookup failed: GET [URL] failed"
