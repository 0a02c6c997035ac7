"""Tests for contextacl.logging module."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from unittest.mock import patch

import pytest

from contextacl import (
    AclConfig,
    AclLogFormatter,
    Action,
    LogLevel,
    get_acl_logger,
    safe_preview,
    setup_logging,
)


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    logging.getLogger("contextacl").setLevel(logging.NOTSET)


def _record(msg: str = "Test message", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSafePreview:
    """Tests for safe_preview function."""

    def test_none_value(self) -> None:
        """Test that None returns empty string."""
        assert safe_preview(None) == ""

    def test_string_with_whitespace(self) -> None:
        """Test that whitespace is normalized."""
        assert safe_preview("role\n\twith  gaps") == "role with gaps"

    def test_string_truncation(self) -> None:
        """Test that long identifiers are truncated."""
        result = safe_preview("a" * 300, limit=100)
        assert len(result) == 100
        assert result.endswith("…")

    def test_dict_value(self) -> None:
        """Test that dicts are converted to JSON."""
        result = safe_preview({"ALL": True})
        assert result == '{"ALL": true}'


class TestAclLogFormatter:
    """Tests for AclLogFormatter."""

    def test_json_format(self) -> None:
        """Test JSON output carries the ACL context fields."""
        formatter = AclLogFormatter(json_format=True)
        result = formatter.format(_record(role="gimli", resource="weapons", action="DELETE"))

        data = json.loads(result)
        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert data["role"] == "gimli"
        assert data["resource"] == "weapons"
        assert data["action"] == "DELETE"

    def test_json_without_context(self) -> None:
        formatter = AclLogFormatter(json_format=True)
        data = json.loads(formatter.format(_record()))
        assert "role" not in data
        assert "resource" not in data

    def test_json_keeps_other_extras(self) -> None:
        formatter = AclLogFormatter(json_format=True)
        data = json.loads(formatter.format(_record(target="roles")))
        assert data["target"] == "roles"

    def test_plain_format(self) -> None:
        """Test plain text formatter."""
        formatter = AclLogFormatter(json_format=False)
        result = formatter.format(_record(role="gimli"))
        assert "INFO" in result
        assert "role=gimli" in result
        assert result.endswith(": Test message")
        assert not result.startswith("{")


class TestAclLoggerAdapter:
    """Tests for the ACL logger adapter."""

    def test_context_kwargs_become_extra(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_acl_logger("contextacl.test")
        with caplog.at_level(logging.INFO, logger="contextacl"):
            logger.info("Removed", role="gimli", resource="weapons", action=Action.DELETE)

        record = caplog.records[-1]
        assert record.role == "gimli"
        assert record.resource == "weapons"
        assert record.action == "DELETE"

    def test_bound_context(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_acl_logger("contextacl.test", role="aragorn")
        with caplog.at_level(logging.INFO, logger="contextacl"):
            logger.info("Bound")
            logger.info("Overridden", role="legolas")

        assert caplog.records[-2].role == "aragorn"
        assert caplog.records[-1].role == "legolas"

    def test_without_context(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_acl_logger("contextacl.test")
        with caplog.at_level(logging.INFO, logger="contextacl"):
            logger.info("Plain")

        assert not hasattr(caplog.records[-1], "role")


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_with_config(self) -> None:
        """Test logging setup with AclConfig."""
        setup_logging(config=AclConfig(log_level=LogLevel.DEBUG), json_format=False)

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("contextacl").level == logging.DEBUG
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, AclLogFormatter)

    def test_service_logger_level(self) -> None:
        setup_logging(config=AclConfig(log_level=LogLevel.ERROR, service_name="svc-acl-test"))
        assert logging.getLogger("svc-acl-test").level == logging.ERROR
        logging.getLogger("svc-acl-test").setLevel(logging.NOTSET)

    @patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}, clear=True)
    def test_setup_with_env(self) -> None:
        """Test logging setup loading from environment."""
        setup_logging(json_format=False)
        assert logging.getLogger().level == logging.WARNING

    def test_json_format(self, capsys: pytest.CaptureFixture) -> None:
        """Test JSON format output."""
        setup_logging(config=AclConfig(log_level=LogLevel.INFO), json_format=True)

        get_acl_logger("contextacl.test").info("Test message", role="gimli")

        stderr_output = capsys.readouterr().err.strip()
        assert stderr_output.startswith("{")
        data = json.loads(stderr_output)
        assert data["message"] == "Test message"
        assert data["role"] == "gimli"

    def test_plain_format_from_config(self, capsys: pytest.CaptureFixture) -> None:
        setup_logging(config=AclConfig(log_level=LogLevel.INFO, log_json=False))

        logging.getLogger("test").info("Test message")

        stderr_output = capsys.readouterr().err.strip()
        assert "INFO" in stderr_output
        assert "Test message" in stderr_output
        assert not stderr_output.startswith("{")
