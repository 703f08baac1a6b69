"""
Unit Tests for Logging Setup
============================
"""

import logging
import sys

import pytest
import structlog

from mixpost_mcp.log_config import setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_writes_to_stderr(self, restore_logging):
        """Should install a single stderr handler at the requested level."""
        setup_logging(level="debug", json_output=True)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr
        assert root.level == logging.DEBUG

    def test_quiets_transport_loggers(self, restore_logging):
        """httpx logging should stay at WARNING or above."""
        setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_json_output(self, restore_logging, capsys):
        """JSON mode should render structlog events as JSON lines."""
        setup_logging(level="INFO", json_output=True)

        structlog.get_logger("mixpost_mcp.test").info("circuit_closed", breaker="mixpost")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        assert '"event": "circuit_closed"' in line
        assert '"breaker": "mixpost"' in line
