"""Unit tests for structured logging configuration."""

import logging
import sys
from unittest.mock import patch

import pytest
import structlog

from core.config import settings
from core.logging import (
    _is_test_environment,
    add_deployment_context,
    configure_logging,
    dispatch_context,
    get_module_logger,
)


@pytest.mark.unit
class TestLoggingConfiguration:
    """Tests for logging configuration."""

    def test_is_test_environment_detects_pytest(self):
        """_is_test_environment returns True when pytest is in sys.modules."""
        assert _is_test_environment() is True

    def test_is_test_environment_without_pytest(self):
        """_is_test_environment returns False when pytest is not loaded."""
        modules = {k: v for k, v in sys.modules.items() if k != "pytest"}
        with patch.dict(sys.modules, modules, clear=True):
            assert _is_test_environment() is False

    def test_configure_logging_in_test_environment(self):
        """configure_logging suppresses logs in test environment."""
        configure_logging()

        assert logging.root.level == logging.CRITICAL + 1

    def test_configure_logging_returns_bound_logger(self):
        """configure_logging returns a logger instance."""
        logger = configure_logging(log_level="DEBUG", is_production=True)

        assert hasattr(logger, "bind")


@pytest.mark.unit
class TestModuleLogger:
    """Tests for module logger binding."""

    def test_get_module_logger(self):
        """get_module_logger returns a logger for the calling module."""
        logger = get_module_logger()

        assert logger is not None
        assert hasattr(logger, "info")

    def test_get_module_logger_with_none_frame(self):
        """get_module_logger handles a missing frame."""
        with patch("inspect.currentframe", return_value=None):
            logger = get_module_logger()

        assert logger is not None


@pytest.mark.unit
class TestLogContext:
    """Tests for context added to records."""

    def test_add_deployment_context(self):
        """Records are tagged with the deployed revision."""
        event_dict = add_deployment_context(None, "info", {"event": "x"})

        assert event_dict["git_sha"] == settings.GIT_SHA

    def test_dispatch_context_is_scoped(self):
        """Dispatch context is bound only inside the block."""
        with dispatch_context(event_type="MESSAGE"):
            assert structlog.contextvars.get_contextvars()["event_type"] == "MESSAGE"

        assert "event_type" not in structlog.contextvars.get_contextvars()
