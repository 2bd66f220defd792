"""Tests for logging configuration helpers."""

from unittest.mock import Mock

import structlog
from structlog.testing import capture_logs

from swapbot_app.logging.config import (
    configure_logging,
    get_lifecycle_logger,
    get_session_logger,
    log_state_transition,
)


class TestLogStateTransition:
    """Test the standardized transition record."""

    def setup_method(self):
        self.logger = Mock()
        self.bound = Mock()
        self.logger.bind.return_value = self.bound
        self.bound.bind.return_value = self.bound

    def test_binds_transition_fields(self):
        log_state_transition(self.logger, "session", "idle", "running", "start")

        self.logger.bind.assert_called_once_with(
            entity="session",
            from_state="idle",
            to_state="running",
            trigger="start",
        )
        self.bound.info.assert_called_once_with("State transition")
        self.bound.bind.assert_not_called()

    def test_context_is_bound(self):
        log_state_transition(self.logger, "module:2", "loading", "active", "activate", {"artifact": "a.py"})
        self.bound.bind.assert_called_once_with(context={"artifact": "a.py"})


class TestSubsystemLoggers:
    """Test subsystem-bound loggers."""

    def test_lifecycle_logger(self):
        with capture_logs() as logs:
            get_lifecycle_logger("swapbot_app.modules.host").info("Module activated", generation=1)

        assert logs[0]["subsystem"] == "module_host"
        assert logs[0]["audit_trail"] is True
        assert logs[0]["generation"] == 1

    def test_session_logger(self):
        with capture_logs() as logs:
            get_session_logger("swapbot_app.session.controller").info("Intent accepted")

        assert logs[0]["subsystem"] == "session"
        assert logs[0]["event"] == "Intent accepted"


class TestConfigureLogging:
    """Test renderer selection."""

    def teardown_method(self):
        structlog.reset_defaults()

    def test_console_renderer_by_default(self):
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert any(isinstance(p, structlog.processors.TimeStamper) for p in processors)

    def test_json_renderer(self):
        configure_logging(level="debug", format_json=True)

        config = structlog.get_config()
        assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)
        assert config["wrapper_class"] is structlog.stdlib.BoundLogger
