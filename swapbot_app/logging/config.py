"""
structlog setup and logger helpers for the swapbot session host.

Components log through ``get_logger`` and the subsystem variants below;
``configure_logging`` is called once by the embedding program.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(level: str = "INFO", format_json: bool = False) -> None:
    """
    Configure structlog for the entire application.

    Records carry the logger name, level and an ISO timestamp.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON lines; otherwise colored console output
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stdout,
        format="%(message)s",
    )

    renderer = structlog.processors.JSONRenderer() if format_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_lifecycle_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for module lifecycle events (load, activate, retire).

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger bound to the module host subsystem
    """
    return get_logger(name).bind(
        subsystem="module_host",
        audit_trail=True
    )


def get_session_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for session state transitions and operator intents.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger bound to the session subsystem
    """
    return get_logger(name).bind(
        subsystem="session",
        audit_trail=True
    )


def log_state_transition(
    logger: FilteringBoundLogger,
    entity: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a state transition with standardized format.

    Args:
        logger: Structlog logger instance
        entity: What is transitioning (e.g. "session", "module:3")
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        entity=entity,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("State transition")
