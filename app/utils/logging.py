"""Structured logging setup."""
import logging

import structlog


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        json_logs: Render events as JSON lines instead of console output
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )

    logging.basicConfig(level=level.upper())


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound to the given module name."""
    return structlog.get_logger(name)
