"""
Structured logging configuration for browser-runner.

Configures structlog for text or JSON logging with run context. Logs are
written to stderr so the output of an automation unit stays on stdout.
"""

import structlog
import logging
import sys
from typing import Any


def configure_logging(log_level: str = "WARNING", log_format: str = "text") -> None:
    """
    Configure structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: "text" for console output, "json" for structured logs
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.WARNING),
        force=True,
    )

    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = None, run_id: str = None) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance with optional context.

    Args:
        name: Logger name, usually the module's __name__
        run_id: Script run identifier for tracing

    Returns:
        Configured logger instance
    """
    context: dict[str, Any] = {}
    if run_id:
        context["run_id"] = run_id

    if name:
        return structlog.get_logger(name, **context)
    return structlog.get_logger(**context)
