"""Logging configuration utilities."""

import logging
import sys
from typing import Optional

import structlog
from structlog.contextvars import bind_contextvars


def _stderr_logger_factory(*args) -> structlog.PrintLogger:
    """Log to whatever sys.stderr is now; stdout is reserved for command output."""
    return structlog.PrintLogger(sys.stderr)


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structured logging."""

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level.upper())),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def bind_deployment_context(project_system: Optional[str] = None, install_path: Optional[str] = None) -> None:
    """Bind correlation fields for deployment logs using contextvars."""
    if project_system:
        bind_contextvars(projectSystem=project_system)
    if install_path:
        bind_contextvars(installPath=install_path)
