"""
Logging Setup
=============
structlog configuration for services using loyalty-core.

Usage:
    from loyalty_core.log_config import configure_logging

    configure_logging(service_name="loyalty-api", level="DEBUG")
"""

import logging
from typing import Optional

import structlog

from loyalty_core.config import LOG_FORMATS, ResilienceSettings
from loyalty_core.exceptions import ConfigurationError


def configure_logging(
    service_name: str = "loyalty-service",
    level: str = "INFO",
    log_format: str = "json",
):
    """
    Configure structlog for the process.

    Args:
        service_name: Bound to every event as ``service``
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        log_format: ``json`` for machine-readable output, ``console`` for dev
    """
    if log_format not in LOG_FORMATS:
        raise ConfigurationError(f"Invalid log format: {log_format!r}")

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"Invalid log level: {level!r}")

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )
    structlog.contextvars.bind_contextvars(service=service_name)


def configure_from_settings(settings: Optional[ResilienceSettings] = None):
    """Configure logging from settings, reading the environment when none are given."""
    settings = settings or ResilienceSettings.from_env()
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        log_format=settings.log_format,
    )
