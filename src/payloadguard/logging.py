"""Structured logging configuration.

JSON logs with automatic context binding. Uses structlog with stdlib integration.
Context bound by the host application (like request_id) through
structlog.contextvars is included in every payload validation log.
"""

import logging
import logging.config
import sys
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.stdlib import BoundLogger


def _add_timestamp(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add ISO 8601 UTC timestamp with timezone offset."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


class LoggingSettings(BaseSettings):
    """Logging settings from environment variables."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Human-readable console output instead of JSON, for local development
    log_console: bool = Field(default=False, alias="PAYLOADGUARD_LOG_CONSOLE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


def configure_logging(settings: LoggingSettings) -> None:
    """Configure structlog output to stdout for the payloadguard loggers.

    Runs once at import. Only the "payloadguard" logger tree gets a handler;
    the host application's root logger is left alone.
    """
    renderer: Any = (
        structlog.dev.ConsoleRenderer() if settings.log_console else structlog.processors.JSONRenderer()
    )

    # Processors run on every log event
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,  # Auto-include bound context
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "payloadguard": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": renderer,
                    "foreign_pre_chain": processors,
                },
            },
            "handlers": {
                "payloadguard": {
                    "class": "logging.StreamHandler",
                    "formatter": "payloadguard",
                    "stream": sys.stdout,
                },
            },
            "loggers": {
                "payloadguard": {
                    "handlers": ["payloadguard"],
                    "level": settings.log_level,
                    "propagate": False,
                },
            },
        }
    )


# Configure once at module import
_settings = LoggingSettings()
configure_logging(_settings)


def get_logger(name: str) -> BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name, typically __name__

    Returns:
        Logger that outputs JSON with automatic context binding.

    Example:
        logger = get_logger(__name__)
        logger.warning("response_schema_violation", format="json", error_count=2)
        # Output: {"event": "response_schema_violation", "error_count": 2, ...}
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]
