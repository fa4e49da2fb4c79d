"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from netfetch.fetch.redact import redact_url_credentials
from netfetch.settings.app import AppSettings, get_settings


# Standard library loggers that print full request URLs at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def redact_event_urls(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Strip URL credentials from every string value of an event."""
    for key, value in event_dict.items():
        if isinstance(value, str) and "@" in value:
            event_dict[key] = redact_url_credentials(value)
    return event_dict


def _build_processors(json_format: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_event_urls,
    ]
    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog for fetch events.

    Loggers are not cached, so module-level loggers pick up a later
    reconfiguration. httpx and httpcore are held at WARNING because their
    request lines carry unredacted URLs.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Render JSON lines instead of console text.
    """
    structlog.configure(
        processors=_build_processors(json_format),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def configure_logging_from_settings(
    settings: AppSettings | None = None,
    output: TextIO = sys.stderr,
) -> None:
    """Configure logging from NETFETCH_LOG_LEVEL and NETFETCH_LOG_JSON.

    Args:
        settings: Settings to use; loaded from the environment if omitted.
        output: Output stream (default: stderr).
    """
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level_value(),
        output=output,
        json_format=settings.log_json,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def bind_request_context(request_id: str) -> None:
    """Tag all log events on the current context with a fetch request id."""
    structlog.contextvars.bind_contextvars(request_id=request_id)


def clear_request_context() -> None:
    """Remove the request id bound by ``bind_request_context``."""
    structlog.contextvars.unbind_contextvars("request_id")
