"""structlog setup shared by the API and the services.

Development gets a colored console renderer. ``QB_LOG_FORMAT=json`` switches
to one JSON object per line, tagged with the app name and environment.
Request ids are bound per request by the API middleware through
``bind_context`` and dropped again with ``clear_context``.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from quotebook.config import Settings, get_settings

QUIET_LOGGERS = ("httpcore", "httpx", "uvicorn.access", "asyncio")


def _app_fields(settings: Settings) -> Processor:
    def add_app_fields(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("app", settings.app_name)
        event_dict.setdefault("environment", settings.environment.value)
        return event_dict

    return add_app_fields


def build_processors(settings: Settings) -> list[Processor]:
    """Return the processor chain for ``settings.log_format``."""
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.log_format == "json":
        chain += [
            _app_fields(settings),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return chain


def configure_logging(settings: Settings | None = None) -> None:
    """Route structlog through stdlib logging at the configured level.

    Call once at startup, before the first log line.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.value)

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(format="%(message)s", level=level, handlers=handlers)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
