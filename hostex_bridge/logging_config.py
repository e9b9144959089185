from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, Optional, cast

import structlog

from hostex_bridge.config import LOG_LEVEL

# Type alias for structlog processor
Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

SERVICE_NAME = "hostex-bridge"

# HTTP client and server libraries that log every request
NOISY_LOGGERS = ("urllib3", "requests", "uvicorn.access")


def add_service_name(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Add ``service`` to every log line."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def build_processors(level: str) -> list[Processor]:
    """
    Processor chain for the given level.

    DEBUG renders coloured console output. Every other level renders one JSON
    object per line, with tracebacks from ``logger.exception`` flattened into
    an ``exception`` string field.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_service_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if level == "DEBUG":
        processors.append(cast(Processor, structlog.dev.ConsoleRenderer(colors=True)))
    else:
        processors.append(structlog.processors.format_exc_info)
        # Non-ASCII text (guest names, emoji titles) is written as-is
        processors.append(cast(Processor, structlog.processors.JSONRenderer(ensure_ascii=False)))
    return processors


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configures structured logging globally using structlog.

    Args:
        level (Optional[str]): Log level name; defaults to LOG_LEVEL from the
            environment. The jobs command passes its --log-level here.
    """
    level_name = (level or LOG_LEVEL).upper()

    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s:%(lineno)d: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=level_name,
    )

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    structlog.configure(
        processors=build_processors(level_name),
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level_name)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
