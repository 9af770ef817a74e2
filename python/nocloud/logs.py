import logging
import os
from typing import Any

import structlog

# Marks the handler installed by setup_logging so repeated calls replace it instead of stacking.
_HANDLER_NAME = "nocloud"

SUPPRESSED_EVENTS: set[str] = set()


def _load_suppressed_events() -> None:
    """Read NOCLOUD_SUPPRESS_EVENTS, a comma-separated list of event names to drop (e.g. "retry,delete_batch")."""
    global SUPPRESSED_EVENTS
    suppressed = os.getenv("NOCLOUD_SUPPRESS_EVENTS", "")
    SUPPRESSED_EVENTS = {e.strip() for e in suppressed.split(",") if e.strip()}


def _event_filter(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Structlog processor dropping events whose event_name is suppressed."""
    if event_dict.get("event_name") in SUPPRESSED_EVENTS:
        raise structlog.DropEvent
    return event_dict


def _shared_processors(dev_logs: bool) -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _event_filter,
        structlog.dev.set_exc_info if dev_logs else structlog.processors.format_exc_info,
    ]


def setup_logging(level: str | None = None, log_format: str | None = None) -> logging.Handler:
    """Route nocloud logs through `structlog` to stderr.

    The library never calls this itself; applications embedding the client opt in.
    Safe to call more than once: the previously installed handler is replaced.

    Args:
        level: Log level for the "nocloud" logger. Defaults to NOCLOUD_LOG_LEVEL or INFO.
        log_format: "dev" for human-readable console output, anything else for JSON lines.
            Defaults to NOCLOUD_LOG_FORMAT.

    Returns:
        The handler attached to the "nocloud" logger.
    """
    level = level or os.getenv("NOCLOUD_LOG_LEVEL", "INFO")
    dev_logs = (log_format or os.getenv("NOCLOUD_LOG_FORMAT", "")) == "dev"
    _load_suppressed_events()

    processors = _shared_processors(dev_logs)
    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer = structlog.dev.ConsoleRenderer() if dev_logs else structlog.processors.JSONRenderer()
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    nocloud_logger = logging.getLogger("nocloud")
    for existing in list(nocloud_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            nocloud_logger.removeHandler(existing)
    nocloud_logger.addHandler(handler)
    nocloud_logger.setLevel(level.upper())
    return handler
