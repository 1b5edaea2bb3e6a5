"""
Structured logging for meetwatch, using structlog wrapping stdlib.

Refresh, timer and lifecycle events are emitted as key/value events. They
render as readable console lines for `meetwatch watch`, or as JSON lines
when a host shell collects them.

Environment:
    MEETWATCH_LOG_LEVEL   DEBUG / INFO / WARNING / ERROR (default INFO)
    MEETWATCH_LOG_FORMAT  "json" for JSON lines, anything else for console

Usage:
    from meetwatch.logging_config import get_logger, setup_logging

    setup_logging()
    logger = get_logger(__name__)
    logger.info("meetings_refreshed", meetings=3)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

import structlog


if TYPE_CHECKING:
    from meetwatch.config import LoggingConfig


# Third-party loggers held at WARNING or above
QUIET_LOGGERS = ("asyncio", "icalendar")

# Every event carries level, logger name and an ISO timestamp
EVENT_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
)


def _resolve_level(level: str | None) -> int:
    if level is None:
        level = os.environ.get("MEETWATCH_LOG_LEVEL", "INFO")
    return getattr(logging, level.upper(), logging.INFO)


def _resolve_json(json_output: bool | None) -> bool:
    if json_output is None:
        return os.environ.get("MEETWATCH_LOG_FORMAT", "").lower() == "json"
    return json_output


def _render_chain(json_output: bool) -> list[structlog.types.Processor]:
    """Processors run by the stdlib handler, ending in the renderer."""
    chain: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if json_output:
        # JSON has no native traceback form; flatten exc_info to a string
        chain += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        chain.append(structlog.dev.ConsoleRenderer())
    return chain


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Route structlog through one stderr handler on the root logger.

    Calling it again replaces the handler, so the CLI can reconfigure after
    loading args/meetwatch.yaml.
    """
    numeric_level = _resolve_level(level)

    structlog.configure(
        processors=[*EVENT_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processors=_render_chain(_resolve_json(json_output)))
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def setup_logging_from_config(config: LoggingConfig) -> None:
    """Apply the `logging:` section of args/meetwatch.yaml.

    Environment variables still win so a one-off `MEETWATCH_LOG_LEVEL=DEBUG`
    works without editing the YAML file.
    """
    level = os.environ.get("MEETWATCH_LOG_LEVEL") or config.level
    json_output = None if os.environ.get("MEETWATCH_LOG_FORMAT") else config.json_output
    setup_logging(level=level, json_output=json_output)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging", "setup_logging_from_config"]
