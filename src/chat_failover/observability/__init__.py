"""Logging setup: structlog events rendered through the stdlib root handler."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from chat_failover.config import Settings


def configure_logging(log_level: str = "INFO", *, json_logs: bool = False) -> None:
    """Send structlog and stdlib records to stdout as JSON or console lines."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )
    if json_logs:
        pre_chain.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    structlog.get_logger(__name__).info(
        "logging_configured",
        log_level=log_level.upper(),
        renderer="json" if json_logs else "console",
    )


def configure_logging_from_settings(settings: Settings) -> None:
    configure_logging(settings.log_level, json_logs=settings.json_logs)


__all__ = ["configure_logging", "configure_logging_from_settings"]
