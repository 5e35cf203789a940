"""JSON event logging for the finder.

Events are snake_case names with keyword fields (``search_failed``,
``cache_write_failed``, ``rate_limit_updated``) so a log shipper can key on
them. Every event carries ``service="partnergrid"``.
"""

from __future__ import annotations

import logging

import structlog

SERVICE_NAME = "partnergrid"


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.set_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(service=SERVICE_NAME)

__all__ = ["SERVICE_NAME", "configure_logging", "logger"]
