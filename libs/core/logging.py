from __future__ import annotations

import logging

import structlog


def configure_logging(service_name: str, level: str = "INFO") -> None:
    resolved_level = logging.getLevelName((level or "INFO").upper())
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO
    logging.basicConfig(level=resolved_level)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(resolved_level),
    )
    logger = structlog.get_logger(service=service_name)
    logger.info("logging_configured", level=logging.getLevelName(resolved_level))


def get_logger(service_name: str) -> structlog.BoundLogger:
    return structlog.get_logger(service=service_name)
