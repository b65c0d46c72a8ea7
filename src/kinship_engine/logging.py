"""Structlog-based logging for the kinship engine.

Library code logs through ``get_logger`` and never prints. Events are
rendered as JSON and handed to the stdlib ``kinship_engine`` logger, which
writes to stderr so CLI output on stdout stays clean.
"""
from __future__ import annotations

import logging
import sys
from typing import Literal

import structlog

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ROOT_LOGGER = "kinship_engine"


def configure_logging(level: LogLevel | str = "INFO") -> None:
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric)
    logging.getLogger(ROOT_LOGGER).setLevel(numeric)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = ROOT_LOGGER):
    return structlog.get_logger(name)
