"""structlog configuration for kuiper.

Log lines go to stderr so they never mix with response output. The level
comes from KUIPER_LOG (e.g. KUIPER_LOG=debug), defaulting to warning.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

LOG_ENV_VAR = "KUIPER_LOG"
DEFAULT_LEVEL = "warning"


def level_from_env(env: dict[str, str] | None = None) -> int:
    """Translate KUIPER_LOG into a logging level; unknown names fall back."""
    value = (env if env is not None else os.environ).get(LOG_ENV_VAR, DEFAULT_LEVEL)
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        return logging.WARNING
    return level


def configure_logging(*, verbose: bool = False) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Force DEBUG-level output regardless of KUIPER_LOG.
    """
    kuiper_level = logging.DEBUG if verbose else level_from_env()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("kuiper").setLevel(kuiper_level)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
