"""Logging configuration for the fade merge service.

Both stdlib records (``logger.info(event, extra={...})``) and structlog
events are rendered as one JSON object per line, so ``extra`` fields such as
the engine's exit code and stderr tail reach the output.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

# Per-request chatter from the HTTP and object store clients.
NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "boto3", "s3transfer")

SHARED_PROCESSORS = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
)


def build_formatter() -> structlog.stdlib.ProcessorFormatter:
    """JSON formatter for the root handler."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[*SHARED_PROCESSORS, structlog.stdlib.ExtraAdder()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default=str),
        ],
    )


class _ServiceHandler(logging.StreamHandler):
    """Root handler installed by :func:`configure_logging`."""


def configure_logging(level: str = "INFO", *, stream: IO[str] | None = None) -> None:
    """Configure stdlib logging and structlog JSON rendering.

    Pipeline events carry the ``request_id`` bound by the merge service.
    Calling it again replaces the previously installed handler.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, _ServiceHandler):
            root.removeHandler(handler)
    handler = _ServiceHandler(stream or sys.stderr)
    handler.setFormatter(build_formatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
