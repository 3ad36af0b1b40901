"""Structured logging for the voting engine.

Components log through ``structlog.get_logger()`` and bind a ``component``
key. This module installs the processor chain once per process and scopes a
request ID over a block of engine calls.
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

import structlog

from voteboard.settings import EngineSettings


def _renderer(json_format: bool) -> structlog.types.Processor:
    if json_format:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    level: int | str = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Install the structlog processor chain.

    Log lines carry the level, a UTC ISO timestamp and any context bound
    through ``request_context``. Events below ``level`` are dropped before
    rendering.

    Args:
        level: Logging level, numeric or name (default: INFO).
        output: Output stream (default: stderr).
        json_format: Render JSON lines instead of console output.
    """
    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _renderer(json_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # redis-py reports connection trouble through the standard library.
    logging.basicConfig(
        format="%(levelname)s %(name)s %(message)s",
        stream=output,
        level=level,
        force=True,
    )


def configure_from_settings(
    settings: EngineSettings,
    output: TextIO = sys.stderr,
) -> None:
    """Configure logging from ``log_level`` and ``log_json`` settings."""
    configure_logging(settings.log_level, output=output, json_format=settings.log_json)


@contextmanager
def request_context(request_id: str | None = None) -> Iterator[str]:
    """Attach a request ID to every log line emitted inside the block.

    Args:
        request_id: Caller's request ID; a random one is generated if omitted.

    Yields:
        The request ID in effect.
    """
    request_id = request_id or uuid.uuid4().hex
    with structlog.contextvars.bound_contextvars(request_id=request_id):
        yield request_id
