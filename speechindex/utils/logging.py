"""Structured logging setup using structlog.

One shared processor chain (context vars, log level, timestamps, stack
info) ends in either a ConsoleRenderer for interactive runs or a
JSONRenderer for batch hosts (``APP_ENV=production``).  Standard-library
``logging`` is routed through the same chain so vendor SDK output
(chromadb, pinecone, httpx) looks like ours.  Everything goes to stderr;
stdout is reserved for command summaries.
"""

import logging
import sys

import structlog

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL (any case).
                   Unknown values fall back to INFO.
        json_output: Render JSON lines instead of console output.
    """
    level_name = log_level.upper() if log_level.upper() in _LEVELS else "INFO"
    level = logging.getLevelName(level_name)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
