"""Logging configuration for smoke test runs.

structlog renders to stderr, human-readable on a terminal and as JSON lines
for CI log collection. The scenario being run is bound as context so every
line emitted while it runs carries its id.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

# Libraries whose per-request chatter drowns out the poll loop
NOISY_LOGGERS = ("urllib3", "requests")


def configure_logging(
    level: str = "info",
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Configure stdlib logging and structlog for a run.

    Called once by the rabbitmq-smoke command or by the smoke suite's
    pytest_configure.

    Args:
        level: Log level name (debug, info, warning, error)
        log_file: Write to this file instead of stderr
        json_output: Render JSON lines instead of console output
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(str(log_file))
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    logging.basicConfig(level=log_level, handlers=[handler], format="%(message)s", force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty() and not log_file)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger for a module."""
    return structlog.get_logger(name)


@contextmanager
def scenario_context(scenario_id: str) -> Iterator[None]:
    """Bind the scenario id to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(scenario=scenario_id):
        yield
