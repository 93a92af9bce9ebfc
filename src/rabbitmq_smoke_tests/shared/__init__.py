"""Shared modules for rabbitmq-smoke-tests.

Used by both the pytest suite and the rabbitmq-smoke console command.
"""

from .logging import configure_logging, get_logger, scenario_context
from .names import random_name

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "scenario_context",
    # Names
    "random_name",
]
