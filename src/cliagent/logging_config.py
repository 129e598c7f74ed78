"""Log level helpers for the cliagent loggers."""

from __future__ import annotations

import logging

# Every module logs through logging.getLogger(__name__).
# Keep this list in sync when a module gains a logger.
CLIAGENT_LOGGERS = [
    "cliagent.context_builder",
    "cliagent.process_manager",
    "cliagent.relay",
    "cliagent.service",
    "cliagent.stream_parser",
]


def set_cliagent_log_level(level: int) -> None:
    """Set the logging level of every cliagent logger.

    Args:
        level: The logging level (e.g. ``logging.DEBUG``).
    """
    for logger_name in CLIAGENT_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)
    logging.getLogger("cliagent").setLevel(level)


def get_cliagent_loggers() -> list[str]:
    """Return a copy of the known cliagent logger names."""
    return list(CLIAGENT_LOGGERS)
