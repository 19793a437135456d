"""Logging configuration for notesite.

Usage in other modules:
    import logging
    log = logging.getLogger(__name__)

The log level can be configured via the NOTESITE_LOG_LEVEL environment variable
(DEBUG, INFO, WARNING, ERROR). INFO is the default.
"""

import logging
import os
import sys


def configure_logging(level_name: str | None = None) -> None:
    """Configure logging for the notesite package.

    Call this once at application startup (cli.py). Subsequent calls are no-ops.

    Args:
        level_name: Explicit level, overriding NOTESITE_LOG_LEVEL.
    """
    root_logger = logging.getLogger("notesite")

    if root_logger.handlers:
        return

    level_name = (level_name or os.environ.get("NOTESITE_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(name)s: %(message)s"))

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Avoid duplicate messages through the root logger
    root_logger.propagate = False


def set_quiet_mode(quiet: bool) -> None:
    """Only show warnings and errors from notesite loggers."""
    logging.getLogger("notesite").setLevel(logging.WARNING if quiet else logging.INFO)
