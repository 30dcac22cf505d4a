"""
Logging setup shared by the stdio and HTTP servers.

Records always go to stderr: on the stdio transport stdout is the protocol
channel.
"""

import logging
import os
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
DEFAULT_LEVEL = logging.WARNING

# Per-request lines from the HTTP stack and scheduler ticks at INFO
LIBRARY_LOGGERS = ("httpx", "httpcore", "mcp", "uvicorn.access", "apscheduler")


def get_log_level() -> int:
    """Resolve the level from PLANKA_LOG_LEVEL, falling back to LOG_LEVEL.

    Accepts a level name in any case or a numeric level. Unset or
    unrecognised values give WARNING.
    """
    raw = (os.getenv("PLANKA_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "").strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else DEFAULT_LEVEL


def configure_logging(verbose: bool = False, stream: TextIO | None = None) -> int:
    """
    Install the root handler and quiet third-party loggers.

    Library loggers never go below WARNING, even with -v, so debug output
    stays about Planka calls rather than HTTP frames.

    Args:
        verbose: Force DEBUG regardless of the environment
        stream: Destination for records (default: stderr)

    Returns:
        The level applied to the root logger
    """
    level = logging.DEBUG if verbose else get_log_level()

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=stream or sys.stderr,
        force=True,  # the second server entry point may reconfigure
    )

    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return level
