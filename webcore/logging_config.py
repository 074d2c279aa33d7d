"""
webcore — Logging Configuration
================================

What:  One-call logging setup for services built on webcore.
How:   Configures the root logger with a stdout handler. The access logger
       ("webcore.access") emits one "• <status> <duration> <size> <path>"
       line per request through it.
When:  Called once by the hosting application before serving requests.
"""

import logging
import sys
from typing import Optional

from webcore.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the whole process.

    Args:
        level: Level name; defaults to ``settings.log_level``
    """
    level_name = (level or settings.log_level).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from the ASGI server and test transport
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
