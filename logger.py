# logger.py
import logging
import sys
from typing import Optional

from config import config


def setup_logging(level: Optional[str] = None):
    """Configures structured logging for the service."""
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format="%(asctime)s.%(msecs)03dZ [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stdout,
    )
