import logging

from app.core.config import settings
from pkg.log.logger import get_logger as _pkg_logger


def get_logger(name: str) -> logging.Logger:
    """Simple logger factory, level taken from settings."""
    return _pkg_logger(name, settings.LOG_LEVEL)


# Example: logger = get_logger(__name__)
