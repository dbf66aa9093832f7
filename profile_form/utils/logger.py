"""Logging setup for the profile form package."""

import logging
import os
import sys
from typing import Optional

PACKAGE_LOGGER = "profile_form"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def default_level() -> int:
    """Level from PROFILE_FORM_LOG_LEVEL, INFO when unset or unknown."""
    level = logging.getLevelName(os.getenv("PROFILE_FORM_LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Set up the package logger.
    
    The stdout handler is attached once; every module logger below
    "profile_form" writes through it.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        # Streamlit configures the root logger too
        logger.propagate = False
    logger.setLevel(level if level is not None else default_level())
    return logger


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a logger under the package logger, configuring it on first use."""
    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        configure_logging()
    
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
