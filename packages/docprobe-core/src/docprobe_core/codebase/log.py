"""Logging setup shared by the docprobe packages.

Every module logs through a named logger under ``docprobe.*``. Applications
call ``configure_logging`` once; library code never installs handlers.
"""

import logging

_ROOT_LOGGER_NAME = "docprobe"


def configure_logging(level: int = logging.WARNING) -> None:
    """
    Ensure the docprobe logger has a handler in case the app didn't configure logging.
    Safe to call multiple times.
    """
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
