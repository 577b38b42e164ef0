import logging
import os

# This module provides a consistent logging interface for gdiff

LOGGER_NAME = "gdiff"
LOG_LEVEL_ENV = "GDIFF_LOG_LEVEL"


def _env_level():
    return os.environ.get(LOG_LEVEL_ENV, 'INFO').upper()


def get_logger():
    # One handler on the package logger; modules share it instead of creating their own
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()

    # Keep records away from the root logger so nothing is printed twice
    logger.propagate = False

    formatter = logging.Formatter("\033[35mGDIFF\033[0m: %(levelname)-8s %(message)s")
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.setLevel(_env_level())
    return logger


def configure_third_party_logging(level=None):
    """Keep library loggers quiet unless gdiff itself is debugging."""
    level = (level or _env_level()).upper()
    logging.getLogger('asyncio').setLevel(logging.CRITICAL)

    # prompt_toolkit reports terminal capability probing at debug level
    if level == 'DEBUG':
        logging.getLogger('prompt_toolkit').setLevel(logging.DEBUG)
    else:
        logging.getLogger('prompt_toolkit').setLevel(logging.WARNING)


def set_log_level(level):
    """Change the level at runtime, e.g. for a --verbose flag."""
    logger.setLevel(level.upper())
    configure_third_party_logging(level)


logger = get_logger()
configure_third_party_logging()
