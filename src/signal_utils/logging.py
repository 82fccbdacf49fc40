"""Define utility functions to log messages and errors from anywhere in the package."""

import logging

LOGGER_NAME = "signal_utils"

_logger = logging.getLogger(LOGGER_NAME)


def log_info(message: str) -> None:
    """Log a message to the available information output channels.

    :param message: Message to be logged as information
    """
    _logger.info(message)


def log_error(message: str) -> None:
    """Log a message to the available error output channels.

    :param message: Message to be logged as an error
    """
    _logger.error(message)
