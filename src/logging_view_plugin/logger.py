"""Logger setup for the plugin backend.

Level names follow the backend's command line: trace, debug, info, warning,
error, fatal and panic. ``trace`` sits below ``DEBUG`` and turns on request
logging.
"""

import logging

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOGGER_NAME = "logging_view_plugin"

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


class InvalidLogLevelError(ValueError):
    pass


def parse_level(name: str) -> int:
    try:
        return _LEVELS[name.strip().lower()]
    except KeyError:
        raise InvalidLogLevelError(f"not a valid log level: {name!r}") from None


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure the root handler and return the backend's logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger
