"""Project-wide logger."""
import logging
import sys

LOGGER_NAME = "notation_client_server"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(processName)s | %(message)s"


def _build_logger() -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel(logging.INFO)
    return log


logger = _build_logger()


def set_log_level(level: str) -> None:
    """Set the level of the project logger, e.g. "DEBUG"."""
    logger.setLevel(level.upper())
