"""
Logging for the fractald package.

Every module logs through a child of the "fractald" logger and never adds
handlers itself. The command line calls configure_logging() once; library
users who never call it get a NullHandler and no output.
"""

import logging
import logging.handlers

ROOT_NAME = "fractald"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Rotating log file defaults
LOG_FILE_BYTES = 512 * 1024
LOG_FILE_BACKUPS = 2


def get_logger(child=None):
    """Package logger, or the named child of it (e.g. "renderer")."""
    return logging.getLogger(ROOT_NAME if not child else ROOT_NAME + "." + child)


def configure_logging(level=logging.INFO, console=True, log_file=None,
                      max_bytes=LOG_FILE_BYTES, backups=LOG_FILE_BACKUPS):
    """
    Install handlers on the package logger, replacing any from a previous call.

    Args:
        level: Threshold for the logger and its handlers
        console: Log to stderr
        log_file: Path of a size-rotated log file, or None
        max_bytes, backups: Rotation settings for log_file

    Returns:
        The package logger
    """
    logger = get_logger()
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(level)
    logger.propagate = False
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    handlers = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    if not handlers:
        logger.addHandler(logging.NullHandler())
    return logger
