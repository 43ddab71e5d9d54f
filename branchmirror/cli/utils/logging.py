import logging
import sys


logger = logging.getLogger("branchmirror")


class LevelPrefixFormatter(logging.Formatter):
    """Plain messages for info and debug, level-prefixed warnings and errors."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname}: {message}"
        return message


def configure_logging(debug: bool):
    """
    Configures the logging system based on the debug flag.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(LevelPrefixFormatter("%(message)s"))
        logger.addHandler(handler)
