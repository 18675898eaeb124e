import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "pepstash"

_LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[Path] = None,
    name: str = LOGGER_NAME,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure and return the package logger with a console and an optional file handler.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2 or more=DEBUG
        log_file: Optional path to a log file
        name: Logger name (default: pepstash)
        format_string: Custom format string for log messages

    Returns:
        logging.Logger: Configured logger instance
    """
    if format_string is None:
        format_string = "[%(asctime)s] %(levelname)s [%(name)s.%(funcName)s:%(lineno)d] %(message)s"

    level = _LEVELS.get(verbosity, logging.DEBUG)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent adding handlers multiple times
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_command(logger: logging.Logger) -> None:
    """
    Log the command used to execute the script.

    Args:
        logger: Logger instance to use
    """
    command = f"{Path(sys.argv[0]).name} {' '.join(sys.argv[1:])}"
    logger.info("Script command: %s", command)
