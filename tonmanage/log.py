import sys
from typing import Optional

from loguru import logger

LOG_FORMAT = "> {time:HH:mm:ss.SSS} - {level} {message}"


def setup_logger(level: str = "INFO", log_file: Optional[str] = None, development: bool = False):
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, backtrace=development, diagnose=development)
    if log_file:
        logger.add(log_file, level="DEBUG")
    return logger
