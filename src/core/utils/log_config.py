"""
Logging setup.

Replaces loguru's default stderr sink with one at the configured level and
optionally adds a rotating file sink.
"""

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure loguru sinks.

    Args:
        level: Minimum level for every sink
        log_file: Optional path of a file sink, rotated at 10 MB
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)

    if log_file:
        logger.add(log_file, level=level.upper(), rotation="10 MB", retention=5, enqueue=True)

    logger.debug(f"Logging configured: level={level.upper()}, file={log_file}")
