"""Loguru logging configuration.

Call setup_logging() once at cold start to configure sinks.
All other modules simply do `from loguru import logger` and log normally.
"""

import sys
from pathlib import Path

from loguru import logger


def setup_logging(level: str = "INFO", log_file: str | Path | None = None) -> None:
    """Configure loguru with a stderr sink and an optional rotating file sink.

    Lambda ships stderr to CloudWatch, so the file sink is only useful for
    local runs.

    Args:
        level: Minimum log level (default INFO).
        log_file: Path of the rotating log file. No file sink when empty.
    """
    # Remove the default stderr handler so we can reconfigure it
    logger.remove()

    # Tracebacks must not print local variables; some hold card data.
    logger.add(
        sys.stderr,
        level=level,
        diagnose=False,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    )

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            level=level,
            rotation="3 hours",
            retention="1 day",
            diagnose=False,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
        )
