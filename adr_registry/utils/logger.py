"""Loguru setup for the generator CLI."""
from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

# Messages already carry a "[Component]" tag, so the console omits module:line.
_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}"


def setup_logger(log_level: str = "INFO", log_file: str | None = "logs/adr-registry.log") -> None:
    """
    Replace loguru's default sink with the generator's sinks.

    - stderr: short coloured lines
    - log_file: full lines with module:line, rotated at 10 MB, kept 7 days,
      zipped; pass None to log to the console only
    """
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT, colorize=True)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            format=_FILE_FORMAT,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            enqueue=True,
        )

    logger.debug(f"Logger initialised | level={level} | file={log_file or '-'}")
