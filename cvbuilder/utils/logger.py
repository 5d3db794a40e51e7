"""
Loguru setup for the CV builder.

All modules log through ``from loguru import logger``; this module only
decides where the records go.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | {name} | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{line} | {message}"


def setup_logger(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure loguru sinks.

    Console output goes to stderr at ``level``. When ``log_file`` is given,
    everything down to DEBUG is also written there.

    Args:
        level: Minimum level for console output
        log_file: Optional path of a log file
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level.upper(), colorize=True)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, format=FILE_FORMAT, level="DEBUG", rotation="5 MB")

    logger.debug(f"Logger configured (level={level.upper()}, file={log_file})")
