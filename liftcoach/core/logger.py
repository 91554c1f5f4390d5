"""Loguru sinks for the API server and the developer CLI.

Console output is human readable. The optional file sink either repeats the
console line without colors or, with ``json_file``, writes one JSON record per
line so that session ids and user ids can be searched by log shippers.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    *,
    json_file: bool = False,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Replace loguru's default sink with the LiftCoach sinks.

    Args:
        level: Minimum level for every sink
        log_file: Also write to this file (parent folders are created)
        json_file: Serialize file records as JSON lines
        rotation: When the file sink rolls over
        retention: How long rolled files are kept
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        if json_file:
            logger.add(path, level=level, serialize=True, rotation=rotation, retention=retention)
        else:
            logger.add(
                path,
                format=FILE_FORMAT,
                level=level,
                rotation=rotation,
                retention=retention,
                compression="zip",
                backtrace=True,
                diagnose=False,
            )

    logger.debug(f"Logging configured level={level} file={log_file} json={json_file}")
