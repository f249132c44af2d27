"""Logging for Remindly.

Call setup_logging once at startup; everything else does
`from remindly.logger import logger`.

Sinks: colour console, `<log_file>` with every record at `log_level`, and
`<stem>_error<suffix>` with errors only, kept longer.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Union

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level:<8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}"

LOG_RETENTION = "14 days"
ERROR_LOG_RETENTION = "60 days"


def error_log_path(log_file: Union[str, Path]) -> Path:
    log_file = Path(log_file)
    return log_file.with_name(f"{log_file.stem}_error{log_file.suffix}")


def setup_logging(
    log_level: str,
    log_file: Union[str, Path],
    console_level: str = "INFO",
) -> None:
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_sink = {
        "format": FILE_FORMAT,
        "rotation": "10 MB",
        "compression": "zip",
        "encoding": "utf-8",
    }
    logger.configure(
        handlers=[
            {"sink": sys.stderr, "level": console_level.upper(), "format": CONSOLE_FORMAT, "colorize": True},
            {**file_sink, "sink": log_file, "level": log_level.upper(), "retention": LOG_RETENTION},
            {**file_sink, "sink": error_log_path(log_file), "level": "ERROR", "retention": ERROR_LOG_RETENTION},
        ]
    )


__all__ = ["setup_logging", "error_log_path", "logger"]
