"""
Logging configuration for marksync.
"""

import logging
import sys
from datetime import datetime
from typing import Optional

from .config import get_logs_dir

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up root logging.

    Args:
        level: Log level name, e.g. "INFO" or "DEBUG"
        log_file: Optional log file name, created under ~/.marksync/logs
    """
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        stem = log_file.rsplit(".", 1)[0]
        log_path = get_logs_dir() / f"{stem}_{timestamp}.log"
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    # Reduce noise from some libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
