"""
Logging setup for the adapter.

Engine traffic is chatty (every info line is logged at DEBUG), so it goes
to a file rather than the console.
"""

import logging
from pathlib import Path
from typing import Optional


DEFAULT_LOG_FILE = Path.home() / ".uci_adapter" / "adapter.log"


def setup_logger(debug=True, log_file: Optional[Path] = None):
    """
    Setup file-based logger for UCI debugging.

    Args:
        debug: If True, log at DEBUG level; otherwise INFO level
        log_file: Log destination (default: ~/.uci_adapter/adapter.log)

    Returns:
        Configured logger instance
    """
    log_file = Path(log_file) if log_file else DEFAULT_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("uci_adapter")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    logger.handlers.clear()

    handler = logging.FileHandler(log_file, mode='w')
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
