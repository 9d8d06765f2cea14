"""Logging setup."""

import logging
import sys
from typing import List, Optional, Tuple

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# (logger name, handler) pairs added by setup_logging
_installed: List[Tuple[str, logging.Handler]] = []


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    name: str = "mcts_extract"
) -> logging.Logger:
    """Send extraction logs to stdout and optionally a file.

    Handlers installed by a previous call are removed first, so experiments
    can switch log files between runs.

    Args:
        level: Logging level
        log_file: Optional log file path
        name: Logger to configure ("" for the root logger)

    Returns:
        The configured logger
    """
    while _installed:
        owner, handler = _installed.pop()
        logging.getLogger(owner).removeHandler(handler)
        handler.close()

    logger = logging.getLogger(name)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        _installed.append((name, handler))
    logger.setLevel(level)
    return logger
