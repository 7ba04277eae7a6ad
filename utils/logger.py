"""Logging utilities for the illustration pipeline."""
import logging
from typing import Optional
from rich.logging import RichHandler
from rich.console import Console
import config

console = Console(stderr=True)

# Chatty client libraries; their request lines would drown the pipeline log
for _noisy in ("httpx", "httpcore", "anthropic"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Set up a logger that writes through rich.

    Args:
        name: Logger name (usually the module's __name__)
        level: Logging level, defaults to LOG_LEVEL from the environment

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else config.LOG_LEVEL)

    # Avoid adding multiple handlers
    if not logger.handlers:
        handler = RichHandler(
            rich_tracebacks=True,
            console=console,
            show_time=True,
            show_path=False,
            markup=False
        )
        handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
