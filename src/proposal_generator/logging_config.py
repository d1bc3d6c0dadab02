"""Logging configuration for the proposal generator."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(f"proposal_generator.{name}")


def configure_logging(level: str = "WARNING") -> None:
    """Send proposal_generator log records to stderr at the given level."""
    logger = logging.getLogger("proposal_generator")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
