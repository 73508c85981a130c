"""Centralized logging setup for the intake-form OCR assistant.

Provides a structured logging configuration with consistent formatting
across all modules, and keeps credentials out of log output.
"""

import logging
import sys

_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a standard format.

    HTTP client libraries are capped at WARNING so request lines carrying
    operation URLs do not flood the output.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()

    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Get a named logger instance.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(name)


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Mask a credential for log output, keeping only its last characters.

    Args:
        value: Secret to mask, such as an API key.
        visible: Number of trailing characters left readable.

    Returns:
        Masked representation, or ``"<empty>"`` when no value is given.
    """
    if not value:
        return "<empty>"
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
