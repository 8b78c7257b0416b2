"""Logging helpers shared across the package."""

import logging


def get_logger(name: str) -> logging.Logger:
    """Return the standard library logger for a module.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger configured by ``configure_logging`` at application start
    """
    return logging.getLogger(name)


def log_exception(
    message: str,
    logger: logging.Logger | None = None,
    **attributes: str | int | float | bool,
) -> None:
    """Log an ERROR with the active exception's traceback attached.

    Must be called from inside an ``except`` block.

    Args:
        message: The log message
        logger: Logger to use (default: the ``synthmetrics`` logger)
        **attributes: Additional structured fields
    """
    (logger or logging.getLogger("synthmetrics")).exception(
        message, extra=attributes
    )
