"""Debug switch and logging setup."""

import logging
import os

PACKAGE_LOGGER = "fieldkit"


def _is_debug_mode() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG_MODE", "false").lower() == "true"


def configure_logging(level: int | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Level is DEBUG when DEBUG_MODE=true, WARNING otherwise, unless given.
    Calling it again only updates the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if level is None:
        level = logging.DEBUG if _is_debug_mode() else logging.WARNING
    logger.setLevel(level)

    if not any(h.get_name() == PACKAGE_LOGGER for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(PACKAGE_LOGGER)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)

    return logger
