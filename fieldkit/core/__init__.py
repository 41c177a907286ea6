"""Configuration, logging and errors."""

from .config import Config, get_config, load_config, set_config
from .debug import configure_logging
from .errors import ImageProcessingError, NoImageError

__all__ = [
    "Config",
    "ImageProcessingError",
    "NoImageError",
    "configure_logging",
    "get_config",
    "load_config",
    "set_config",
]
