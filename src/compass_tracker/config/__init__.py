"""Configuration module for the Compass tracker."""

from .logger_config import setup_logging
from .settings import COMPASS_VERSION, CompassConfig, LoggingConfig, SenderConfig

__all__ = ["COMPASS_VERSION", "CompassConfig", "LoggingConfig", "SenderConfig", "setup_logging"]
