"""Compass tracker - page-view session tracking with adaptive heartbeats."""

from .config import CompassConfig, setup_logging
from .core import CompassTracker, UserType

__version__ = "2.0.0"

__all__ = ["CompassTracker", "CompassConfig", "UserType", "setup_logging"]
