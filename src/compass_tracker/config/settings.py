"""Configuration management for the Compass tracker.

This module provides dataclass-based configuration with environment
variable overrides, mirroring what a host application would otherwise
read from its bundle.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

COMPASS_VERSION = "2.0"


@dataclass
class SenderConfig:
    """Configuration for the ingest transport and RFV lookups."""

    api_base_url: str = "http://localhost:8000"  # Base URL of the Compass API
    ingest_endpoint: str = "/ingest.php"  # Tick payload endpoint
    rfv_endpoint: str = "/rfv.php"  # RFV lookup endpoint

    # HTTP settings
    timeout_seconds: int = 10  # Request timeout
    user_agent: str = f"CompassSDK/{COMPASS_VERSION}"


@dataclass
class LoggingConfig:
    """Configuration for loguru sinks."""

    level: str = "INFO"
    to_console: bool = True
    to_file: bool = False
    file_path: Path = field(default_factory=lambda: Path.home() / ".compass" / "logs" / "compass.log")
    rotation: str = "10 MB"
    retention: str = "7 days"


@dataclass
class CompassConfig:
    """Complete Compass tracker configuration."""

    # Account identification
    account_id: Optional[int] = None
    compass_version: str = COMPASS_VERSION

    # Component configurations
    sender: SenderConfig = field(default_factory=SenderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Persistent visit storage
    storage_dir: Path = field(default_factory=lambda: Path.home() / ".compass")

    # Scheduling
    time_scale: float = 1.0  # Multiplier applied to every tick deadline
    scroll_sample_timeout: float = 1.0  # Seconds to wait for a UI measurement

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        if account_id := os.getenv("COMPASS_ACCOUNT_ID"):
            try:
                self.account_id = int(account_id)
            except ValueError:
                logger.warning(f"Invalid account id: {account_id}")

        if api_base_url := os.getenv("COMPASS_API_BASE_URL"):
            self.sender.api_base_url = api_base_url

        if timeout := os.getenv("COMPASS_TIMEOUT_SECONDS"):
            try:
                self.sender.timeout_seconds = int(timeout)
            except ValueError:
                logger.warning(f"Invalid timeout: {timeout}")

        if storage_dir := os.getenv("COMPASS_STORAGE_DIR"):
            self.storage_dir = Path(storage_dir)

        if log_level := os.getenv("COMPASS_LOG_LEVEL"):
            self.logging.level = log_level.upper()

        if time_scale := os.getenv("COMPASS_TIME_SCALE"):
            try:
                self.time_scale = float(time_scale)
            except ValueError:
                logger.warning(f"Invalid time scale: {time_scale}")

    def get_sender_config(self) -> SenderConfig:
        """Get configuration for the ingest sender."""
        return self.sender

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.sender.api_base_url:
            errors.append("API base URL is required")

        if self.account_id is None:
            errors.append("Account ID is required")

        if self.sender.timeout_seconds <= 0:
            errors.append("Timeout must be positive")

        if self.time_scale <= 0:
            errors.append("Time scale must be positive")

        if self.scroll_sample_timeout <= 0:
            errors.append("Scroll sample timeout must be positive")

        return len(errors) == 0, errors
