"""
mcbin Configuration Settings

This module contains the client-side defaults for mcbin. Every value can be
overridden through the environment before the package is imported.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Client configuration settings."""

    # Text handling
    ENCODING: str = os.environ.get("MCBIN_ENCODING", "utf-8")

    # Stream settings
    READ_BUFFER_SIZE: int = int(os.environ.get("MCBIN_READ_BUFFER_SIZE", "4096"))

    # Item settings
    DEFAULT_FLAGS: int = 0
    DEFAULT_EXPIRATION: int = 0  # 0 means no expiration

    # Logging settings
    DEBUG: bool = os.environ.get("MCBIN_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("MCBIN_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()


def setup_logging(debug: Optional[bool] = None) -> None:
    """
    Configure root logging for applications embedding mcbin.

    The library itself never calls this; it only emits records through
    module-level loggers.

    Args:
        debug: Force DEBUG level. Defaults to settings.DEBUG, falling back
               to settings.LOG_LEVEL when debugging is off.
    """
    if debug is None:
        debug = settings.DEBUG

    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )
