"""
Environment variable configuration loader for the Hoodie SDK.

Lets an application point the SDK at a Hoodie server and tune connection
checks without code changes. A ``.env`` file in the working directory is
honoured via python-dotenv.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

from .models import HoodieConfig

logger = logging.getLogger(__name__)


def load_config_from_env(dotenv: bool = True) -> HoodieConfig:
    """
    Load SDK configuration from environment variables.

    Environment variables:
        HOODIE_BASE_URL: Base URL of the Hoodie server
        HOODIE_TIMEOUT: Request timeout in seconds
        HOODIE_HEALTHY_INTERVAL: Seconds between connection checks while online
        HOODIE_DEGRADED_INTERVAL: Seconds between connection checks while offline
        HOODIE_USER_AGENT: User agent string
        HOODIE_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR)

    Args:
        dotenv: Read a ``.env`` file before looking at the environment

    Returns:
        HoodieConfig: Configuration object loaded from environment
    """
    if dotenv:
        load_dotenv()

    config = HoodieConfig()

    if base_url := os.getenv('HOODIE_BASE_URL'):
        config.base_url = base_url

    for name in ('timeout', 'healthy_interval', 'degraded_interval'):
        value = _parse_float(f'HOODIE_{name.upper()}', getattr(config, name))
        if value is not None:
            setattr(config, name, value)

    if user_agent := os.getenv('HOODIE_USER_AGENT'):
        config.user_agent = user_agent

    if log_level := os.getenv('HOODIE_LOG_LEVEL'):
        config.log_level = log_level

    return config


def _parse_float(key: str, default: float) -> Optional[float]:
    """Read a positive float, warning about and ignoring bad values."""
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid {key} value: {raw}, using default: {default}")
        return None
    if value <= 0:
        logger.warning(f"Invalid {key} value: {raw}, using default: {default}")
        return None
    return value
