"""Hoodie Python SDK - Client core for talking to a Hoodie server."""

__version__ = "1.0.0"

from .client import HoodieClient, create_client
from .env_config import load_config_from_env
from .errors import (
    HoodieConfigurationError,
    HoodieConnectionError,
    HoodieError,
    HoodieExtensionError,
    HoodieHTTPError,
    HoodieRequestError,
    HoodieTimeoutError,
)
from .events import EventBus
from .extensions import ExtensionRegistry
from .http import HoodieHTTPClient
from .models import HoodieConfig, RequestOptions
from .monitor import ConnectionMonitor
from .remote import RemoteStore
from .utils import PendingRequest

__all__ = [
    "ConnectionMonitor",
    "EventBus",
    "ExtensionRegistry",
    "HoodieClient",
    "HoodieConfig",
    "HoodieConfigurationError",
    "HoodieConnectionError",
    "HoodieError",
    "HoodieExtensionError",
    "HoodieHTTPClient",
    "HoodieHTTPError",
    "HoodieRequestError",
    "HoodieTimeoutError",
    "PendingRequest",
    "RemoteStore",
    "RequestOptions",
    "create_client",
    "load_config_from_env",
    "__version__",
]
