"""kv-storage - awaitable data source over a Redis key/value and list store"""

from ._version import version as __version__
from .config import ServiceSettings, Settings, StorageSettings, load_settings
from .errors import InvalidArgument, NotConnected, StorageError, StoreError
from .logger import Level, configure, configure_defaults, get_logger, log
from .storage import Storage, StorageOptions


__all__ = [
    "InvalidArgument",
    "Level",
    "NotConnected",
    "ServiceSettings",
    "Settings",
    "Storage",
    "StorageError",
    "StorageOptions",
    "StorageSettings",
    "StoreError",
    "__version__",
    "configure",
    "configure_defaults",
    "get_logger",
    "load_settings",
    "log",
]
