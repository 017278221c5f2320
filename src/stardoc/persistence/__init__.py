"""
StarDoc Persistence Module

💾 Pluggable Storage Backends:
Backends implement the StorageBackend contract; the URL scheme passed to
``connect`` picks one.

- ``memory://`` / ``nedb://memory``: MemoryBackend, in-process store
- ``mongodb://`` / ``mongodb+srv://``: MongoBackend (pymongo)
"""

from .base import StorageBackend, LoadOptions
from .memory import MemoryBackend
from .registry import (
    connect,
    disconnect,
    get_client,
    set_client,
    is_connected,
    register_backend,
    resolve_backend,
)

__all__ = [
    "StorageBackend",
    "LoadOptions",
    "MemoryBackend",
    "connect",
    "disconnect",
    "get_client",
    "set_client",
    "is_connected",
    "register_backend",
    "resolve_backend",
]
