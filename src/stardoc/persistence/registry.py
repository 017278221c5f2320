"""
Backend Registry - Connection Bootstrap

Maps URL schemes to backend implementations and holds the current client.
Implementations are registered as dotted import paths and imported on first
use, so a scheme's driver is only loaded when a URL asks for it.
"""

import importlib
import logging
from typing import Dict, Optional, Type
from urllib.parse import urlparse

from ..errors import BackendError, NotConnectedError
from .base import StorageBackend

logger = logging.getLogger(__name__)

_BACKENDS: Dict[str, str] = {
    "memory": "stardoc.persistence.memory.MemoryBackend",
    "nedb": "stardoc.persistence.memory.MemoryBackend",
    "mongodb": "stardoc.persistence.mongo.MongoBackend",
    "mongodb+srv": "stardoc.persistence.mongo.MongoBackend",
}

_client: Optional[StorageBackend] = None


def register_backend(scheme: str, implementation: str):
    """Register a backend class (dotted path) for a URL scheme"""
    _BACKENDS[scheme] = implementation
    logger.info(f"Registered backend for {scheme}://: {implementation}")


def resolve_backend(url: str) -> Type[StorageBackend]:
    scheme = urlparse(url).scheme
    implementation = _BACKENDS.get(scheme)
    if implementation is None:
        raise BackendError(f"Unrecognized DB connection url: {url}")

    module_name, _, class_name = implementation.rpartition(".")
    module = importlib.import_module(module_name)
    return getattr(module, class_name)


async def connect(url: Optional[str] = None, **options) -> StorageBackend:
    """
    Connect to the database at ``url`` and make it the current client.

    Without a url, ``STARDOC_DATABASE_URL`` (default ``memory://``) is used.
    """
    global _client

    if url is None:
        from ..config import DatabaseConfig
        config = DatabaseConfig.from_env()
        url = config.url
        options = {**config.options, **options}

    backend_class = resolve_backend(url)
    client = await backend_class.connect(url, **options)
    _client = client
    logger.info(f"Connected {client!r}")
    return client


async def disconnect():
    """Close the current client, if any, and forget it"""
    global _client

    client, _client = _client, None
    if client is not None:
        await client.close()
        logger.info(f"Disconnected {client!r}")


def get_client() -> StorageBackend:
    if _client is None:
        raise NotConnectedError("You must first call 'connect' before loading/saving documents.")
    return _client


def set_client(client: Optional[StorageBackend]):
    global _client
    _client = client


def is_connected() -> bool:
    return _client is not None


__all__ = [
    "register_backend",
    "resolve_backend",
    "connect",
    "disconnect",
    "get_client",
    "set_client",
    "is_connected",
]
