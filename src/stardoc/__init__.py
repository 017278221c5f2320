"""
StarDoc - Schema-validated Documents over Pluggable Document Stores

An object-document mapper: declare fields on Document / EmbeddedDocument
classes, then save, load, query and populate them through a MongoDB or
in-memory backend.
"""

from .core import (
    BaseDocument,
    Document,
    EmbeddedDocument,
    populate,
    PopulatedList,
    FieldSpec,
)
from .errors import (
    StarDocError,
    SchemaError,
    ValidationError,
    BackendError,
    NotConnectedError,
    NotOverriddenError,
)
from .persistence import (
    StorageBackend,
    LoadOptions,
    MemoryBackend,
    connect,
    disconnect,
    get_client,
    register_backend,
)
from .config import StarDocConfig, DatabaseConfig, LoggingConfig, Environment, configure_logging

__version__ = "0.1.0"

__all__ = [
    # Documents
    "BaseDocument",
    "Document",
    "EmbeddedDocument",
    "populate",
    "PopulatedList",
    "FieldSpec",

    # Errors
    "StarDocError",
    "SchemaError",
    "ValidationError",
    "BackendError",
    "NotConnectedError",
    "NotOverriddenError",

    # Persistence
    "StorageBackend",
    "LoadOptions",
    "MemoryBackend",
    "connect",
    "disconnect",
    "get_client",
    "register_backend",

    # Configuration
    "StarDocConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "Environment",
    "configure_logging",
]
