"""
StarDoc Errors

Exception hierarchy shared by the schema, lifecycle and persistence layers.
"""

from typing import Any, Optional


class StarDocError(Exception):
    """Base exception for all StarDoc errors"""
    pass


class SchemaError(StarDocError):
    """Raised when a field declaration cannot be turned into a schema entry"""
    pass


class ValidationError(StarDocError):
    """Raised when a field value violates its schema entry"""

    def __init__(self, message: str, collection: Optional[str] = None,
                 field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.collection = collection
        self.field = field
        self.value = value


class BackendError(StarDocError):
    """Raised by StarDoc's own storage backends"""
    pass


class NotConnectedError(BackendError):
    """Raised when a database operation runs before connect()"""
    pass


class NotOverriddenError(StarDocError, NotImplementedError):
    """Raised when an abstract document method is called without an override"""
    pass


__all__ = [
    "StarDocError",
    "SchemaError",
    "ValidationError",
    "BackendError",
    "NotConnectedError",
    "NotOverriddenError",
]
