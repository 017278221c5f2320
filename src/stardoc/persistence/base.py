"""
StarDoc Persistence Layer - Base Classes

This module defines the contract every storage backend implements. The
document lifecycle and the populate resolver talk to storage only through
this interface, never to a specific driver.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from ..errors import BackendError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Query = Dict[str, Any]

BackendType = TypeVar("BackendType", bound="StorageBackend")


class LoadOptions(BaseModel):
    """Options for load operations"""

    model_config = ConfigDict(extra="forbid")

    order: Optional[str] = None
    skip: Optional[int] = Field(default=None, ge=0)
    limit: Optional[int] = Field(default=None, ge=0)
    populate: Union[bool, List[str]] = True

    @property
    def sort_key(self) -> Optional[str]:
        if not self.order:
            return None
        return self.order[1:] if self.order.startswith("-") else self.order

    @property
    def descending(self) -> bool:
        return bool(self.order) and self.order.startswith("-")


class StorageBackend(ABC):
    """
    Abstract base class for document storage backends.

    Records are plain dicts mapping field names to backend-native values, with
    the id under ``_id``. All I/O methods are coroutines.
    """

    def __init__(self, url: str):
        self.url = url
        self._closed = False

    def _ensure_open(self):
        if self._closed:
            raise BackendError(f"{self.__class__.__name__} for {self.url} is closed")

    @classmethod
    @abstractmethod
    async def connect(cls: Type[BackendType], url: str, **options) -> BackendType:
        """Open a connection for ``url`` and return the backend"""
        pass

    @abstractmethod
    async def close(self):
        pass

    # Writes
    @abstractmethod
    async def save(self, collection: str, id: Any, values: Record) -> Any:
        """
        Insert a record when ``id`` is None, otherwise update it.

        Returns:
            The id of the saved record
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, id: Any) -> int:
        """Delete a record by id and return the number deleted"""
        pass

    @abstractmethod
    async def delete_one(self, collection: str, query: Query) -> int:
        pass

    @abstractmethod
    async def delete_many(self, collection: str, query: Query) -> int:
        pass

    # Reads
    @abstractmethod
    async def load_by_id(self, collection: str, id: Any,
                         options: Optional[LoadOptions] = None) -> Optional[Record]:
        pass

    @abstractmethod
    async def load_one(self, collection: str, query: Query,
                       options: Optional[LoadOptions] = None) -> Optional[Record]:
        pass

    @abstractmethod
    async def load_many(self, collection: str, query: Query,
                        options: Optional[LoadOptions] = None) -> List[Record]:
        pass

    @abstractmethod
    async def count(self, collection: str, query: Query) -> int:
        pass

    @abstractmethod
    async def load_one_and_update(self, collection: str, query: Query, values: Record,
                                  upsert: bool = False) -> Optional[Record]:
        """
        Set ``values`` on the first match and return the updated record.

        With ``upsert`` the values are only written when nothing matches, in
        which case a new record is inserted and returned. An existing match is
        returned unchanged.
        """
        pass

    @abstractmethod
    async def load_one_and_delete(self, collection: str, query: Query) -> int:
        pass

    @abstractmethod
    async def load_by_id_and_update(self, collection: str, id: Any, values: Record,
                                    upsert: bool = False) -> Optional[Record]:
        """Same as ``load_one_and_update``, matching on the id"""
        pass

    @abstractmethod
    async def load_by_id_and_delete(self, collection: str, id: Any) -> int:
        pass

    # Test isolation
    @abstractmethod
    async def clear_collection(self, collection: str):
        pass

    @abstractmethod
    async def drop_database(self):
        pass

    # Identifiers
    @abstractmethod
    def native_id_type(self) -> type:
        pass

    @abstractmethod
    def is_native_id(self, value: Any) -> bool:
        pass

    @abstractmethod
    def to_native_id(self, value: Any) -> Any:
        """Coerce an id (e.g. its string form) into the backend's native type"""
        pass

    def to_canonical_id(self, id: Any) -> str:
        return str(id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.url!r})"


__all__ = ["StorageBackend", "LoadOptions", "Record", "Query"]
