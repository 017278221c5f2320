"""
StarDoc Persistence Layer - Memory Backend

🧠 Embedded In-Memory Document Store:
Collections of records held in process memory, for development and testing.
Data is lost when the backend is closed. Records are deep-copied on the way in
and out so callers never share state with the store.
"""

import copy
import logging
import re
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional

from .base import LoadOptions, Query, Record, StorageBackend
from .matching import equality_fields, matches, sort_records

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[a-zA-Z0-9]{16}$")


class MemoryBackend(StorageBackend):
    """
    In-memory storage backend.

    Native ids are 16-character alphanumeric strings. Accepts ``memory://``
    and ``nedb://memory`` URLs; every connect opens an empty store.
    """

    def __init__(self, url: str = "memory://"):
        super().__init__(url)
        self._collections: Dict[str, Dict[str, Record]] = defaultdict(dict)

    @classmethod
    async def connect(cls, url: str = "memory://", **options) -> "MemoryBackend":
        if options:
            logger.debug(f"MemoryBackend ignores connection options {sorted(options)}")
        return cls(url)

    async def close(self):
        self._collections.clear()
        self._closed = True

    def _generate_id(self) -> str:
        return uuid.uuid4().hex[:16]

    def _records(self, collection: str, query: Optional[Query]) -> List[Record]:
        self._ensure_open()
        return [record for record in self._collections[collection].values() if matches(record, query)]

    # Writes
    async def save(self, collection: str, id: Any, values: Record) -> Any:
        self._ensure_open()
        records = self._collections[collection]

        if id is None:
            id = self._generate_id()
            records[id] = {"_id": id, **copy.deepcopy(values)}
            logger.debug(f"Inserted {collection}/{id}")
        elif id in records:
            records[id].update(copy.deepcopy(values))
            logger.debug(f"Updated {collection}/{id}")
        else:
            records[id] = {"_id": id, **copy.deepcopy(values)}
            logger.debug(f"Upserted {collection}/{id}")
        return id

    async def delete(self, collection: str, id: Any) -> int:
        self._ensure_open()
        if id is None:
            return 0
        removed = self._collections[collection].pop(id, None)
        return 0 if removed is None else 1

    async def delete_one(self, collection: str, query: Query) -> int:
        found = self._records(collection, query)
        if not found:
            return 0
        del self._collections[collection][found[0]["_id"]]
        return 1

    async def delete_many(self, collection: str, query: Query) -> int:
        found = self._records(collection, query)
        for record in found:
            del self._collections[collection][record["_id"]]
        return len(found)

    # Reads
    async def load_by_id(self, collection: str, id: Any,
                         options: Optional[LoadOptions] = None) -> Optional[Record]:
        self._ensure_open()
        record = self._collections[collection].get(self.to_native_id(id))
        return copy.deepcopy(record)

    async def load_one(self, collection: str, query: Query,
                       options: Optional[LoadOptions] = None) -> Optional[Record]:
        found = self._records(collection, query)
        return copy.deepcopy(found[0]) if found else None

    async def load_many(self, collection: str, query: Query,
                        options: Optional[LoadOptions] = None) -> List[Record]:
        options = options or LoadOptions()
        found = self._records(collection, query)

        if options.sort_key:
            found = sort_records(found, options.sort_key, options.descending)
        if options.skip:
            found = found[options.skip:]
        if options.limit is not None:
            found = found[:options.limit]

        return copy.deepcopy(found)

    async def count(self, collection: str, query: Query) -> int:
        return len(self._records(collection, query))

    async def load_one_and_update(self, collection: str, query: Query, values: Record,
                                  upsert: bool = False) -> Optional[Record]:
        found = self._records(collection, query)
        if found:
            return self._update_found(collection, found[0], values, upsert)
        if not upsert:
            return None

        id = await self.save(collection, None, {**equality_fields(query), **values})
        return copy.deepcopy(self._collections[collection][id])

    async def load_one_and_delete(self, collection: str, query: Query) -> int:
        return await self.delete_one(collection, query)

    async def load_by_id_and_update(self, collection: str, id: Any, values: Record,
                                    upsert: bool = False) -> Optional[Record]:
        self._ensure_open()
        id = self.to_native_id(id)
        record = self._collections[collection].get(id)
        if record is not None:
            return self._update_found(collection, record, values, upsert)
        if not upsert or id is None:
            return None

        await self.save(collection, id, values)
        return copy.deepcopy(self._collections[collection][id])

    async def load_by_id_and_delete(self, collection: str, id: Any) -> int:
        return await self.delete(collection, self.to_native_id(id))

    def _update_found(self, collection: str, record: Record, values: Record, upsert: bool) -> Record:
        # Upserts only write on insert
        if not upsert:
            record.update(copy.deepcopy(values))
            logger.debug(f"Updated {collection}/{record['_id']}")
        return copy.deepcopy(record)

    # Test isolation
    async def clear_collection(self, collection: str):
        self._ensure_open()
        self._collections.pop(collection, None)

    async def drop_database(self):
        self._ensure_open()
        self._collections.clear()

    # Identifiers
    def native_id_type(self) -> type:
        return str

    def is_native_id(self, value: Any) -> bool:
        return isinstance(value, str) and bool(_ID_PATTERN.match(value))

    def to_native_id(self, value: Any) -> Any:
        return value


__all__ = ["MemoryBackend"]
