"""
StarDoc Persistence Layer - MongoDB Backend

Stores documents in a MongoDB database through pymongo's asyncio client.
Native ids are ``bson.ObjectId`` values.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import AsyncMongoClient, ReturnDocument

from ..errors import BackendError
from .base import LoadOptions, Query, Record, StorageBackend

logger = logging.getLogger(__name__)

_HEX_ID = re.compile(r"^[a-fA-F0-9]{24}$")

DEFAULT_DATABASE = "stardoc"


def _update(values: Record, upsert: bool) -> Dict[str, Record]:
    # An upsert leaves an existing match untouched
    return {"$setOnInsert" if upsert else "$set": values}


class MongoBackend(StorageBackend):
    """
    MongoDB storage backend.

    The database is taken from the URL path (``mongodb://host/mydb``),
    falling back to ``stardoc``.
    """

    def __init__(self, url: str, client: AsyncMongoClient):
        super().__init__(url)
        self._client = client
        self._database = client.get_default_database(default=DEFAULT_DATABASE)

    @classmethod
    async def connect(cls, url: str, **options) -> "MongoBackend":
        client = AsyncMongoClient(url, **options)
        await client.admin.command("ping")
        logger.info(f"Connected to MongoDB database {client.get_default_database(default=DEFAULT_DATABASE).name}")
        return cls(url, client)

    async def close(self):
        if self._closed:
            return
        await self._client.close()
        self._closed = True
        logger.info(f"Closed MongoDB connection {self.url}")

    def _collection(self, collection: str):
        self._ensure_open()
        return self._database[collection]

    # Writes
    async def save(self, collection: str, id: Any, values: Record) -> Any:
        db = self._collection(collection)

        if id is None:
            result = await db.insert_one(dict(values))
            if result.inserted_id is None:
                raise BackendError("Save failed to generate ID for object.")
            logger.debug(f"Inserted {collection}/{result.inserted_id}")
            return result.inserted_id

        id = self.to_native_id(id)
        await db.update_one({"_id": id}, {"$set": values}, upsert=True)
        logger.debug(f"Updated {collection}/{id}")
        return id

    async def delete(self, collection: str, id: Any) -> int:
        if id is None:
            return 0
        result = await self._collection(collection).delete_one({"_id": self.to_native_id(id)})
        return result.deleted_count

    async def delete_one(self, collection: str, query: Query) -> int:
        result = await self._collection(collection).delete_one(query)
        return result.deleted_count

    async def delete_many(self, collection: str, query: Query) -> int:
        result = await self._collection(collection).delete_many(query)
        return result.deleted_count

    # Reads
    async def load_by_id(self, collection: str, id: Any,
                         options: Optional[LoadOptions] = None) -> Optional[Record]:
        return await self._collection(collection).find_one({"_id": self.to_native_id(id)})

    async def load_one(self, collection: str, query: Query,
                       options: Optional[LoadOptions] = None) -> Optional[Record]:
        return await self._collection(collection).find_one(query)

    async def load_many(self, collection: str, query: Query,
                        options: Optional[LoadOptions] = None) -> List[Record]:
        options = options or LoadOptions()
        cursor = self._collection(collection).find(query)

        if options.sort_key:
            cursor = cursor.sort(options.sort_key, -1 if options.descending else 1)
        if options.skip:
            cursor = cursor.skip(options.skip)
        if options.limit is not None:
            cursor = cursor.limit(options.limit)

        return await cursor.to_list()

    async def count(self, collection: str, query: Query) -> int:
        return await self._collection(collection).count_documents(query)

    async def load_one_and_update(self, collection: str, query: Query, values: Record,
                                  upsert: bool = False) -> Optional[Record]:
        return await self._collection(collection).find_one_and_update(
            query, _update(values, upsert), upsert=upsert, return_document=ReturnDocument.AFTER
        )

    async def load_one_and_delete(self, collection: str, query: Query) -> int:
        result = await self._collection(collection).find_one_and_delete(query)
        return 0 if result is None else 1

    async def load_by_id_and_update(self, collection: str, id: Any, values: Record,
                                    upsert: bool = False) -> Optional[Record]:
        return await self.load_one_and_update(
            collection, {"_id": self.to_native_id(id)}, values, upsert=upsert
        )

    async def load_by_id_and_delete(self, collection: str, id: Any) -> int:
        return await self.load_one_and_delete(collection, {"_id": self.to_native_id(id)})

    # Test isolation
    async def clear_collection(self, collection: str):
        await self._collection(collection).drop()

    async def drop_database(self):
        self._ensure_open()
        await self._client.drop_database(self._database.name)

    # Identifiers
    def native_id_type(self) -> type:
        return ObjectId

    def is_native_id(self, value: Any) -> bool:
        if isinstance(value, ObjectId):
            return True
        return isinstance(value, str) and bool(_HEX_ID.match(value))

    def to_native_id(self, value: Any) -> Any:
        if isinstance(value, str) and _HEX_ID.match(value):
            return ObjectId(value)
        return value

    def driver(self) -> AsyncMongoClient:
        return self._client


__all__ = ["MongoBackend", "DEFAULT_DATABASE"]
