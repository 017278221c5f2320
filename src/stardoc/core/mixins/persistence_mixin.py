"""
PersistenceMixin: save, delete and class-level queries.

Queries are Mongo-style filter dicts handed to the current backend unchanged.
Loaded records become documents through ``create`` and, unless disabled,
have their references populated.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from ...persistence.base import LoadOptions
from ...persistence.registry import get_client
from ..populate import populate as populate_documents

logger = logging.getLogger(__name__)

PopulateOption = Union[bool, List[str]]


class PersistenceMixin:
    """
    Persistence operations for top-level documents.

    Example:
        person = Person.create({"name": "Ada"})
        await person.save()
        same = await Person.load_by_id(person.id)
    """

    @classmethod
    def collection_name(cls) -> str:
        return getattr(cls, "__collection__", None) or cls.__name__.lower() + "s"

    async def save(self):
        """
        Validate, canonicalize and persist this document, running hooks.

        Returns:
            self, with ``id`` assigned by the backend on first save
        """
        await self._run_hooks("pre_validate")
        self.validate()
        self.canonicalize()
        await self._run_hooks("post_validate")

        await self._run_hooks("pre_save")
        collection = self.collection_name()
        id = await get_client().save(collection, self._values.get("_id"), self._to_record())
        if self._values.get("_id") is None:
            self._values["_id"] = id
        logger.debug(f"Saved {collection}/{id}")
        await self._run_hooks("post_save")

        return self

    async def delete(self) -> int:
        """Delete this document, running hooks, and return the number deleted"""
        await self._run_hooks("pre_delete")
        collection = self.collection_name()
        deleted = await get_client().delete(collection, self._values.get("_id"))
        logger.debug(f"Deleted {collection}/{self.id}: {deleted}")
        await self._run_hooks("post_delete")
        return deleted

    async def populate(self, fields: Optional[Sequence[str]] = None):
        return await populate_documents(self, fields)

    @classmethod
    async def _populated(cls, docs: Any, populate: PopulateOption) -> Any:
        if populate is True:
            return await populate_documents(docs)
        if populate:
            return await populate_documents(docs, populate)
        return docs

    # Class-level queries
    @classmethod
    async def load_by_id(cls, id: Any, populate: PopulateOption = True):
        """Load one document by id, or None"""
        options = LoadOptions(populate=populate)
        record = await get_client().load_by_id(cls.collection_name(), id, options)
        if record is None:
            return None
        return await cls._populated(cls.create(record), options.populate)

    @classmethod
    async def load_one(cls, query: Optional[Dict[str, Any]] = None, populate: PopulateOption = True):
        """Load the first document matching ``query``, or None"""
        options = LoadOptions(populate=populate)
        record = await get_client().load_one(cls.collection_name(), query or {}, options)
        if record is None:
            return None
        return await cls._populated(cls.create(record), options.populate)

    @classmethod
    async def load_many(cls, query: Optional[Dict[str, Any]] = None, order: Optional[str] = None,
                        skip: Optional[int] = None, limit: Optional[int] = None,
                        populate: PopulateOption = True) -> list:
        """
        Load every document matching ``query``.

        Args:
            order: field name to sort by, prefixed with ``-`` for descending
            skip: number of matches to skip
            limit: maximum number of documents
            populate: True, False, or the names of fields to populate
        """
        options = LoadOptions(order=order, skip=skip, limit=limit, populate=populate)
        records = await get_client().load_many(cls.collection_name(), query or {}, options)
        return await cls._populated(cls.create(list(records)), options.populate)

    @classmethod
    async def load_one_and_update(cls, query: Dict[str, Any], values: Dict[str, Any],
                                  upsert: bool = False, populate: PopulateOption = True):
        """
        Set ``values`` on the first match and return it as a document.

        With ``upsert``, a missing match is inserted from ``values`` and an
        existing one comes back as stored.
        """
        options = LoadOptions(populate=populate)
        record = await get_client().load_one_and_update(cls.collection_name(), query, values, upsert)
        if record is None:
            return None
        return await cls._populated(cls.create(record), options.populate)

    @classmethod
    async def load_one_and_delete(cls, query: Dict[str, Any]) -> int:
        return await get_client().load_one_and_delete(cls.collection_name(), query)

    @classmethod
    async def load_by_id_and_update(cls, id: Any, values: Dict[str, Any],
                                    upsert: bool = False, populate: PopulateOption = True):
        options = LoadOptions(populate=populate)
        record = await get_client().load_by_id_and_update(cls.collection_name(), id, values, upsert)
        if record is None:
            return None
        return await cls._populated(cls.create(record), options.populate)

    @classmethod
    async def load_by_id_and_delete(cls, id: Any) -> int:
        """Delete the document with this id without running hooks"""
        return await get_client().load_by_id_and_delete(cls.collection_name(), id)

    @classmethod
    async def count(cls, query: Optional[Dict[str, Any]] = None) -> int:
        return await get_client().count(cls.collection_name(), query or {})

    @classmethod
    async def delete_one(cls, query: Optional[Dict[str, Any]] = None) -> int:
        """Delete the first match without running hooks"""
        return await get_client().delete_one(cls.collection_name(), query or {})

    @classmethod
    async def delete_many(cls, query: Optional[Dict[str, Any]] = None) -> int:
        """Delete every match without running hooks"""
        return await get_client().delete_many(cls.collection_name(), query or {})

    @classmethod
    async def clear_collection(cls):
        await get_client().clear_collection(cls.collection_name())


__all__ = ["PersistenceMixin"]
