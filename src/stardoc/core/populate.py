"""
Reference Population

Expands stored reference ids into loaded documents. Loads are issued
concurrently, and identical (model, id) loads within one call share a single
task, so N documents pointing at the same foreign id cost one round trip.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..persistence.registry import get_client
from .types import ArrayOf, Reference, is_document_instance

logger = logging.getLogger(__name__)


class PopulatedList(list):
    """Resolved documents of an array-of-reference field, with the original ids"""

    def __init__(self, items: Iterable[Any] = (), id_list: Optional[List[Any]] = None):
        super().__init__(items)
        self.id_list = list(id_list) if id_list is not None else []


@dataclass(frozen=True)
class ReferenceField:
    key: str
    model: type
    is_array: bool


class PopulateCache:
    """Shared load tasks for one populate call, keyed by model then id"""

    def __init__(self):
        self._loads: Dict[type, Dict[str, asyncio.Future]] = {}

    def load(self, model: type, id: Any) -> asyncio.Future:
        by_model = self._loads.setdefault(model, {})
        key = get_client().to_canonical_id(id)
        task = by_model.get(key)
        if task is None:
            task = asyncio.ensure_future(model.load_by_id(id, populate=False))
            by_model[key] = task
        return task

    def __len__(self) -> int:
        return sum(len(by_model) for by_model in self._loads.values())


def _looks_like_id(value: Any) -> bool:
    return isinstance(value, str) or get_client().is_native_id(value)


def reference_fields(document: Any, fields: Optional[Sequence[str]] = None) -> List[ReferenceField]:
    """Reference fields of one document that hold something to resolve"""
    found = []
    for key, spec in document._schema.items():
        if fields is not None and key not in fields:
            continue
        field_type = spec.field_type
        value = document._values.get(key)

        if isinstance(field_type, ArrayOf) and isinstance(field_type.element, Reference):
            found.append(ReferenceField(key, field_type.element.model, True))
        elif isinstance(field_type, Reference) and value is not None \
                and not is_document_instance(value) and _looks_like_id(value):
            found.append(ReferenceField(key, field_type.model, False))
    return found


async def _assign_item(target: list, index: int, load: asyncio.Future):
    target[index] = await load


async def _assign_field(document: Any, key: str, load: asyncio.Future):
    document._values[key] = await load


def _schedule(document: Any, ref: ReferenceField, cache: PopulateCache) -> List[asyncio.Future]:
    if not ref.is_array:
        load = cache.load(ref.model, document._values[ref.key])
        return [asyncio.ensure_future(_assign_field(document, ref.key, load))]

    ids = document._values.get(ref.key)
    if ids is None:
        return []

    resolved = PopulatedList(ids, id_list=[
        item.id if is_document_instance(item) else item for item in ids
    ])
    document._values[ref.key] = resolved

    pending = []
    for index, item in enumerate(ids):
        if item is None or is_document_instance(item):
            continue
        load = cache.load(ref.model, item)
        pending.append(asyncio.ensure_future(_assign_item(resolved, index, load)))
    return pending


async def populate(docs: Any, fields: Optional[Sequence[str]] = None) -> Any:
    """
    Resolve reference fields of one document or a list of documents in place.

    Reference fields are looked up on each document's own schema. Any failed
    load fails the whole call, once every other load has settled.

    Args:
        docs: a document, a list of documents, or None
        fields: only populate these field names

    Returns:
        ``docs``
    """
    if not docs:
        return docs

    documents = docs if isinstance(docs, list) else [docs]
    cache = PopulateCache()
    pending: List[asyncio.Future] = []

    for document in documents:
        for ref in reference_fields(document, fields):
            pending.extend(_schedule(document, ref, cache))

    if pending:
        logger.debug(f"Populating {len(documents)} document(s): {len(pending)} reference(s), {len(cache)} load(s)")
        results = await asyncio.gather(*pending, return_exceptions=True)
        # Every load has settled; surface the first failure
        for result in results:
            if isinstance(result, BaseException):
                raise result

    return docs


__all__ = ["populate", "PopulateCache", "PopulatedList", "ReferenceField", "reference_fields"]
