"""
StarDoc Core Module

Document model layer: field types, schemas, the document lifecycle and
reference population. Storage is reached only through the persistence
contract.
"""

from .document import BaseDocument, Document, EmbeddedDocument
from .populate import populate, PopulateCache, PopulatedList
from .schema import FieldSpec, normalize_type
from .types import (
    Kind,
    DocumentKind,
    Primitive,
    Reference,
    Embedded,
    ArrayOf,
    FieldType,
    is_supported_type,
    is_valid_type,
    is_in_choices,
    is_array,
    is_document,
    is_embedded_document,
)

__all__ = [
    "BaseDocument",
    "Document",
    "EmbeddedDocument",
    "populate",
    "PopulateCache",
    "PopulatedList",
    "FieldSpec",
    "normalize_type",
    "Kind",
    "DocumentKind",
    "Primitive",
    "Reference",
    "Embedded",
    "ArrayOf",
    "FieldType",
    "is_supported_type",
    "is_valid_type",
    "is_in_choices",
    "is_array",
    "is_document",
    "is_embedded_document",
]
