"""
Field Types and Type Predicates

The closed set of field types a schema can declare, the conversion from
Python type tags (``str``, ``int``, ``datetime``, model classes, ``[Model]``)
into that set, and the predicates the lifecycle uses to check values.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional, Union

from ..persistence.registry import get_client


class Kind(Enum):
    """Primitive field kinds"""
    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    BUFFER = "Buffer"
    NATIVE_ID = "NativeId"


class DocumentKind(Enum):
    """Capability flag separating top-level documents from embedded ones"""
    DOCUMENT = "document"
    EMBEDDED = "embedded"


@dataclass(frozen=True)
class Primitive:
    kind: Kind

    @property
    def name(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class Reference:
    """A field holding the id of (or, once populated, a) top-level document"""
    model: type

    @property
    def name(self) -> str:
        return self.model.__name__


@dataclass(frozen=True)
class Embedded:
    """A field holding a document stored inline in its owner"""
    model: type

    @property
    def name(self) -> str:
        return self.model.__name__


@dataclass(frozen=True)
class ArrayOf:
    element: Union[Primitive, Reference, Embedded]

    @property
    def name(self) -> str:
        return f"[{self.element.name}]"


FieldType = Union[Primitive, Reference, Embedded, ArrayOf]

_FIELD_TYPES = (Primitive, Reference, Embedded, ArrayOf)

_PRIMITIVE_TAGS = {
    str: Kind.STRING,
    int: Kind.NUMBER,
    float: Kind.NUMBER,
    bool: Kind.BOOLEAN,
    datetime: Kind.DATE,
    bytes: Kind.BUFFER,
    bytearray: Kind.BUFFER,
}


def model_kind(tag: Any) -> Optional[DocumentKind]:
    """Return the document kind of a model class or instance, if it is one"""
    kind = getattr(tag, "_kind", None)
    return kind if isinstance(kind, DocumentKind) else None


def to_field_type(tag: Any) -> FieldType:
    """
    Convert a declared type tag into a FieldType.

    Raises:
        TypeError: if the tag is not a supported type
    """
    if isinstance(tag, _FIELD_TYPES):
        return tag

    if isinstance(tag, list):
        if len(tag) != 1:
            raise TypeError(f"Array types must declare exactly one element type, got {tag!r}")
        element = to_field_type(tag[0])
        if isinstance(element, ArrayOf):
            raise TypeError(f"Nested array types are not supported, got {tag!r}")
        return ArrayOf(element)

    if isinstance(tag, type):
        if tag in _PRIMITIVE_TAGS:
            return Primitive(_PRIMITIVE_TAGS[tag])
        kind = model_kind(tag)
        if kind is DocumentKind.DOCUMENT:
            return Reference(tag)
        if kind is DocumentKind.EMBEDDED:
            return Embedded(tag)

    raise TypeError(f"Unsupported type {tag!r}")


def is_supported_type(tag: Any) -> bool:
    try:
        to_field_type(tag)
    except TypeError:
        return False
    return True


def is_array(field_type: Any) -> bool:
    return isinstance(field_type, ArrayOf) or isinstance(field_type, list)


def element_type(field_type: FieldType) -> FieldType:
    """Element type for arrays, the type itself otherwise"""
    return field_type.element if isinstance(field_type, ArrayOf) else field_type


def is_document(field_type: Any) -> bool:
    """True for reference types and for top-level document classes"""
    if isinstance(field_type, Reference):
        return True
    return isinstance(field_type, type) and model_kind(field_type) is DocumentKind.DOCUMENT


def is_model_type(field_type: Any) -> bool:
    """True for reference and embedded field types"""
    return isinstance(field_type, (Reference, Embedded))


def is_document_instance(value: Any) -> bool:
    return not isinstance(value, type) and model_kind(value) is not None


def is_embedded_document(value: Any) -> bool:
    return not isinstance(value, type) and model_kind(value) is DocumentKind.EMBEDDED


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_native_id(value: Any) -> bool:
    return get_client().is_native_id(value)


def type_name(field_type: FieldType) -> str:
    return field_type.name


def _is_valid_scalar(value: Any, field_type: FieldType) -> bool:
    if value is None:
        return True

    if isinstance(field_type, Primitive):
        kind = field_type.kind
        if kind is Kind.STRING:
            return isinstance(value, str)
        if kind is Kind.NUMBER:
            return is_number(value)
        if kind is Kind.BOOLEAN:
            return isinstance(value, bool)
        if kind is Kind.DATE:
            return isinstance(value, datetime) or is_number(value)
        if kind is Kind.BUFFER:
            return isinstance(value, (bytes, bytearray))
        if kind is Kind.NATIVE_ID:
            return is_native_id(value)
        return False

    if isinstance(field_type, Reference):
        return isinstance(value, field_type.model) or (
            not is_document_instance(value) and is_native_id(value)
        )

    if isinstance(field_type, Embedded):
        return isinstance(value, field_type.model)

    return False


def is_valid_type(value: Any, field_type: FieldType) -> bool:
    """
    Check a value against a field type.

    ``None`` is always valid. Array values must be lists whose every element
    is valid against the element type.
    """
    if value is None:
        return True

    if isinstance(field_type, ArrayOf):
        if not isinstance(value, list):
            return False
        return all(_is_valid_scalar(item, field_type.element) for item in value)

    return _is_valid_scalar(value, field_type)


def is_in_choices(choices: Optional[Iterable[Any]], value: Any) -> bool:
    if not choices:
        return True
    if value is None:
        return True
    choices = list(choices)
    if isinstance(value, list):
        return all(item in choices for item in value)
    return value in choices


__all__ = [
    "Kind",
    "DocumentKind",
    "Primitive",
    "Reference",
    "Embedded",
    "ArrayOf",
    "FieldType",
    "model_kind",
    "to_field_type",
    "is_supported_type",
    "is_array",
    "element_type",
    "is_document",
    "is_model_type",
    "is_document_instance",
    "is_embedded_document",
    "is_number",
    "is_native_id",
    "type_name",
    "is_valid_type",
    "is_in_choices",
]
