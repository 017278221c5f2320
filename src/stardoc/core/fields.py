"""
Field Accessors

Class-body field declarations are collected when a model class is created and
replaced by ``FieldDescriptor`` objects, so that ``doc.name`` reads and writes
go through the instance's values map instead of ordinary attributes.
"""

from typing import Any, Dict

from .schema import FieldSpec, normalize_type


class FieldDescriptor:
    """
    Getter/setter for one schema field.

    Values live in ``instance._values``. Once a field has been deleted from an
    instance's schema the descriptor falls back to a plain instance attribute.
    """

    def __init__(self, name: str, spec: FieldSpec):
        self.name = name
        self.spec = spec

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        state = instance.__dict__
        if self.name in state["_values"]:
            return state["_values"][self.name]
        if self.name in state["_schema"]:
            return None
        if self.name in state:
            return state[self.name]
        raise AttributeError(f"{owner.__name__!r} object has no attribute {self.name!r}")

    def __set__(self, instance, value):
        state = instance.__dict__
        if self.name in state["_schema"]:
            state["_values"][self.name] = value
        else:
            state[self.name] = value

    def __delete__(self, instance):
        state = instance.__dict__
        state["_schema"].pop(self.name, None)
        state["_values"].pop(self.name, None)
        state.pop(self.name, None)

    def __repr__(self) -> str:
        return f"FieldDescriptor({self.name!r}, {self.spec.field_type.name})"


def is_declaration(name: str, value: Any) -> bool:
    """Public class attributes that are not methods or descriptors"""
    if name.startswith("_"):
        return False
    if hasattr(value, "__get__") and not isinstance(value, type):
        return False
    return True


def collect_declarations(cls: type) -> Dict[str, FieldSpec]:
    """
    Normalize the field declarations in a class body and install accessors.

    Declarations inherited from base classes come first, in definition order.
    """
    declared: Dict[str, FieldSpec] = {}
    for base in reversed(cls.__mro__[1:]):
        declared.update(base.__dict__.get("_declared_fields", {}))

    for name, value in list(cls.__dict__.items()):
        if isinstance(value, FieldDescriptor):
            continue
        if not is_declaration(name, value):
            continue
        spec = normalize_type(value)
        declared[name] = spec
        setattr(cls, name, FieldDescriptor(name, spec))

    return declared


__all__ = ["FieldDescriptor", "is_declaration", "collect_declarations"]
