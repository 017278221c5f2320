"""
SchemaMixin: per-instance schema and transparent field access.

Every document instance owns an ordered schema (field name -> FieldSpec) and
an ordered values map. Schema fields read and write through the values map,
``id`` aliases ``_id``, and everything else behaves like a normal attribute.
"""

import logging
from typing import Any, ClassVar, Dict, Mapping, Optional

from ..fields import collect_declarations, is_declaration
from ..schema import FieldSpec, normalize_schema, normalize_type

logger = logging.getLogger(__name__)


class SchemaMixin:
    """
    Schema registry and field interception.

    Fields may be declared in the class body::

        class Person(Document):
            name = str
            age = {"type": int, "min": 0}

    or assigned in ``__init__`` (``self.name = str``), or added with
    :meth:`schema`. Attributes whose names start with an underscore are never
    treated as fields.
    """

    _declared_fields: ClassVar[Dict[str, FieldSpec]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._declared_fields = collect_declarations(cls)

    def __init__(self):
        object.__setattr__(self, "_schema", {})
        object.__setattr__(self, "_values", {})

    # Field interception
    def __getattr__(self, name: str) -> Any:
        state = self.__dict__
        if "_values" in state:
            if name in state["_values"]:
                return state["_values"][name]
            if name in state["_schema"]:
                return None
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any):
        schema = self.__dict__.get("_schema")
        if schema is not None and name in schema:
            self._values[name] = value
            return
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str):
        state = self.__dict__
        if name in state.get("_schema", {}) or name in state.get("_values", {}):
            state["_schema"].pop(name, None)
            state["_values"].pop(name, None)
            return
        object.__delattr__(self, name)

    def __contains__(self, name: str) -> bool:
        return name in self._schema or hasattr(self, name)

    @property
    def id(self) -> Any:
        return self._values.get("_id")

    @id.setter
    def id(self, value: Any):
        if "_id" not in self._schema:
            raise AttributeError(f"{type(self).__name__} has no id field")
        self._values["_id"] = value

    # Schema registry
    def schema(self, extension: Optional[Mapping[str, Any]] = None) -> Dict[str, FieldSpec]:
        """Merge field declarations into this instance's schema and return it"""
        if extension:
            self._schema.update(normalize_schema(extension))
        return self._schema

    def get_default(self, name: str) -> Any:
        spec = self._schema.get(name)
        if spec is None:
            return None
        if spec.has_default:
            return spec.compute_default()
        if spec.is_array:
            return []
        return None

    def generate_schema(self) -> "SchemaMixin":
        """
        Build the schema from class and constructor declarations and fill in
        defaults for every field that has no value yet.
        """
        if not self.__dict__.get("_generated"):
            # Fields assigned in __init__, e.g. ``self.name = str``
            for name in list(self.__dict__):
                value = self.__dict__[name]
                if not is_declaration(name, value):
                    continue
                self._schema[name] = normalize_type(value)
                del self.__dict__[name]

            object.__setattr__(self, "_generated", True)

        for name in self._schema:
            if name not in self._values:
                self._values[name] = self.get_default(name)

        return self


__all__ = ["SchemaMixin"]
