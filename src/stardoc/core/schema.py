"""
Schema Normalization

Turns field declarations into ``FieldSpec`` entries. A declaration is either a
bare type tag (``str``, ``[Money]``, ``Author``) or a mapping that carries a
``type`` key next to its constraints::

    name = str
    price = {"type": float, "min": 0, "default": 1.0}
    tags = {"type": [str], "choices": ["new", "sale"]}
"""

import copy
import re
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from ..errors import SchemaError
from .types import FieldType, Kind, Primitive, is_array, is_supported_type, to_field_type


class FieldSpec(BaseModel):
    """Normalized schema entry for one field"""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    type: Any
    default: Any = None
    choices: Optional[List[Any]] = None
    min: Any = None
    max: Any = None
    match: Optional[re.Pattern] = None
    validator: Optional[Callable[[Any], Any]] = Field(default=None, alias="validate")
    private: bool = False
    required: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def _convert_type(cls, value: Any) -> FieldType:
        try:
            return to_field_type(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @property
    def field_type(self) -> FieldType:
        return self.type

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set

    @property
    def is_array(self) -> bool:
        return is_array(self.type)

    def compute_default(self) -> Any:
        """Literal default, or the result of calling a default factory"""
        if not self.has_default:
            return None
        if callable(self.default):
            return self.default()
        return copy.deepcopy(self.default)


def native_id_spec() -> FieldSpec:
    return FieldSpec(type=Primitive(Kind.NATIVE_ID))


def normalize_type(declaration: Any) -> FieldSpec:
    """
    Normalize a field declaration into a FieldSpec.

    Raises:
        SchemaError: if the declaration is neither a supported type nor a
            mapping with a valid ``type`` entry
    """
    if isinstance(declaration, FieldSpec):
        return declaration

    if isinstance(declaration, Mapping) and "type" in declaration:
        try:
            return FieldSpec.model_validate(dict(declaration))
        except PydanticValidationError as e:
            raise SchemaError(f"Bad field declaration {declaration!r}: {e}") from e

    if is_supported_type(declaration):
        return FieldSpec(type=declaration)

    raise SchemaError(
        "Unsupported type or bad variable. Remember, non-persisted attributes "
        f"must start with an underscore (_). Got: {declaration!r}"
    )


def normalize_schema(declarations: Mapping[str, Any]) -> Dict[str, FieldSpec]:
    return {name: normalize_type(declaration) for name, declaration in declarations.items()}


__all__ = ["FieldSpec", "native_id_spec", "normalize_type", "normalize_schema"]
