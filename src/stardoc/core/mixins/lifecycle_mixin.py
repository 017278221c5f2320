"""
LifecycleMixin: fill, validate, canonicalize, hooks and serialization.

These are the synchronous, CPU-only phases of the document lifecycle plus the
hook cascade. Persistence lives in PersistenceMixin.
"""

import base64
import inspect
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping

from ...errors import ValidationError
from ..types import (
    Kind,
    Primitive,
    element_type,
    is_array,
    is_document_instance,
    is_embedded_document,
    is_in_choices,
    is_model_type,
    is_number,
    is_valid_type,
)
from ...persistence.registry import get_client

logger = logging.getLogger(__name__)

_PACKAGE_PREFIX = __name__.split(".")[0] + "."


def _describe(value: Any) -> str:
    if isinstance(value, list):
        return "[" + ", ".join(str(item) for item in value) + "]"
    return type(value).__name__


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def _to_datetime(value: Any) -> Any:
    if is_number(value):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return value


def _outside(value: Any, bound: Any, is_date: bool, below: bool) -> bool:
    """
    Compare a value against a min (below=True) or max bound.

    Date fields accept numeric timestamps on either side, and a naive datetime
    is read as UTC when the other side is aware. Raises TypeError when the two
    still cannot be ordered.
    """
    if is_date:
        value, bound = _to_datetime(value), _to_datetime(bound)
        if isinstance(value, datetime) and isinstance(bound, datetime):
            if value.tzinfo is None and bound.tzinfo is not None:
                value = value.replace(tzinfo=timezone.utc)
            elif bound.tzinfo is None and value.tzinfo is not None:
                bound = bound.replace(tzinfo=timezone.utc)
    return value < bound if below else value > bound


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return str(value)


class LifecycleMixin:
    """
    Lifecycle phases shared by documents and embedded documents.

    Hooks are no-ops by default. Override any of ``pre_validate``,
    ``post_validate``, ``pre_save``, ``post_save``, ``pre_delete`` or
    ``post_delete``; they may be plain methods or coroutines.
    """

    # Hooks
    def pre_validate(self):
        pass

    def post_validate(self):
        pass

    def pre_save(self):
        pass

    def post_save(self):
        pass

    def pre_delete(self):
        pass

    def post_delete(self):
        pass

    def _embedded_documents(self) -> Iterator[Any]:
        """Embedded documents held directly by this instance, in schema order"""
        for value in self._values.values():
            if is_embedded_document(value):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if is_embedded_document(item):
                        yield item

    def _hook_targets(self) -> List[Any]:
        """Every reachable embedded document, depth-first, then self"""
        targets = []
        for embedded in self._embedded_documents():
            targets.extend(embedded._hook_targets())
        targets.append(self)
        return targets

    async def _run_hooks(self, hook_name: str):
        for target in self._hook_targets():
            result = getattr(target, hook_name)()
            if inspect.isawaitable(result):
                await result

    def _error_label(self) -> str:
        return type(self).__name__

    # Validation
    def validate(self):
        """
        Check every value against its schema entry.

        Raises:
            ValidationError: on the first violation found
        """
        label = self._error_label()

        for key, value in self._values.items():
            spec = self._schema[key]

            # Embedded documents answer for themselves
            if is_embedded_document(value):
                value.validate()
                continue

            if spec.required and _is_empty(value):
                raise ValidationError(
                    f"Key {label}.{key} is required, but got {value!r}",
                    label, key, value)

            if not is_valid_type(value, spec.field_type):
                raise ValidationError(
                    f"Value assigned to {label}.{key} should be {spec.field_type.name}, "
                    f"got {_describe(value)}",
                    label, key, value)

            if isinstance(value, list):
                for item in value:
                    if is_embedded_document(item):
                        item.validate()

            if spec.match is not None and isinstance(value, str) and not spec.match.search(value):
                raise ValidationError(
                    f"Value assigned to {label}.{key} does not match the regex/string "
                    f"{spec.match.pattern}. Value was {value}",
                    label, key, value)

            if not is_in_choices(spec.choices, value):
                raise ValidationError(
                    f"Value assigned to {label}.{key} should be in "
                    f"[{', '.join(str(choice) for choice in spec.choices)}], got {value}",
                    label, key, value)

            if value is not None and not isinstance(value, list):
                is_date = spec.field_type == Primitive(Kind.DATE)
                bounds = (("min", spec.min, "less than"), ("max", spec.max, "greater than"))
                for name, bound, relation in bounds:
                    if bound is None:
                        continue
                    try:
                        outside = _outside(value, bound, is_date, below=name == "min")
                    except TypeError:
                        raise ValidationError(
                            f"Value assigned to {label}.{key} cannot be compared with {name}, "
                            f"{bound}, got {value}",
                            label, key, value) from None
                    if outside:
                        raise ValidationError(
                            f"Value assigned to {label}.{key} is {relation} {name}, {bound}, got {value}",
                            label, key, value)

            if spec.validator is not None and value is not None and not spec.validator(value):
                raise ValidationError(
                    f"Value assigned to {label}.{key} failed custom validator. Value was {value}",
                    label, key, value)

    def canonicalize(self):
        """Convert numeric timestamps in date fields to datetimes, recursively"""
        for key, value in self._values.items():
            if is_embedded_document(value):
                value.canonicalize()
                continue

            field_type = element_type(self._schema[key].field_type)
            is_date = field_type == Primitive(Kind.DATE)

            if isinstance(value, list):
                for index, item in enumerate(value):
                    if is_embedded_document(item):
                        item.canonicalize()
                    elif is_date:
                        value[index] = _to_datetime(item)
            elif is_date:
                self._values[key] = _to_datetime(value)

    # Construction
    @classmethod
    def create(cls, data: Any = None):
        """
        Create one instance, or one instance per element of a list.

        Args:
            data: None for defaults only, a mapping of field values, or a list
                of such mappings
        """
        if data is None:
            return cls._instantiate()
        if isinstance(data, list):
            return [cls._instantiate().fill(item) for item in data]
        return cls._instantiate().fill(data)

    @classmethod
    def _instantiate(cls):
        return cls()

    def _fill_model_value(self, model: type, value: Any, current: Any = None) -> Any:
        if value is None or is_document_instance(value):
            return value
        if isinstance(value, Mapping):
            if is_document_instance(current):
                return current.fill(value)
            return model.create(value)
        # A bare id: an unresolved reference
        return value

    def _is_writable_attribute(self, name: str) -> bool:
        if name.startswith("_"):
            return False
        attribute = getattr(type(self), name, None)
        if isinstance(attribute, property):
            return attribute.fset is not None
        if callable(attribute):
            return False
        return name in self

    def fill(self, new_values: Any):
        """
        Assign values from a mapping, expanding nested data into documents.

        A bare native id sets only the id.
        """
        if new_values is None:
            return self

        if not isinstance(new_values, Mapping):
            if "_id" in self._schema and get_client().is_native_id(new_values):
                self._values["_id"] = new_values
                return self
            raise TypeError(f"Cannot fill {type(self).__name__} from {type(new_values).__name__}")

        for key, spec in self._schema.items():
            if key == "_id":
                continue

            current = self._values.get(key)
            if key in new_values:
                value = new_values[key]
            elif key in self._values:
                value = current
            else:
                value = self.get_default(key)

            field_type = spec.field_type
            model_type = element_type(field_type)

            if is_model_type(model_type):
                if is_array(field_type) and isinstance(value, list):
                    value = [self._fill_model_value(model_type.model, item) for item in value]
                elif not is_array(field_type):
                    value = self._fill_model_value(model_type.model, value, current)

            self._values[key] = value

        for key in ("_id", "id"):
            if key in new_values and "_id" in self._schema:
                raw_id = new_values[key]
                self._values["_id"] = None if raw_id is None else get_client().to_native_id(raw_id)

        for key, value in new_values.items():
            if key in self._schema or key in ("_id", "id"):
                continue
            if self._is_writable_attribute(key):
                setattr(self, key, value)

        return self

    # Serialization
    def _computed_properties(self) -> Dict[str, Any]:
        """Values of properties declared on model classes (not on StarDoc's own bases)"""
        computed = {}
        for klass in type(self).__mro__:
            if klass is object or klass.__module__.startswith(_PACKAGE_PREFIX):
                continue
            for name, attribute in vars(klass).items():
                if isinstance(attribute, property) and name != "id" and name not in computed:
                    computed[name] = getattr(self, name)
        return computed

    def to_serializable(self) -> Dict[str, Any]:
        """
        Export values as a plain dict.

        Private fields are omitted, unset fields become ``[]`` or ``None``, and
        properties defined on the model class are included.
        """
        values = dict(self._values)

        for key, spec in self._schema.items():
            if spec.private:
                values.pop(key, None)
            elif key not in values:
                values[key] = [] if spec.is_array else None

        for key, value in values.items():
            if is_document_instance(value):
                values[key] = value.to_serializable()
            elif isinstance(value, list):
                values[key] = [
                    item.to_serializable() if is_document_instance(item) else item
                    for item in value
                ]

        values.update(self._computed_properties())
        return values

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_serializable(), default=_json_default, **kwargs)

    def _to_record(self) -> Dict[str, Any]:
        """Backend representation: embedded documents inline, references as ids"""
        record = {}
        for key, value in self._values.items():
            if key == "_id":
                continue
            record[key] = _to_stored(value)
        return record


def _to_stored(value: Any) -> Any:
    if is_embedded_document(value):
        return value._to_record()
    if is_document_instance(value):
        return value.id
    if isinstance(value, list):
        return [_to_stored(item) for item in value]
    return value


__all__ = ["LifecycleMixin"]
