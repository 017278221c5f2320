"""
Tests for field types and type predicates.
"""

from datetime import datetime

import pytest

from stardoc import Document, EmbeddedDocument
from stardoc.core.types import (
    ArrayOf,
    Embedded,
    Kind,
    Primitive,
    Reference,
    is_array,
    is_document,
    is_embedded_document,
    is_in_choices,
    is_supported_type,
    is_valid_type,
    to_field_type,
    type_name,
)


class Author(Document):
    name = str


class Address(EmbeddedDocument):
    street = str


class TestFieldTypeConversion:

    def test_primitive_tags(self):
        assert to_field_type(str) == Primitive(Kind.STRING)
        assert to_field_type(int) == Primitive(Kind.NUMBER)
        assert to_field_type(float) == Primitive(Kind.NUMBER)
        assert to_field_type(bool) == Primitive(Kind.BOOLEAN)
        assert to_field_type(datetime) == Primitive(Kind.DATE)
        assert to_field_type(bytes) == Primitive(Kind.BUFFER)

    def test_model_tags(self):
        assert to_field_type(Author) == Reference(Author)
        assert to_field_type(Address) == Embedded(Address)

    def test_array_tags(self):
        assert to_field_type([str]) == ArrayOf(Primitive(Kind.STRING))
        assert to_field_type([Address]) == ArrayOf(Embedded(Address))

    @pytest.mark.parametrize("tag", [[], [str, int], [[str]], dict, object, "str", 5, None])
    def test_unsupported_tags(self, tag):
        assert not is_supported_type(tag)
        with pytest.raises(TypeError):
            to_field_type(tag)

    def test_type_names(self):
        assert type_name(to_field_type(int)) == "Number"
        assert type_name(to_field_type([int])) == "[Number]"
        assert type_name(to_field_type(Author)) == "Author"


class TestPredicates:

    def test_is_array(self):
        assert is_array(to_field_type([str]))
        assert not is_array(to_field_type(str))

    def test_is_document(self):
        assert is_document(Author)
        assert is_document(Reference(Author))
        assert not is_document(Address)
        assert not is_document(str)

    def test_is_embedded_document(self):
        assert is_embedded_document(Address.create())
        assert not is_embedded_document(Address)
        assert not is_embedded_document({"street": "Main"})

    def test_none_is_always_valid(self):
        for tag in (str, int, bool, datetime, bytes, Address, [str]):
            assert is_valid_type(None, to_field_type(tag))

    def test_primitive_values(self):
        assert is_valid_type("a", to_field_type(str))
        assert not is_valid_type(1, to_field_type(str))
        assert is_valid_type(1.5, to_field_type(int))
        assert not is_valid_type(True, to_field_type(int))
        assert is_valid_type(False, to_field_type(bool))
        assert is_valid_type(datetime.now(), to_field_type(datetime))
        assert is_valid_type(1700000000, to_field_type(datetime))
        assert is_valid_type(b"\x00", to_field_type(bytes))
        assert not is_valid_type("bytes", to_field_type(bytes))

    def test_array_requires_every_element(self):
        numbers = to_field_type([int])
        assert is_valid_type([1, 2, 3], numbers)
        assert is_valid_type([], numbers)
        assert not is_valid_type([1, "2", 3], numbers)
        assert not is_valid_type(1, numbers)

    def test_embedded_values(self):
        assert is_valid_type(Address.create(), to_field_type(Address))
        assert not is_valid_type({"street": "Main"}, to_field_type(Address))

    @pytest.mark.asyncio
    async def test_reference_accepts_instances_and_ids(self, database):
        author = Author.create()
        await author.save()
        reference = to_field_type(Author)

        assert is_valid_type(author, reference)
        assert is_valid_type(author.id, reference)
        assert not is_valid_type("not an id", reference)
        assert not is_valid_type(Address.create(), reference)

    def test_choices(self):
        assert is_in_choices(None, "anything")
        assert is_in_choices([1, 5], None)
        assert is_in_choices([1, 5], 5)
        assert not is_in_choices([1, 5], 26)
        assert is_in_choices(["a", "b"], ["a", "b"])
        assert not is_in_choices(["a", "b"], ["a", "c"])
