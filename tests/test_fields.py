"""
Tests for field interception: reads, writes, deletion and the id alias.
"""

import pytest

from stardoc import Document, EmbeddedDocument
from stardoc.core.fields import FieldDescriptor


class Person(Document):
    name = str
    age = {"type": int, "default": 0}

    def __init__(self):
        super().__init__()
        self.nickname = str
        self._scratch = "temporary"

    @property
    def title(self):
        return f"{self.name} ({self.age})"


class Pet(EmbeddedDocument):
    species = str


class TestFieldAccess:

    def test_class_fields_become_descriptors(self):
        assert isinstance(Person.__dict__["name"], FieldDescriptor)
        assert isinstance(Person.__dict__["age"], FieldDescriptor)
        assert Person._declared_fields["age"].compute_default() == 0

    def test_reads_and_writes_go_through_values(self):
        person = Person.create()
        person.name = "Ada"
        person.nickname = "Countess"
        assert person._values["name"] == "Ada"
        assert person._values["nickname"] == "Countess"
        assert person.name == "Ada"
        assert person.nickname == "Countess"
        assert "name" not in person.__dict__
        assert "nickname" not in person.__dict__

    def test_non_field_attributes_are_plain(self):
        person = Person.create()
        person._scratch = "changed"
        person.extra = 1
        assert person._scratch == "changed"
        assert person.extra == 1
        assert "extra" not in person._values
        assert "_scratch" not in person.schema()

    def test_unknown_attribute(self):
        person = Person.create()
        with pytest.raises(AttributeError):
            person.missing

    def test_properties_still_work(self):
        person = Person.create({"name": "Ada", "age": 36})
        assert person.title == "Ada (36)"

    def test_contains(self):
        person = Person.create()
        assert "name" in person
        assert "nickname" in person
        assert "_id" in person
        assert "title" in person
        assert "unknown" not in person


class TestIdAlias:

    def test_id_reads_and_writes_underscore_id(self):
        person = Person.create()
        assert person.id is None
        person.id = "abcdefgh12345678"
        assert person._id == "abcdefgh12345678"
        assert person._values["_id"] == "abcdefgh12345678"

    def test_writing_underscore_id_updates_id(self):
        person = Person.create()
        person._id = "abcdefgh12345678"
        assert person.id == "abcdefgh12345678"

    def test_id_is_not_a_field(self):
        assert "id" not in Person.create().schema()

    def test_embedded_id_cannot_be_set(self):
        pet = Pet.create()
        with pytest.raises(AttributeError):
            pet.id = "abcdefgh12345678"


class TestFieldDeletion:

    def test_delete_class_field(self):
        person = Person.create({"name": "Ada"})
        del person.name
        assert "name" not in person.schema()
        assert "name" not in person._values
        with pytest.raises(AttributeError):
            person.name

    def test_deleted_class_field_becomes_plain_attribute(self):
        person = Person.create({"name": "Ada"})
        del person.name
        person.name = "plain"
        assert person.name == "plain"
        assert "name" not in person._values
        assert "name" not in person.to_serializable()

    def test_delete_constructor_field(self):
        person = Person.create({"nickname": "Countess"})
        del person.nickname
        assert "nickname" not in person.schema()
        with pytest.raises(AttributeError):
            person.nickname

    def test_deletion_is_per_instance(self):
        first, second = Person.create(), Person.create()
        del first.name
        assert "name" in second.schema()
        assert second.name is None
