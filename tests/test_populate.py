"""
Tests for reference population.
"""

import pytest
import pytest_asyncio

from stardoc import BackendError, Document, PopulatedList, populate
from stardoc.persistence import MemoryBackend, set_client


class CountingBackend(MemoryBackend):
    """Memory backend that records every load_by_id call"""

    def __init__(self, url: str = "memory://"):
        super().__init__(url)
        self.loads = []
        self.failing = set()

    async def load_by_id(self, collection, id, options=None):
        self.loads.append((collection, id))
        if collection in self.failing:
            raise BackendError(f"{collection} is unavailable")
        return await super().load_by_id(collection, id, options)

    def loads_from(self, collection):
        return [id for name, id in self.loads if name == collection]


class Author(Document):
    name = str


class Publisher(Document):
    name = str


class Book(Document):
    title = str
    author = Author
    publisher = Publisher
    reviewers = [Author]


class Magazine(Document):
    title = str
    editor = Author


@pytest_asyncio.fixture
async def backend():
    client = CountingBackend()
    set_client(client)
    yield client
    set_client(None)


@pytest_asyncio.fixture
async def authors(backend):
    return [await Author.create({"name": name}).save() for name in ("Ada", "Grace", "Alan")]


@pytest_asyncio.fixture
async def publisher(backend):
    return await Publisher.create({"name": "Penguin"}).save()


class TestPopulateOnLoad:

    @pytest.mark.asyncio
    async def test_scalar_reference_is_populated(self, authors, publisher):
        book = await Book.create({"title": "Notes", "author": authors[0], "publisher": publisher}).save()

        loaded = await Book.load_by_id(book.id)
        assert isinstance(loaded.author, Author)
        assert loaded.author.id == authors[0].id
        assert loaded.author.name == "Ada"
        assert isinstance(loaded.publisher, Publisher)
        assert loaded.publisher.name == "Penguin"

    @pytest.mark.asyncio
    async def test_populate_disabled(self, authors):
        book = await Book.create({"title": "Notes", "author": authors[0]}).save()

        loaded = await Book.load_by_id(book.id, populate=False)
        assert loaded.author == authors[0].id

    @pytest.mark.asyncio
    async def test_populate_selected_fields(self, authors, publisher):
        book = await Book.create({"title": "Notes", "author": authors[0], "publisher": publisher}).save()

        loaded = await Book.load_one({"title": "Notes"}, populate=["publisher"])
        assert loaded.author == authors[0].id
        assert isinstance(loaded.publisher, Publisher)

    @pytest.mark.asyncio
    async def test_array_of_references(self, authors):
        reviewers = [authors[2], authors[0]]
        book = await Book.create({"title": "Notes", "reviewers": reviewers}).save()

        loaded = await Book.load_by_id(book.id)
        assert isinstance(loaded.reviewers, PopulatedList)
        assert [reviewer.name for reviewer in loaded.reviewers] == ["Alan", "Ada"]
        assert loaded.reviewers.id_list == [authors[2].id, authors[0].id]

    @pytest.mark.asyncio
    async def test_load_many_populates_every_document(self, authors):
        for index, author in enumerate(authors):
            await Book.create({"title": f"Book {index}", "author": author}).save()

        books = await Book.load_many(order="title")
        assert [book.author.name for book in books] == ["Ada", "Grace", "Alan"]

    @pytest.mark.asyncio
    async def test_shared_references_load_once(self, backend, authors):
        for index in range(3):
            await Book.create({
                "title": f"Book {index}",
                "author": authors[0],
                "reviewers": [authors[0], authors[1]],
            }).save()

        books = await Book.load_many()

        assert len(books) == 3
        assert sorted(backend.loads_from("authors")) == sorted([authors[0].id, authors[1].id])
        assert books[0].author is books[1].author
        assert books[0].reviewers[0] is books[2].author


class TestPopulateFunction:

    @pytest.mark.asyncio
    async def test_empty_inputs(self, backend):
        assert await populate(None) is None
        assert await populate([]) == []
        assert backend.loads == []

    @pytest.mark.asyncio
    async def test_instance_shortcut(self, authors):
        book = Book.create({"title": "Notes", "author": authors[1].id})
        result = await book.populate()

        assert result is book
        assert book.author.name == "Grace"

    @pytest.mark.asyncio
    async def test_missing_reference_becomes_none(self, authors):
        book = await Book.create({"title": "Notes", "author": authors[0], "reviewers": [authors[1], authors[2]]}).save()
        await authors[0].delete()
        await authors[2].delete()

        loaded = await Book.load_by_id(book.id)
        assert loaded.author is None
        assert loaded.reviewers[0].name == "Grace"
        assert loaded.reviewers[1] is None
        assert loaded.reviewers.id_list == [authors[1].id, authors[2].id]

    @pytest.mark.asyncio
    async def test_resolved_documents_are_kept(self, backend, authors):
        book = Book.create({"title": "Notes", "author": authors[0], "reviewers": [authors[1], authors[2].id]})
        await populate(book)

        assert book.author is authors[0]
        assert book.reviewers[0] is authors[1]
        assert book.reviewers[1].name == "Alan"
        assert backend.loads_from("authors") == [authors[2].id]

    @pytest.mark.asyncio
    async def test_mixed_document_classes(self, authors):
        book = Book.create({"title": "Notes", "author": authors[0].id})
        magazine = Magazine.create({"title": "Monthly", "editor": authors[1].id})

        await populate([book, magazine])

        assert book.author.name == "Ada"
        assert magazine.editor.name == "Grace"

    @pytest.mark.asyncio
    async def test_field_filter(self, authors, publisher):
        book = Book.create({"title": "Notes", "author": authors[0].id, "publisher": publisher.id})
        await populate(book, ["author"])

        assert isinstance(book.author, Author)
        assert book.publisher == publisher.id

    @pytest.mark.asyncio
    async def test_failed_load_fails_the_call(self, backend, authors):
        book = await Book.create({"title": "Notes", "author": authors[0]}).save()
        backend.failing.add("authors")

        with pytest.raises(BackendError, match="authors is unavailable"):
            await Book.load_by_id(book.id)

    @pytest.mark.asyncio
    async def test_failed_load_lets_other_references_settle(self, backend, authors, publisher):
        book = Book.create({
            "title": "Notes",
            "author": authors[0].id,
            "publisher": publisher.id,
            "reviewers": [authors[1].id, authors[2].id],
        })
        backend.failing.add("publishers")

        with pytest.raises(BackendError, match="publishers is unavailable"):
            await populate(book)

        assert book.author.name == "Ada"
        assert [reviewer.name for reviewer in book.reviewers] == ["Grace", "Alan"]
        assert book.publisher == publisher.id
