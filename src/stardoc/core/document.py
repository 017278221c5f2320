"""
Documents - The Heart of StarDoc

``Document`` is a top-level, persisted entity with its own id.
``EmbeddedDocument`` is a sub-entity stored inline in its owner, with no id
of its own. Both share the same lifecycle through the mixins; the
``_kind`` flag tells them apart.

Example:
    class Money(EmbeddedDocument):
        value = {"type": int, "default": 100}

    class Wallet(Document):
        owner = str
        contents = [Money]

    wallet = Wallet.create({"owner": "Scott"})
    wallet.contents.append(Money.create())
    await wallet.save()
"""

from typing import ClassVar, Optional

from ..errors import NotOverriddenError
from .mixins import LifecycleMixin, PersistenceMixin, SchemaMixin
from .schema import native_id_spec
from .types import DocumentKind


class DocumentMeta(type):
    """Completes every instance's schema after its ``__init__`` has run"""

    def __call__(cls, *args, **kwargs):
        instance = super().__call__(*args, **kwargs)
        instance.generate_schema()
        return instance


class BaseDocument(SchemaMixin, LifecycleMixin, metaclass=DocumentMeta):
    """Common base of documents and embedded documents"""

    _kind: ClassVar[Optional[DocumentKind]] = None

    def __init__(self):
        super().__init__()
        self._schema["_id"] = native_id_spec()
        self._schema.update(type(self)._declared_fields)

    @classmethod
    def document_class(cls) -> str:
        if cls._kind is None:
            raise NotOverriddenError(f"{cls.__name__} must be a Document or an EmbeddedDocument")
        return cls._kind.value

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self._values.items())
        return f"{type(self).__name__}({fields})"


class Document(PersistenceMixin, BaseDocument):
    """Top-level document, persisted in its own collection"""

    _kind = DocumentKind.DOCUMENT
    __collection__: ClassVar[Optional[str]] = None

    def _error_label(self) -> str:
        return self.collection_name()


class EmbeddedDocument(BaseDocument):
    """Document owned by its parent and stored inline, without an id"""

    _kind = DocumentKind.EMBEDDED

    def __init__(self):
        super().__init__()
        del self._schema["_id"]


__all__ = ["BaseDocument", "Document", "EmbeddedDocument", "DocumentMeta"]
