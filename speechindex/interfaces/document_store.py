"""Abstract base class for the document database.

The document store holds the speeches themselves and the cross-reference
entries that link each speech to the vector ids generated for it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from speechindex.models.speech import CrossReference, Document


# Concrete implementation: SQLiteDocumentStore (speechindex/providers/document_store/)
class IDocumentStore(ABC):
    """Contract for persisting speeches and vector-id cross-references.

    Implementations raise :class:`~speechindex.utils.errors.DocumentStoreError`
    on any storage failure.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables / collections if they do not exist yet."""

    @abstractmethod
    async def add_document(
        self, title: str, author: str, body: str, source_path: str = ""
    ) -> Document:
        """Store a speech and return it with its assigned ``id``.

        Storing the same *source_path* again replaces title, author and body
        but keeps the original ``id``.
        """

    @abstractmethod
    async def list_documents(self) -> list[Document]:
        """Return every stored speech, oldest first."""

    @abstractmethod
    async def count_documents(self) -> int:
        """Return the number of stored speeches."""

    @abstractmethod
    async def append_cross_reference(self, reference: CrossReference) -> CrossReference:
        """Append *reference* and return it with its assigned ``id``.

        Entries are append-only; earlier entries for the same document are
        never rewritten.
        """

    @abstractmethod
    async def get_cross_references(
        self, source_document_id: str | None = None
    ) -> list[CrossReference]:
        """Return cross-references, optionally only those of one document."""

    @abstractmethod
    async def delete_cross_references(self, source_document_id: str) -> int:
        """Delete every cross-reference of one document; return how many."""
