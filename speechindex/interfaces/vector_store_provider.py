"""Abstract base class for vector-store service providers.

Defines the contract the ingestion synchronizer relies on: submit a batch
of records into a namespace, and read back how many vectors that namespace
currently holds.  Index administration (create / delete / exists) is part
of the same contract so the CLI can manage the index through whichever
backend is configured.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from speechindex.models.speech import VectorRecord


# Concrete implementations (speechindex/providers/vector_store/):
#   ChromaDBProvider -- local persistent store, embeddings via IEmbeddingProvider
#   PineconeProvider -- serverless integrated-embedding index
class IVectorStoreProvider(ABC):
    """Contract for the vector store the ingestion pipeline writes to.

    All methods are async so network-backed stores never block the event
    loop.  Writes are eventually consistent: after :meth:`upsert` returns,
    :meth:`get_vector_count` may keep reporting the old count for a while.
    Callers that need read-after-write guarantees poll the count.
    """

    @abstractmethod
    async def upsert(self, namespace: str, records: list[VectorRecord]) -> None:
        """Submit *records* to *namespace*.

        Parameters
        ----------
        namespace:
            Namespace (partition) inside the configured index.
        records:
            Records to write.  Each record's ``text`` is what gets embedded;
            ``title``, ``author`` and ``source_document_id`` are stored as
            metadata.  Re-using an existing id overwrites that vector.

        Raises
        ------
        speechindex.utils.errors.VectorStoreError
            If the store rejects the request or cannot be reached.
        """

    @abstractmethod
    async def get_vector_count(self, namespace: str) -> int:
        """Return the number of vectors currently visible in *namespace*.

        A namespace that does not exist yet counts as ``0``.

        Raises
        ------
        speechindex.utils.errors.VectorStoreError
            If the count cannot be read.
        """

    @abstractmethod
    async def delete_vectors(self, namespace: str, ids: list[str]) -> None:
        """Delete the vectors with the given *ids* from *namespace*."""

    @abstractmethod
    async def create_index(self) -> bool:
        """Create the configured index.

        Returns
        -------
        bool
            ``True`` if the index was created, ``False`` if it already
            existed.
        """

    @abstractmethod
    async def delete_index(self) -> bool:
        """Delete the configured index.

        Returns
        -------
        bool
            ``True`` if an index was deleted, ``False`` if none existed.
        """

    @abstractmethod
    async def index_exists(self) -> bool:
        """Return ``True`` if the configured index exists."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"pinecone"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the backend library is installed and configured."""
