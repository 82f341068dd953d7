"""Embedding contract for vector stores that store client-computed vectors.

ChromaDB needs one; a Pinecone integrated-embedding index embeds record
text on the service side and does not.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IEmbeddingProvider(ABC):
    """Turns segment text into dense vectors.

    Implementation: ``FastEmbedEmbeddingProvider``.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per text, in input order.

        An empty input returns an empty list without loading any model.

        Raises
        ------
        speechindex.utils.errors.VectorStoreError
            If the model cannot be loaded or inference fails.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Vector length, or 0 while still unknown."""

    @abstractmethod
    def get_provider_name(self) -> str: ...

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backing library is importable."""
