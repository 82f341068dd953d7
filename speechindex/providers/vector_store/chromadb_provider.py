"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient`` to implement :class:`IVectorStoreProvider`.
The configured index name is used as the collection name; namespaces are
stored as a ``namespace`` metadata field on every record, so one collection
can hold several namespaces.  Fully local, no external service required.

Chroma reads are immediately consistent, so the synchronizer's wait
normally converges on its first read.
"""

from __future__ import annotations

from typing import Any

import chromadb
import structlog

from speechindex.interfaces.embedding_provider import IEmbeddingProvider
from speechindex.interfaces.vector_store_provider import IVectorStoreProvider
from speechindex.models.speech import VectorRecord
from speechindex.utils.errors import VectorStoreError

logger = structlog.get_logger(logger_name=__name__)


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    Record text is embedded with the injected :class:`IEmbeddingProvider`
    and the vectors are passed to ChromaDB explicitly; collections are
    opened without an embedding function so ChromaDB never loads its own
    default model.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "speeches",
    ) -> None:
        self._embedding_provider = embedding_provider
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._client = chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )

    # ------------------------------------------------------------------
    # Index administration
    # ------------------------------------------------------------------

    async def index_exists(self) -> bool:
        try:
            names = [getattr(c, "name", c) for c in self._client.list_collections()]
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB list_collections failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return self._collection_name in names

    async def create_index(self) -> bool:
        if await self.index_exists():
            logger.info("chromadb_collection_exists", collection=self._collection_name)
            return False
        try:
            self._client.get_or_create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=None,
            )
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB create collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("chromadb_collection_created", collection=self._collection_name)
        return True

    async def delete_index(self) -> bool:
        if not await self.index_exists():
            logger.info("chromadb_collection_missing", collection=self._collection_name)
            return False
        try:
            self._client.delete_collection(name=self._collection_name)
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB delete collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("chromadb_collection_deleted", collection=self._collection_name)
        return True

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def upsert(self, namespace: str, records: list[VectorRecord]) -> None:
        if not records:
            return
        embeddings = await self._embedding_provider.embed([r.text for r in records])
        try:
            self._collection().upsert(
                ids=[r.id for r in records],
                embeddings=embeddings,
                documents=[r.text for r in records],
                metadatas=[self._record_to_metadata(namespace, r) for r in records],
            )
        except VectorStoreError:
            raise
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.debug("chromadb_upsert", namespace=namespace, count=len(records))

    async def get_vector_count(self, namespace: str) -> int:
        try:
            existing = self._collection().get(where={"namespace": namespace}, include=[])
        except VectorStoreError:
            raise
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return len(existing["ids"]) if existing["ids"] else 0

    async def delete_vectors(self, namespace: str, ids: list[str]) -> None:
        if not ids:
            return
        try:
            self._collection().delete(ids=ids, where={"namespace": namespace})
        except VectorStoreError:
            raise
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB delete failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("chromadb_delete_vectors", namespace=namespace, count=len(ids))

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB client responds."""
        try:
            self._client.heartbeat()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _collection(self) -> Any:
        try:
            return self._client.get_collection(name=self._collection_name, embedding_function=None)
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB collection '{self._collection_name}' is not available: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    @staticmethod
    def _record_to_metadata(namespace: str, record: VectorRecord) -> dict[str, str]:
        """ChromaDB metadata values must be scalars."""
        return {
            "namespace": namespace,
            "title": record.title,
            "author": record.author,
            "source_document_id": record.source_document_id,
        }
