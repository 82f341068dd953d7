"""Pinecone vector store provider adapter.

Targets a serverless *integrated-embedding* index: the index is created for
a hosted embedding model, and records are upserted as text that Pinecone
embeds server side.  The record field ``text_segment`` is mapped to the
model input.

Pinecone is eventually consistent: a successful upsert is not immediately
reflected in ``describe_index_stats``.  The ingestion synchronizer polls
:meth:`PineconeProvider.get_vector_count` until the namespace converges.

The Pinecone SDK is synchronous; every call is dispatched through
``asyncio.to_thread`` so the event loop stays responsive.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from speechindex.interfaces.vector_store_provider import IVectorStoreProvider
from speechindex.models.speech import VectorRecord
from speechindex.utils.errors import ConfigurationError, VectorStoreError

logger = structlog.get_logger(logger_name=__name__)

_TEXT_FIELD = "text_segment"


class PineconeProvider(IVectorStoreProvider):
    """Vector store provider backed by a Pinecone serverless index.

    Parameters
    ----------
    api_key:
        Pinecone API key.  Required unless *client* is injected.
    index_name:
        Name of the index to create, use and delete.
    cloud, region:
        Serverless placement used by :meth:`create_index`.
    embedding_model:
        Hosted embedding model for the integrated index.
    client:
        Pre-built ``pinecone.Pinecone`` client (tests inject a mock).
    """

    def __init__(
        self,
        api_key: str = "",
        index_name: str = "speeches",
        cloud: str = "aws",
        region: str = "us-east-1",
        embedding_model: str = "multilingual-e5-large",
        client: Any | None = None,
    ) -> None:
        self._api_key = api_key
        self._index_name = index_name
        self._cloud = cloud
        self._region = region
        self._embedding_model = embedding_model
        self._client = client
        self._index: Any | None = None

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    message="PINECONE_API_KEY is not set",
                    provider_name=self.get_provider_name(),
                )
            from pinecone import Pinecone

            self._client = Pinecone(api_key=self._api_key)
        return self._client

    def _get_index(self) -> Any:
        if self._index is None:
            client = self._get_client()
            # Index() resolves the index host over the network.
            try:
                self._index = client.Index(self._index_name)
            except Exception as exc:
                raise VectorStoreError(
                    message=f"Pinecone index '{self._index_name}' lookup failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
        return self._index

    # ------------------------------------------------------------------
    # Index administration
    # ------------------------------------------------------------------

    async def index_exists(self) -> bool:
        client = self._get_client()
        try:
            return bool(await asyncio.to_thread(client.has_index, self._index_name))
        except Exception as exc:
            raise VectorStoreError(
                message=f"Pinecone has_index failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def create_index(self) -> bool:
        if await self.index_exists():
            logger.info("pinecone_index_exists", index=self._index_name)
            return False
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.create_index_for_model,
                name=self._index_name,
                cloud=self._cloud,
                region=self._region,
                embed={
                    "model": self._embedding_model,
                    "field_map": {"text": _TEXT_FIELD},
                },
            )
        except Exception as exc:
            raise VectorStoreError(
                message=f"Pinecone create_index_for_model failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info(
            "pinecone_index_created",
            index=self._index_name,
            model=self._embedding_model,
            cloud=self._cloud,
            region=self._region,
        )
        return True

    async def delete_index(self) -> bool:
        if not await self.index_exists():
            logger.info("pinecone_index_missing", index=self._index_name)
            return False
        client = self._get_client()
        try:
            await asyncio.to_thread(client.delete_index, self._index_name)
        except Exception as exc:
            raise VectorStoreError(
                message=f"Pinecone delete_index failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        self._index = None
        logger.info("pinecone_index_deleted", index=self._index_name)
        return True

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def upsert(self, namespace: str, records: list[VectorRecord]) -> None:
        if not records:
            return
        index = self._get_index()
        payload = [self._record_to_payload(r) for r in records]
        try:
            await asyncio.to_thread(index.upsert_records, namespace, payload)
        except Exception as exc:
            raise VectorStoreError(
                message=f"Pinecone upsert_records failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def get_vector_count(self, namespace: str) -> int:
        index = self._get_index()
        try:
            stats = await asyncio.to_thread(index.describe_index_stats)
        except Exception as exc:
            raise VectorStoreError(
                message=f"Pinecone describe_index_stats failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        summary = (stats.namespaces or {}).get(namespace)
        if summary is None:
            return 0
        return int(summary.vector_count)

    async def delete_vectors(self, namespace: str, ids: list[str]) -> None:
        if not ids:
            return
        index = self._get_index()
        try:
            await asyncio.to_thread(index.delete, ids=ids, namespace=namespace)
        except Exception as exc:
            raise VectorStoreError(
                message=f"Pinecone delete failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("pinecone_delete_vectors", namespace=namespace, count=len(ids))

    def get_provider_name(self) -> str:
        return "pinecone"

    def is_available(self) -> bool:
        """Return ``True`` if the SDK is installed and a key (or client) is present."""
        if self._client is not None:
            return True
        if not self._api_key:
            return False
        try:
            import pinecone  # noqa: F401

            return True
        except ImportError:
            return False

    @staticmethod
    def _record_to_payload(record: VectorRecord) -> dict[str, str]:
        return {
            "_id": record.id,
            _TEXT_FIELD: record.text,
            "title": record.title,
            "author": record.author,
            "source_document_id": record.source_document_id,
        }
