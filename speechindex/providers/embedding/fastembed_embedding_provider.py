"""Local embedding provider for the ChromaDB backend, using fastembed.

fastembed runs ONNX models on CPU; the first use downloads and caches the
weights.  Segment text is embedded as *passages* (bge/e5 models prefix
passages and queries differently).
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from speechindex.interfaces.embedding_provider import IEmbeddingProvider
from speechindex.utils.errors import VectorStoreError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_FASTEMBED_MODEL = "BAAI/bge-small-en-v1.5"

_KNOWN_DIMENSIONS = {
    "BAAI/bge-small-en-v1.5": 384,
    "BAAI/bge-base-en-v1.5": 768,
    "sentence-transformers/all-MiniLM-L6-v2": 384,
    "intfloat/multilingual-e5-large": 1024,
}


class FastEmbedEmbeddingProvider(IEmbeddingProvider):
    """Embeds passages with a lazily loaded ``fastembed.TextEmbedding``.

    Parameters
    ----------
    model_name:
        Any model fastembed supports.
    batch_size:
        Texts per ONNX forward pass.
    """

    def __init__(self, model_name: str | None = None, batch_size: int = 64) -> None:
        self._model_name = model_name or DEFAULT_FASTEMBED_MODEL
        self._batch_size = batch_size
        # Unknown models report 0 until the first embedding is produced.
        self._dimension = _KNOWN_DIMENSIONS.get(self._model_name, 0)
        self._model: Any = None

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        model = self._ensure_model()
        try:
            vectors = await asyncio.to_thread(self._embed_passages, model, texts)
        except Exception as exc:
            raise VectorStoreError(
                message=f"Embedding {len(texts)} texts failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        if vectors and not self._dimension:
            self._dimension = len(vectors[0])
        return vectors

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "fastembed_" + self._model_name.rsplit("/", 1)[-1]

    def is_available(self) -> bool:
        try:
            import fastembed  # noqa: F401
        except ImportError:
            return False
        return True

    def _ensure_model(self) -> Any:
        if self._model is None:
            try:
                from fastembed import TextEmbedding

                self._model = TextEmbedding(model_name=self._model_name)
            except Exception as exc:
                raise VectorStoreError(
                    message=f"Cannot load fastembed model '{self._model_name}': {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
            logger.info("embedding_model_loaded", model=self._model_name)
        return self._model

    def _embed_passages(self, model: Any, texts: list[str]) -> list[list[float]]:
        # passage_embed yields one numpy array per text.
        return [
            [float(x) for x in vector]
            for vector in model.passage_embed(texts, batch_size=self._batch_size)
        ]
