"""Unit tests for FastEmbedEmbeddingProvider (model mocked, nothing downloaded)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from speechindex.providers.embedding.fastembed_embedding_provider import (
    FastEmbedEmbeddingProvider,
)
from speechindex.utils.errors import VectorStoreError


def _fake_model(dimension: int) -> MagicMock:
    model = MagicMock()
    model.passage_embed.side_effect = lambda texts, batch_size: iter([[0.5] * dimension for _ in texts])
    return model


@pytest.mark.asyncio
async def test_embed_uses_passage_embedding() -> None:
    provider = FastEmbedEmbeddingProvider(batch_size=16)
    provider._model = _fake_model(384)

    vectors = await provider.embed([f"text {i}" for i in range(40)])

    assert len(vectors) == 40
    assert len(vectors[0]) == 384
    provider._model.passage_embed.assert_called_once()
    assert provider._model.passage_embed.call_args.kwargs["batch_size"] == 16


@pytest.mark.asyncio
async def test_empty_input_does_not_load_model() -> None:
    provider = FastEmbedEmbeddingProvider()

    assert await provider.embed([]) == []
    assert provider._model is None


@pytest.mark.asyncio
async def test_model_error_is_wrapped() -> None:
    provider = FastEmbedEmbeddingProvider()
    provider._model = MagicMock()
    provider._model.passage_embed.side_effect = RuntimeError("onnx failure")

    with pytest.raises(VectorStoreError, match="onnx failure"):
        await provider.embed(["text"])


@pytest.mark.asyncio
async def test_unknown_model_learns_dimension() -> None:
    provider = FastEmbedEmbeddingProvider(model_name="acme/custom-embedder")
    assert provider.get_dimension() == 0
    provider._model = _fake_model(12)

    await provider.embed(["Ask not"])

    assert provider.get_dimension() == 12


def test_dimension_and_name() -> None:
    provider = FastEmbedEmbeddingProvider(model_name="BAAI/bge-base-en-v1.5")
    assert provider.get_dimension() == 768
    assert provider.get_provider_name() == "fastembed_bge-base-en-v1.5"
