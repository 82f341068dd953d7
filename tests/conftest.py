"""Shared pytest fixtures for the speechindex test suite."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from speechindex.interfaces.document_store import IDocumentStore
from speechindex.interfaces.embedding_provider import IEmbeddingProvider
from speechindex.interfaces.vector_store_provider import IVectorStoreProvider
from speechindex.models.speech import CrossReference, Document
from speechindex.providers.tokenizer.regex_tokenizer import RegexTokenizer


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def tokenizer() -> RegexTokenizer:
    return RegexTokenizer()


@pytest.fixture
def sample_speech_text() -> str:
    """A short multi-paragraph speech with abbreviations and long sentences."""
    return (
        "Four score and seven years ago our fathers brought forth on this continent, "
        "a new nation, conceived in Liberty, and dedicated to the proposition that "
        "all men are created equal.\n\n"
        "Now we are engaged in a great civil war, testing whether that nation, or any "
        "nation so conceived and so dedicated, can long endure. We are met on a great "
        "battle-field of that war. Mr. Everett spoke for two hours before us.\n\n"
        "It is rather for us to be here dedicated to the great task remaining before us "
        "that from these honored dead we take increased devotion to that cause for which "
        "they gave the last full measure of devotion that we here highly resolve that "
        "these dead shall not have died in vain that this nation under God shall have a "
        "new birth of freedom and that government of the people by the people for the "
        "people shall not perish from the earth.\n"
    )


@pytest.fixture
def sample_document(sample_speech_text: str) -> Document:
    return Document(
        id="doc-gettysburg",
        title="Gettysburg Address",
        author="Abraham Lincoln",
        body=sample_speech_text,
        source_path="/speeches/Lincoln/Gettysburg-Address.txt",
    )


@pytest.fixture
def mock_vector_store() -> MagicMock:
    """A vector store whose count always reflects upserts immediately."""
    store = MagicMock(spec=IVectorStoreProvider)
    state = {"count": 0}

    async def _upsert(namespace, records):  # noqa: ANN001, ANN202
        state["count"] += len(records)

    async def _count(namespace):  # noqa: ANN001, ANN202
        return state["count"]

    store.upsert = AsyncMock(side_effect=_upsert)
    store.get_vector_count = AsyncMock(side_effect=_count)
    store.index_exists = AsyncMock(return_value=True)
    store.create_index = AsyncMock(return_value=True)
    store.delete_index = AsyncMock(return_value=True)
    store.delete_vectors = AsyncMock(return_value=None)
    store.get_provider_name.return_value = "mock"
    store.is_available.return_value = True
    return store


@pytest.fixture
def mock_document_store() -> MagicMock:
    store = MagicMock(spec=IDocumentStore)

    async def _append(reference: CrossReference) -> CrossReference:
        return reference.model_copy(update={"id": "ref-1"})

    store.initialize = AsyncMock(return_value=None)
    store.list_documents = AsyncMock(return_value=[])
    store.count_documents = AsyncMock(return_value=0)
    store.append_cross_reference = AsyncMock(side_effect=_append)
    store.get_cross_references = AsyncMock(return_value=[])
    store.delete_cross_references = AsyncMock(return_value=0)
    return store


@pytest.fixture
def mock_embedding_provider() -> MagicMock:
    """Embeds every text as a fixed 8-dim vector."""
    provider = MagicMock(spec=IEmbeddingProvider)

    async def _embed(texts: list[str]) -> list[list[float]]:
        return [[0.1 * (i % 5 + 1)] * 8 for i in range(len(texts))]

    provider.embed = AsyncMock(side_effect=_embed)
    provider.get_dimension.return_value = 8
    provider.get_provider_name.return_value = "mock"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Stand-in for asyncio.sleep that returns immediately."""
    return AsyncMock(return_value=None)


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo configure_logging() so later tests never write to a closed capture stream."""
    root_logger = logging.getLogger()
    handlers, level = list(root_logger.handlers), root_logger.level
    yield
    structlog.reset_defaults()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
