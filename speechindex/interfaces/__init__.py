"""Public interface definitions for all external service providers.

Every external service the loader talks to is accessed through the
abstract base classes defined here.  Concrete adapters live in
``speechindex/providers/`` and are wired together by the CLI.

CONCRETE PROVIDER MAP:
    Interface              →  Concrete implementations
    ─────────────────────────────────────────────────────
    ITokenizer             →  RegexTokenizer, HuggingFaceTokenizer
    IVectorStoreProvider   →  ChromaDBProvider, PineconeProvider
    IEmbeddingProvider     →  FastEmbedEmbeddingProvider
    IDocumentStore         →  SQLiteDocumentStore
"""

from speechindex.interfaces.document_store import IDocumentStore
from speechindex.interfaces.embedding_provider import IEmbeddingProvider
from speechindex.interfaces.tokenizer import ITokenizer, Sentence
from speechindex.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IDocumentStore",
    "IEmbeddingProvider",
    "ITokenizer",
    "IVectorStoreProvider",
    "Sentence",
]
