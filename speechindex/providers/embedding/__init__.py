"""Embedding provider implementations.

Only the ChromaDB backend needs client-side embeddings; Pinecone
integrated-embedding indexes embed record text server side.

FastEmbedEmbeddingProvider is imported directly where needed so that
importing this package does not pull in fastembed.
"""
