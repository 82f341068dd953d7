"""Vector store provider implementations.

    ChromaDBProvider  -- local persistent collection (default).
    PineconeProvider  -- serverless integrated-embedding index.

Both are imported directly where needed so that selecting one backend
never requires the other's SDK to be importable.
"""
