# =============================================================================
# speechindex/cli/__init__.py -- CLI Module Overview
# =============================================================================
#
# Command-line entry point for operators running the speech loader as a
# batch job.  One module, ingest.py, with argparse subcommands:
#
#   create / delete  -- manage the vector index
#   store            -- read speech files into the document store
#   load             -- segment, upsert and cross-reference every speech
#   stats            -- show vector, document and cross-reference counts
#   forget           -- delete a speech's recorded vectors again
#
# Heavy imports (chromadb, pinecone, fastembed, tokenizers) are deferred
# inside factory functions so that `--help` and simple commands start fast.
# =============================================================================

"""CLI tools for the speechindex loader.

- ``python -m speechindex.cli`` / ``speechindex`` -- manage the index, store
  speeches and load them into the vector store.
"""
