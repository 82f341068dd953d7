# =============================================================================
# speechindex/cli/ingest.py -- Speech loader CLI
# =============================================================================
#
# Supported subcommands:
#
#   create  -- create the vector index (Pinecone integrated-embedding index
#              or ChromaDB collection) if it does not exist
#   delete  -- delete the vector index if it exists
#   store   -- walk a directory of .txt speeches and store each one
#   load    -- run segment -> batch -> sync -> record for every stored speech
#   stats   -- namespace vector count, stored speeches, cross-references
#   forget  -- delete the vectors recorded for one speech
#
# Usage examples:
#   python -m speechindex.cli create
#   python -m speechindex.cli store --path ./speeches
#   python -m speechindex.cli load --max-tokens 200 --timeout 90
#   python -m speechindex.cli forget --document-id 3f2a...
#
# Exit codes: 0 on success, 1 on configuration or usage errors.
# =============================================================================

"""Standalone CLI for the speechindex loader.

Usage::

    speechindex create
    speechindex store --path ./speeches
    speechindex load [--force] [--confirmed-only]
    speechindex stats
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys

import structlog
from pydantic import ValidationError

from speechindex.config.loader import load_config
from speechindex.config.settings import Settings
from speechindex.models.speech import CrossReferencePolicy, LoadSummary
from speechindex.utils.errors import ConfigurationError, SpeechIndexError
from speechindex.utils.logging import configure_logging

logger = structlog.get_logger(logger_name=__name__)


# ---------------------------------------------------------------------------
# Provider factories
# ---------------------------------------------------------------------------


def _build_vector_store(app_settings: Settings):  # noqa: ANN202
    """Construct the configured vector store.

    Imports are deferred so that only the selected backend's SDK is loaded.
    """
    if app_settings.vector_store == "pinecone":
        from speechindex.providers.vector_store.pinecone_provider import PineconeProvider

        return PineconeProvider(
            api_key=app_settings.pinecone_api_key,
            index_name=app_settings.index_name,
            cloud=app_settings.pinecone_cloud,
            region=app_settings.pinecone_region,
            embedding_model=app_settings.embedding_model,
        )

    from speechindex.providers.embedding.fastembed_embedding_provider import (
        FastEmbedEmbeddingProvider,
    )
    from speechindex.providers.vector_store.chromadb_provider import ChromaDBProvider

    return ChromaDBProvider(
        embedding_provider=FastEmbedEmbeddingProvider(model_name=app_settings.fastembed_model),
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.index_name,
    )


def _build_tokenizer(app_settings: Settings):  # noqa: ANN202
    if app_settings.tokenizer == "huggingface":
        from speechindex.providers.tokenizer.huggingface_tokenizer import HuggingFaceTokenizer

        return HuggingFaceTokenizer(model_name=app_settings.tokenizer_model)

    from speechindex.providers.tokenizer.regex_tokenizer import RegexTokenizer

    return RegexTokenizer()


async def _open_document_store(app_settings: Settings):  # noqa: ANN202
    from speechindex.providers.document_store.sqlite_document_store import SQLiteDocumentStore

    store = SQLiteDocumentStore(db_path=app_settings.document_db_path)
    await store.initialize()
    return store


def _build_ingestion_service(
    app_settings: Settings,
    document_store,  # noqa: ANN001
    vector_store,  # noqa: ANN001
    policy: CrossReferencePolicy,
):  # noqa: ANN202
    """Wire segmenter, synchronizer and recorder into an IngestionService."""
    from speechindex.services.ingestion.ingestion_service import IngestionService
    from speechindex.services.ingestion.segmenter import TextSegmenter
    from speechindex.services.ingestion.synchronizer import IngestionSynchronizer

    segmenter = TextSegmenter(_build_tokenizer(app_settings), max_tokens=app_settings.max_tokens)
    synchronizer = IngestionSynchronizer(
        vector_store=vector_store,
        namespace=app_settings.namespace,
        poll_interval_seconds=app_settings.poll_interval_seconds,
        timeout_seconds=app_settings.load_timeout_seconds,
    )
    return IngestionService(
        document_store=document_store,
        vector_store=vector_store,
        segmenter=segmenter,
        synchronizer=synchronizer,
        namespace=app_settings.namespace,
        max_batch_size=app_settings.max_batch_size,
        policy=policy,
    )


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_create(app_settings: Settings, vector_store=None) -> int:  # noqa: ANN001
    """Create the vector index."""
    vector_store = vector_store or _build_vector_store(app_settings)
    created = await vector_store.create_index()
    if created:
        print(f"Created index '{app_settings.index_name}' ({vector_store.get_provider_name()})")
    else:
        print(f"Index '{app_settings.index_name}' already exists")
    return 0


async def _handle_delete(app_settings: Settings, vector_store=None) -> int:  # noqa: ANN001
    """Delete the vector index."""
    vector_store = vector_store or _build_vector_store(app_settings)
    deleted = await vector_store.delete_index()
    if deleted:
        print(f"Deleted index '{app_settings.index_name}'")
    else:
        print(f"Index '{app_settings.index_name}' does not exist")
    return 0


async def _handle_store(
    args: argparse.Namespace,
    app_settings: Settings,
    config: dict,
    document_store=None,  # noqa: ANN001
) -> int:
    """Store every speech under ``--path``."""
    from speechindex.services.ingestion.document_loader import SpeechDirectoryLoader

    document_store = document_store or await _open_document_store(app_settings)
    path = args.path or app_settings.speeches_location
    print(f"Storing speeches from: {path}")

    documents = await SpeechDirectoryLoader(document_store, config).store_directory(path)

    print("\nStore complete:")
    print(f"  Speeches stored:  {len(documents)}")
    print(f"  Total in store:   {await document_store.count_documents()}")
    return 0


async def _handle_load(
    args: argparse.Namespace,
    app_settings: Settings,
    document_store=None,  # noqa: ANN001
    vector_store=None,  # noqa: ANN001
) -> int:
    """Load every stored speech into the vector store.

    SIGINT sets the cancel event: the current consistency wait stops and no
    further batches or speeches are submitted.
    """
    overrides = {}
    if args.max_tokens is not None:
        overrides["max_tokens"] = args.max_tokens
    if args.timeout is not None:
        overrides["load_timeout_seconds"] = args.timeout
    if overrides:
        app_settings = app_settings.model_copy(update=overrides)

    confirmed_only = args.confirmed_only or not app_settings.record_unconfirmed_ids
    policy = CrossReferencePolicy.CONFIRMED if confirmed_only else CrossReferencePolicy.ALL

    document_store = document_store or await _open_document_store(app_settings)
    vector_store = vector_store or _build_vector_store(app_settings)
    service = _build_ingestion_service(app_settings, document_store, vector_store, policy)

    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    # add_signal_handler is unavailable on Windows event loops.
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    try:
        summary = await service.load(force=args.force, cancel_event=cancel_event)
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)

    _print_summary(summary)
    return 0


def _print_summary(summary: LoadSummary) -> None:
    if summary.namespace_populated:
        print("Namespace already holds vectors; nothing loaded (use --force to load anyway).")
        return

    print("\nLoad complete:" if not summary.cancelled else "\nLoad cancelled:")
    print(f"  Speeches found:    {summary.documents_found}")
    print(f"  Speeches loaded:   {summary.documents_ingested}")
    print(f"  Speeches skipped:  {summary.documents_skipped}")
    print(f"  Segments:          {summary.total_segments}")
    print(f"  Vector ids stored: {summary.total_vectors}")

    unconverged = [
        (r.title, o.batch_number, o.state.value)
        for r in summary.results
        for o in r.batches
        if not o.converged
    ]
    if unconverged:
        print("\n  Batches not confirmed:")
        for title, number, state in unconverged:
            print(f"    {title:<40} batch {number:<4} {state}")


async def _handle_stats(
    app_settings: Settings,
    document_store=None,  # noqa: ANN001
    vector_store=None,  # noqa: ANN001
) -> int:
    """Display index and document store statistics."""
    document_store = document_store or await _open_document_store(app_settings)
    vector_store = vector_store or _build_vector_store(app_settings)

    print("Speech Index Statistics")
    print("=" * 40)
    print(f"  Backend:           {vector_store.get_provider_name()}")
    print(f"  Index:             {app_settings.index_name}")
    if await vector_store.index_exists():
        count = await vector_store.get_vector_count(app_settings.namespace)
        print(f"  Vectors in '{app_settings.namespace}': {count}")
    else:
        print("  Index does not exist")

    references = await document_store.get_cross_references()
    print(f"  Speeches stored:   {await document_store.count_documents()}")
    print(f"  Cross-references:  {len(references)}")
    print(f"  Recorded ids:      {sum(len(r.vector_ids) for r in references)}")
    return 0


async def _handle_forget(
    args: argparse.Namespace,
    app_settings: Settings,
    document_store=None,  # noqa: ANN001
    vector_store=None,  # noqa: ANN001
) -> int:
    """Delete the recorded vectors of one speech and drop its cross-references."""
    document_store = document_store or await _open_document_store(app_settings)
    vector_store = vector_store or _build_vector_store(app_settings)

    references = await document_store.get_cross_references(args.document_id)
    if not references:
        print(f"No cross-references recorded for document {args.document_id}. Nothing to forget.")
        return 0

    ids = [vector_id for reference in references for vector_id in reference.vector_ids]
    await vector_store.delete_vectors(app_settings.namespace, ids)
    removed = await document_store.delete_cross_references(args.document_id)

    print(f"Deleted {len(ids)} vectors and {removed} cross-references for {references[0].title}")
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the loader CLI."""
    parser = argparse.ArgumentParser(
        prog="speechindex",
        description="Load speeches into a vector store and track the generated vector ids.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        dest="log_level",
        help="Log level (default: LOG_LEVEL setting, INFO)",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="YAML configuration file (default: config/config.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Loader commands")

    subparsers.add_parser("create", help="Create the vector index")
    subparsers.add_parser("delete", help="Delete the vector index")

    # -- store --
    store_parser = subparsers.add_parser("store", help="Store speech files in the document store")
    store_parser.add_argument(
        "--path",
        default=None,
        help="Directory of .txt speeches (default: SPEECHES_LOCATION setting)",
    )

    # -- load --
    load_parser = subparsers.add_parser("load", help="Load stored speeches into the vector store")
    load_parser.add_argument(
        "--force",
        action="store_true",
        help="Load even if the namespace already holds vectors",
    )
    load_parser.add_argument(
        "--confirmed-only",
        action="store_true",
        dest="confirmed_only",
        help="Record only vector ids of batches confirmed by the store",
    )
    load_parser.add_argument(
        "--max-tokens",
        type=_positive_int,
        default=None,
        dest="max_tokens",
        help="Token budget per segment (default: MAX_TOKENS setting)",
    )
    load_parser.add_argument(
        "--timeout",
        type=_positive_int,
        default=None,
        help="Seconds to wait for each batch to become visible (default: LOAD_TIMEOUT_SECONDS)",
    )

    # -- stats --
    subparsers.add_parser("stats", help="Show index and document store statistics")

    # -- forget --
    forget_parser = subparsers.add_parser("forget", help="Delete the vectors recorded for a speech")
    forget_parser.add_argument("--document-id", required=True, dest="document_id")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _dispatch(args: argparse.Namespace, app_settings: Settings, config: dict) -> int:
    if args.command == "create":
        return await _handle_create(app_settings)
    if args.command == "delete":
        return await _handle_delete(app_settings)
    if args.command == "store":
        return await _handle_store(args, app_settings, config)
    if args.command == "load":
        return await _handle_load(args, app_settings)
    if args.command == "stats":
        return await _handle_stats(app_settings)
    if args.command == "forget":
        return await _handle_forget(args, app_settings)
    return 1


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Loads Settings from the environment / .env file and the YAML config,
    configures logging, and dispatches to the subcommand handler.  Any
    configuration error (invalid setting, missing credential, unreadable
    config file, missing index) exits with status 1.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        app_settings = Settings()
    except ValidationError as exc:
        print(f"Error: invalid configuration:\n{exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(
        log_level=args.log_level or app_settings.log_level,
        json_output=app_settings.app_env == "production",
    )

    missing = app_settings.get_missing_credentials()
    if missing:
        print(f"Error: missing required settings: {', '.join(missing)}", file=sys.stderr)
        sys.exit(1)

    try:
        config = load_config(args.config)
        exit_code = asyncio.run(_dispatch(args, app_settings, config))
    except ConfigurationError as exc:
        logger.error("configuration_error", error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1
    except SpeechIndexError as exc:
        logger.error("command_failed", command=args.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
