"""Application settings loaded from environment variables via pydantic-settings.

pydantic-settings reads configuration from two sources, in priority order:

  1. **Environment variables** -- e.g. ``PINECONE_API_KEY=pc-abc123``
  2. **.env file** -- key=value lines in the working directory's ``.env``

Field ``max_tokens`` maps to env var ``MAX_TOKENS`` and so on.  Defaults
apply when neither source sets a value.  Numeric fields are validated once,
at construction; an invalid value raises ``pydantic.ValidationError``, which
the CLI reports as a fatal configuration error.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """speechindex settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Vector store ===
    vector_store: Literal["chromadb", "pinecone"] = "chromadb"
    index_name: str = "speeches"
    namespace: str = "speeches"
    # Pinecone (integrated-embedding index: the service embeds record text)
    pinecone_api_key: str = ""
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"
    embedding_model: str = "multilingual-e5-large"
    # ChromaDB (local; embeddings computed with fastembed)
    chromadb_persist_dir: str = "./data/chromadb"
    fastembed_model: str = "BAAI/bge-small-en-v1.5"

    # === Document database ===
    document_db_path: str = "data/speeches.db"
    speeches_location: str = "./speeches"

    # === Segmentation ===
    tokenizer: Literal["regex", "huggingface"] = "regex"
    tokenizer_model: str = "bert-base-uncased"
    max_tokens: int = Field(default=256, ge=1)

    # === Ingestion synchronizer ===
    max_batch_size: int = Field(default=96, ge=1)
    poll_interval_seconds: int = Field(default=1, ge=1)
    load_timeout_seconds: int = Field(default=60, ge=1)
    # False -> cross-references only keep ids of batches that converged.
    record_unconfirmed_ids: bool = True

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def get_missing_credentials(self) -> list[str]:
        """Return the names of credentials required by the selected backends but unset."""
        missing: list[str] = []
        if self.vector_store == "pinecone" and not self.pinecone_api_key:
            missing.append("PINECONE_API_KEY")
        return missing
