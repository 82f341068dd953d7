"""Speech discovery and storage.

Walks a directory tree of ``.txt`` speeches and stores each one in the
document store.  The directory layout carries the metadata::

    speeches/
        Lincoln/
            Gettysburg-Address.txt      -> title "Gettysburg Address"
            Second-Inaugural.1865.txt   -> title "Second Inaugural"

The title is the file name up to its first ``.`` with ``-`` replaced by a
space; the author is looked up from the parent directory name in the
configured author table.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import structlog

from speechindex.config.loader import resolve_author
from speechindex.interfaces.document_store import IDocumentStore
from speechindex.models.speech import Document
from speechindex.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

_SPEECH_SUFFIX = ".txt"


def title_from_filename(filename: str) -> str:
    """``"Gettysburg-Address.1863.txt"`` -> ``"Gettysburg Address"``."""
    return filename.split(".", 1)[0].replace("-", " ").strip()


class SpeechDirectoryLoader:
    """Reads speech files from disk and stores them as documents.

    Parameters
    ----------
    document_store:
        Destination store; storing the same file twice updates it in place.
    config:
        Resolved configuration; its ``authors`` table maps directory names
        to authors.
    """

    def __init__(self, document_store: IDocumentStore, config: Mapping | None = None) -> None:
        self._document_store = document_store
        self._config = dict(config or {})

    def discover(self, root: str | Path) -> list[Path]:
        """Return every ``.txt`` file under *root*, sorted.

        Raises
        ------
        ConfigurationError
            If *root* is not a directory.
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise ConfigurationError(message=f"Speech directory not found: {root_path}")
        return sorted(
            p for p in root_path.rglob(f"*{_SPEECH_SUFFIX}") if p.is_file()
        )

    async def store_directory(self, root: str | Path) -> list[Document]:
        """Store every speech found under *root* and return the documents."""
        stored: list[Document] = []
        for path in self.discover(root):
            document = await self.store_file(path)
            if document is not None:
                stored.append(document)
        logger.info("speeches_stored", root=str(root), stored=len(stored))
        return stored

    async def store_file(self, path: Path) -> Document | None:
        """Store one speech file; unreadable files are logged and skipped."""
        try:
            body = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("speech_unreadable", path=str(path), error=str(exc))
            return None

        title = title_from_filename(path.name)
        author = resolve_author(self._config, path.parent.name)
        return await self._document_store.add_document(
            title=title,
            author=author,
            body=body,
            source_path=str(path.resolve()),
        )
