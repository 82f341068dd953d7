"""SQLite-backed document store.

Persists speeches and their vector-id cross-references to a local SQLite
database at ``data/speeches.db``.  Uses ``aiosqlite`` for async I/O.

Two tables:

* ``speeches`` -- one row per speech; ``id`` is a UUID hex string assigned
  on first insert.  Re-storing the same ``source_path`` updates the row in
  place and keeps its ``id``.
* ``vector_references`` -- append-only; one row per ingestion of a speech,
  holding the generated vector ids as a JSON array.
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path

import aiosqlite
import structlog

from speechindex.interfaces.document_store import IDocumentStore
from speechindex.models.speech import CrossReference, Document
from speechindex.utils.errors import DocumentStoreError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/speeches.db")

_CREATE_TABLES_SQL = [
    """\
CREATE TABLE IF NOT EXISTS speeches (
    id           TEXT PRIMARY KEY,
    title        TEXT NOT NULL,
    author       TEXT NOT NULL,
    body         TEXT NOT NULL,
    source_path  TEXT UNIQUE,
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
""",
    """\
CREATE TABLE IF NOT EXISTS vector_references (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    speech_id    TEXT NOT NULL,
    title        TEXT NOT NULL,
    author       TEXT NOT NULL,
    vector_ids   TEXT NOT NULL,
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
""",
    "CREATE INDEX IF NOT EXISTS idx_references_speech ON vector_references(speech_id);",
]

_UPSERT_SPEECH_SQL = """\
INSERT INTO speeches (id, title, author, body, source_path)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT(source_path)
DO UPDATE SET title  = excluded.title,
              author = excluded.author,
              body   = excluded.body;
"""

_SELECT_SPEECH_BY_PATH_SQL = """\
SELECT id, title, author, body, source_path
FROM speeches
WHERE source_path = ?;
"""

_SELECT_SPEECHES_SQL = """\
SELECT id, title, author, body, source_path
FROM speeches
ORDER BY rowid;
"""

_INSERT_REFERENCE_SQL = """\
INSERT INTO vector_references (speech_id, title, author, vector_ids)
VALUES (?, ?, ?, ?);
"""


class SQLiteDocumentStore(IDocumentStore):
    """SQLite-backed speech and cross-reference persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the tables and indices if they don't exist."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(str(self._db_path)) as db:
                for sql in _CREATE_TABLES_SQL:
                    await db.execute(sql)
                await db.commit()
        except (OSError, aiosqlite.Error) as exc:
            raise DocumentStoreError(
                message=f"Unable to initialize {self._db_path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("document_db_initialized", path=str(self._db_path))

    async def add_document(
        self, title: str, author: str, body: str, source_path: str = ""
    ) -> Document:
        # NULL paths never collide on the UNIQUE constraint.
        path = source_path or None
        new_id = uuid.uuid4().hex
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                await db.execute(_UPSERT_SPEECH_SQL, (new_id, title, author, body, path))
                await db.commit()
                if path is None:
                    row = {"id": new_id, "title": title, "author": author, "body": body}
                else:
                    cursor = await db.execute(_SELECT_SPEECH_BY_PATH_SQL, (path,))
                    row = dict(await cursor.fetchone())
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to store speech '{title}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        document = Document(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            body=row["body"],
            source_path=source_path,
        )
        logger.info(
            "speech_stored",
            document_id=document.id,
            title=title,
            author=author,
            updated=document.id != new_id,
        )
        return document

    async def list_documents(self) -> list[Document]:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(_SELECT_SPEECHES_SQL)
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to list speeches: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return [
            Document(
                id=r["id"],
                title=r["title"],
                author=r["author"],
                body=r["body"],
                source_path=r["source_path"] or "",
            )
            for r in rows
        ]

    async def count_documents(self) -> int:
        return await self._count("SELECT COUNT(*) FROM speeches")

    async def append_cross_reference(self, reference: CrossReference) -> CrossReference:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    _INSERT_REFERENCE_SQL,
                    (
                        reference.source_document_id,
                        reference.title,
                        reference.author,
                        json.dumps(list(reference.vector_ids)),
                    ),
                )
                await db.commit()
                row_id = cursor.lastrowid
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to record vector ids for '{reference.title}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return reference.model_copy(update={"id": str(row_id)})

    async def get_cross_references(
        self, source_document_id: str | None = None
    ) -> list[CrossReference]:
        sql = "SELECT id, speech_id, title, author, vector_ids FROM vector_references"
        params: tuple[str, ...] = ()
        if source_document_id is not None:
            sql += " WHERE speech_id = ?"
            params = (source_document_id,)
        sql += " ORDER BY id"
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(sql, params)
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to read vector references: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return [
            CrossReference(
                id=str(r["id"]),
                source_document_id=r["speech_id"],
                title=r["title"],
                author=r["author"],
                vector_ids=tuple(json.loads(r["vector_ids"])),
            )
            for r in rows
        ]

    async def delete_cross_references(self, source_document_id: str) -> int:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    "DELETE FROM vector_references WHERE speech_id = ?",
                    (source_document_id,),
                )
                await db.commit()
                deleted = cursor.rowcount
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to delete vector references: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info(
            "vector_references_deleted",
            document_id=source_document_id,
            deleted=deleted,
        )
        return deleted

    async def _count(self, sql: str) -> int:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(sql)
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Count query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return row[0] if row else 0

    def get_provider_name(self) -> str:
        return "sqlite"
