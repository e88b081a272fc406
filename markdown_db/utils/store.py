"""Persistent document store for the vault index, backed by SQLite."""

import json
import asyncio
import sqlite3
import aiosqlite
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
import logging

from ..constants import DATABASE_FILENAME, IN_MEMORY_DATABASE, ERROR_MESSAGES
from ..errors import StoreCorrupt, StoreUnavailable
from ..models import Document

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS application (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        version TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS documents (
        path TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        doc_type TEXT,
        content TEXT NOT NULL,
        content_lower TEXT NOT NULL,
        title_lower TEXT NOT NULL,
        modified_at REAL NOT NULL,
        size INTEGER NOT NULL,
        tags TEXT NOT NULL,
        indexed_at REAL NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS document_tags (
        path TEXT NOT NULL,
        tag TEXT NOT NULL,
        PRIMARY KEY (path, tag)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_document_tags_tag ON document_tags(tag)",
    "CREATE INDEX IF NOT EXISTS idx_documents_modified_at ON documents(modified_at)",
]

DROP_STATEMENTS = [
    "DROP TABLE IF EXISTS document_tags",
    "DROP TABLE IF EXISTS documents",
    "DROP TABLE IF EXISTS application",
]

DOCUMENT_COLUMNS = "path, title, doc_type, content, modified_at, size, tags, indexed_at"


class DocumentStore:
    """SQLite-backed store of indexed documents and the schema version.

    Every mutation commits immediately unless it runs inside
    ``transaction()``, which batches writes into a single commit and holds
    the store lock until it finishes. Reads take the same lock, so a reader
    never sees a half-applied batch.
    """

    def __init__(self, data_directory: Optional[Path] = None, in_memory: bool = False):
        """
        Initialize the document store.

        Args:
            data_directory: Directory holding the database file (created if missing)
            in_memory: Keep everything in memory; nothing survives the process
        """
        if not in_memory and data_directory is None:
            raise ValueError("data_directory is required unless in_memory=True")

        self.in_memory = in_memory
        self.data_directory = None if in_memory else Path(data_directory).expanduser()
        self.index_path: Optional[Path] = (
            None if in_memory else self.data_directory / DATABASE_FILENAME
        )

        self.db: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()
        # Task currently holding the lock through transaction()
        self._owner: Optional[asyncio.Task] = None

    @property
    def location(self) -> str:
        return IN_MEMORY_DATABASE if self.in_memory else str(self.index_path)

    async def __aenter__(self) -> "DocumentStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def initialize(self) -> None:
        """Open the database and create tables if needed.

        Raises:
            StoreUnavailable: the data directory or database cannot be opened
        """
        if not self.in_memory:
            try:
                self.data_directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StoreUnavailable(
                    ERROR_MESSAGES["data_dir_unavailable"].format(path=self.data_directory, error=e)
                ) from e

        await self._connect()

        try:
            await self._create_tables()
        except StoreCorrupt as e:
            # Left for the schema check to reset
            logger.warning(str(e))

    async def close(self) -> None:
        """Close database connection."""
        if self.db:
            await self.db.close()
            self.db = None

    async def _connect(self) -> None:
        try:
            self.db = await aiosqlite.connect(self.location)
        except sqlite3.Error as e:
            raise StoreUnavailable(
                ERROR_MESSAGES["database_unavailable"].format(path=self.location, error=e)
            ) from e

    async def _create_tables(self) -> None:
        with self._translate_errors():
            if not self.in_memory:
                # WAL lets readers proceed while a pass is writing
                await self.db.execute("PRAGMA journal_mode=WAL")
            for statement in SCHEMA_STATEMENTS:
                await self.db.execute(statement)
            await self.db.commit()

    async def _recreate_database(self) -> None:
        """Throw away an unreadable database file and start a fresh one."""
        await self.close()
        for suffix in ("", "-wal", "-shm", "-journal"):
            path = Path(f"{self.index_path}{suffix}")
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise StoreUnavailable(
                    ERROR_MESSAGES["database_unavailable"].format(path=path, error=e)
                ) from e
        await self._connect()
        await self._create_tables()
        logger.info(f"Recreated index database at {self.location}")

    @contextmanager
    def _translate_errors(self):
        try:
            yield
        except sqlite3.OperationalError as e:
            raise StoreUnavailable(
                ERROR_MESSAGES["database_unavailable"].format(path=self.location, error=e)
            ) from e
        except sqlite3.DatabaseError as e:
            raise StoreCorrupt(
                ERROR_MESSAGES["database_corrupt"].format(path=self.location, error=e)
            ) from e

    @asynccontextmanager
    async def _locked(self):
        if self._owner is not None and self._owner is asyncio.current_task():
            yield
            return
        async with self._lock:
            yield

    async def _commit(self) -> None:
        if self._owner is None:
            await self.db.commit()

    @asynccontextmanager
    async def transaction(self):
        """Group writes into one commit; rolled back if the block raises.

        Writes inside the block must come from the task that opened it.
        """
        async with self._lock:
            self._owner = asyncio.current_task()
            try:
                yield self
                with self._translate_errors():
                    await self.db.commit()
            except BaseException:
                if self.db:
                    try:
                        await self.db.rollback()
                    except sqlite3.Error as e:
                        logger.warning(f"Rollback failed: {e}")
                raise
            finally:
                self._owner = None

    @staticmethod
    def _decode_tags(path: str, tags_json: str) -> List[str]:
        try:
            tags = json.loads(tags_json)
            if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
                raise ValueError(f"expected a list of strings, got {tags!r}")
        except (TypeError, ValueError) as e:
            raise StoreCorrupt(
                ERROR_MESSAGES["record_corrupt"].format(record=f"tags for '{path}'", error=e)
            ) from e
        return tags

    def _row_to_document(self, row) -> Document:
        path, title, doc_type, content, modified_at, size, tags_json, indexed_at = row
        tags = self._decode_tags(path, tags_json)

        return Document(
            path=path,
            title=title,
            doc_type=doc_type,
            content=content,
            modified_at=modified_at,
            size=size,
            tags=set(tags),
            indexed_at=indexed_at,
        )

    async def get_document(self, path: str) -> Optional[Document]:
        """Get the stored document for a path, or None."""
        async with self._locked():
            with self._translate_errors():
                cursor = await self.db.execute(
                    f"SELECT {DOCUMENT_COLUMNS} FROM documents WHERE path = ?",
                    (path,)
                )
                row = await cursor.fetchone()

        if row:
            return self._row_to_document(row)
        return None

    async def put_document(self, document: Document) -> None:
        """Insert or overwrite the record for ``document.path``."""
        tags = sorted(document.tags)
        indexed_at = document.indexed_at or datetime.now().timestamp()

        async with self._locked():
            with self._translate_errors():
                await self.db.execute(f"""
                    INSERT OR REPLACE INTO documents ({DOCUMENT_COLUMNS}, content_lower, title_lower)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    document.path,
                    document.title,
                    document.doc_type,
                    document.content,
                    document.modified_at,
                    document.size,
                    json.dumps(tags),
                    indexed_at,
                    document.content.lower(),
                    document.title.lower(),
                ))

                # Keep the tag index in step with the document row
                await self.db.execute(
                    "DELETE FROM document_tags WHERE path = ?",
                    (document.path,)
                )
                await self.db.executemany(
                    "INSERT INTO document_tags (path, tag) VALUES (?, ?)",
                    [(document.path, tag) for tag in tags]
                )

                await self._commit()

    async def delete_document(self, path: str) -> None:
        """Remove a document from the index. Missing paths are ignored."""
        async with self._locked():
            with self._translate_errors():
                await self.db.execute("DELETE FROM documents WHERE path = ?", (path,))
                await self.db.execute("DELETE FROM document_tags WHERE path = ?", (path,))
                await self._commit()

    async def list_all_paths(self) -> List[str]:
        """Get list of all indexed paths."""
        async with self._locked():
            with self._translate_errors():
                cursor = await self.db.execute("SELECT path FROM documents ORDER BY path")
                return [row[0] for row in await cursor.fetchall()]

    async def list_modified_times(self) -> Dict[str, float]:
        """
        Map every indexed path to its stored modification time.

        Each record's tags are decoded on the way, so an indexing pass
        notices unreadable records before any search trips over them.

        Raises:
            StoreCorrupt: if a stored record cannot be decoded
        """
        async with self._locked():
            with self._translate_errors():
                cursor = await self.db.execute("SELECT path, modified_at, tags FROM documents")
                rows = await cursor.fetchall()

        mtimes = {}
        for path, modified_at, tags_json in rows:
            self._decode_tags(path, tags_json)
            mtimes[path] = modified_at
        return mtimes

    async def get_schema_version(self) -> Optional[Any]:
        """Get the recorded schema version, or None for a fresh store."""
        async with self._locked():
            with self._translate_errors():
                cursor = await self.db.execute("SELECT version FROM application WHERE id = 1")
                row = await cursor.fetchone()

        if row is None:
            return None

        try:
            return json.loads(row[0])
        except (TypeError, ValueError) as e:
            raise StoreCorrupt(
                ERROR_MESSAGES["record_corrupt"].format(record="schema version", error=e)
            ) from e

    async def set_schema_version(self, version: Any) -> None:
        """Record the schema version the stored documents conform to."""
        async with self._locked():
            with self._translate_errors():
                await self.db.execute(
                    "INSERT OR REPLACE INTO application (id, version) VALUES (1, ?)",
                    (json.dumps(version),)
                )
                await self._commit()

    async def reset_all(self) -> None:
        """Drop every document and the schema version record."""
        async with self._locked():
            try:
                with self._translate_errors():
                    for statement in DROP_STATEMENTS:
                        await self.db.execute(statement)
                    for statement in SCHEMA_STATEMENTS:
                        await self.db.execute(statement)
                    await self._commit()
            except StoreCorrupt:
                if self.in_memory:
                    raise
                logger.warning(f"Index database {self.location} is unreadable, recreating it")
                await self._recreate_database()

        logger.info("Index reset: all documents dropped")

    async def query_documents(
        self,
        text: Optional[str] = None,
        tags: Optional[List[str]] = None,
        tag_mode: str = "all",
        limit: Optional[int] = None,
    ) -> List[Document]:
        """
        Find documents matching a text and/or tag predicate.

        Args:
            text: Case-insensitive substring the content must contain
            tags: Tags to filter by (exact, case-sensitive)
            tag_mode: 'any' needs one of the tags, 'all' needs every tag
            limit: Maximum number of results

        Returns:
            Matching documents ordered by path
        """
        clauses = []
        params: List[Any] = []

        if text:
            needle = text.lower()
            clauses.append("(instr(title_lower, ?) > 0 OR instr(content_lower, ?) > 0)")
            params.extend([needle, needle])

        wanted = sorted(set(tags or []))
        if wanted:
            placeholders = ", ".join("?" for _ in wanted)
            if tag_mode == "any":
                clauses.append(
                    f"path IN (SELECT path FROM document_tags WHERE tag IN ({placeholders}))"
                )
                params.extend(wanted)
            else:
                clauses.append(f"""
                    path IN (
                        SELECT path FROM document_tags
                        WHERE tag IN ({placeholders})
                        GROUP BY path
                        HAVING COUNT(DISTINCT tag) = ?
                    )
                """)
                params.extend(wanted)
                params.append(len(wanted))

        sql = f"SELECT {DOCUMENT_COLUMNS} FROM documents"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY path"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        async with self._locked():
            with self._translate_errors():
                cursor = await self.db.execute(sql, params)
                rows = await cursor.fetchall()

        return [self._row_to_document(row) for row in rows]

    async def list_tags(self) -> List[Tuple[str, int]]:
        """Get every tag in the index with the number of documents using it."""
        async with self._locked():
            with self._translate_errors():
                cursor = await self.db.execute("""
                    SELECT tag, COUNT(*) as count
                    FROM document_tags
                    GROUP BY tag
                    ORDER BY count DESC, tag
                """)
                return [(row[0], row[1]) for row in await cursor.fetchall()]

    async def count(self) -> int:
        """Number of indexed documents."""
        async with self._locked():
            with self._translate_errors():
                cursor = await self.db.execute("SELECT COUNT(*) FROM documents")
                row = await cursor.fetchone()
        return row[0]

    async def get_stats(self) -> Dict[str, Any]:
        """Get index statistics."""
        async with self._locked():
            with self._translate_errors():
                cursor = await self.db.execute(
                    "SELECT COUNT(*), SUM(size), MAX(indexed_at) FROM documents"
                )
                row = await cursor.fetchone()

        return {
            "total_documents": row[0] or 0,
            "total_size": row[1] or 0,
            "last_update": datetime.fromtimestamp(row[2]) if row[2] else None,
        }
