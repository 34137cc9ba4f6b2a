"""
SQLite-backed embedded document store.

This module stores schemaless JSON documents in a single SQLite table,
one row per document:

    documents:
        - seq INTEGER (insertion order)
        - doc_id TEXT (the document _id, UNIQUE)
        - body_json TEXT (full document, including _id)

Queries are evaluated in Python against the decoded documents (see
query.py); only _id lookups hit the index.

Invariants:
    - find() returns documents in insertion order
    - Every write runs in its own transaction
    - One operation at a time per store (asyncio.Lock)
    - In-memory stores lose all data on close()

How to change safely:
    - Keep the table layout backward compatible with existing files
    - Query semantics live in query.py, not here
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Any

from ..config import StoreOptions
from ..errors import DuplicateIdError, InvalidDocumentError
from .query import ID_FIELD, apply_patch, match_document

logger = logging.getLogger(__name__)

CREATED_AT_FIELD = "createdAt"
UPDATED_AT_FIELD = "updatedAt"


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_id() -> str:
    """Generate a new 16-character document identifier."""
    return uuid.uuid4().hex[:16]


def _encode(document: dict[str, Any]) -> str:
    """Serialize a document body; tuples are stored as lists.

    Raises:
        InvalidDocumentError: If a value has no JSON form
    """
    try:
        return json.dumps(document)
    except (TypeError, ValueError) as exc:
        raise InvalidDocumentError(f"Document is not JSON-serializable: {exc}") from exc


def check_field_names(value: Any, path: str = "") -> None:
    """Reject field names the query language cannot address.

    Raises:
        InvalidDocumentError: If a key starts with '$' or contains '.'
    """
    if isinstance(value, dict):
        for key, child in value.items():
            if not isinstance(key, str):
                raise InvalidDocumentError(f"Field names must be strings, got {key!r}")
            if key.startswith("$"):
                raise InvalidDocumentError(
                    f"Field names cannot begin with '$': {path}{key}", field_name=key
                )
            if "." in key:
                raise InvalidDocumentError(
                    f"Field names cannot contain '.': {path}{key}", field_name=key
                )
            check_field_names(child, f"{path}{key}.")
    elif isinstance(value, list):
        for item in value:
            check_field_names(item, path)


class SqliteDocumentStore:
    """Embedded document store on a single SQLite database.

    Example:
        >>> store = SqliteDocumentStore(StoreOptions(in_memory_only=True))
        >>> doc = await store.insert({"name": "a"})
        >>> await store.find({"name": "a"})
        [{'name': 'a', '_id': '...'}]
    """

    def __init__(self, options: StoreOptions | None = None) -> None:
        """Initialize the store.

        Opens the database immediately when options.autoload is set, so
        an unusable path fails here rather than on first use.

        Args:
            options: Store options (defaults to an in-memory store)
        """
        self.options = options or StoreOptions()
        self._conn: sqlite3.Connection | None = None
        self._lock = asyncio.Lock()

        if self.options.autoload:
            self._open()

    @property
    def loaded(self) -> bool:
        """Whether the database connection is open."""
        return self._conn is not None

    @property
    def db_path(self) -> Path | None:
        """Database file path, or None for in-memory stores."""
        if self.options.in_memory:
            return None
        return Path(self.options.filename)

    def _open(self) -> None:
        db_path = self.db_path
        if db_path is None:
            target = ":memory:"
        else:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_path)

        conn = sqlite3.connect(
            target,
            timeout=self.options.busy_timeout_ms / 1000.0,
            isolation_level=None,  # Autocommit by default, explicit transactions
        )
        conn.row_factory = sqlite3.Row
        try:
            conn.execute(f"PRAGMA busy_timeout = {self.options.busy_timeout_ms}")
            if self.options.wal_mode and db_path is not None:
                conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS documents (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    doc_id TEXT NOT NULL UNIQUE,
                    body_json TEXT NOT NULL
                );
            """)
        except Exception:
            conn.close()
            raise

        self._conn = conn
        logger.info(
            "Opened document store",
            extra={"db_file": str(db_path) if db_path else ":memory:"},
        )

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._open()
        assert self._conn is not None
        return self._conn

    async def load(self) -> None:
        """Open the database if it is not open yet."""
        async with self._lock:
            self._connection()

    def close_nowait(self) -> None:
        """Close the database connection without waiting for the lock.

        Every store operation finishes its sqlite work before yielding to
        the event loop, so this is safe to call from synchronous code.
        """
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Closed document store")

    async def close(self) -> None:
        """Close the database connection."""
        async with self._lock:
            self.close_nowait()

    def _select(self, conn: sqlite3.Connection, query: dict[str, Any]) -> list[tuple[int, dict]]:
        """Load candidate rows and filter them with the query."""
        doc_id = query.get(ID_FIELD) if isinstance(query, dict) else None
        if isinstance(doc_id, str):
            cursor = conn.execute(
                "SELECT seq, body_json FROM documents WHERE doc_id = ?", (doc_id,)
            )
        else:
            cursor = conn.execute("SELECT seq, body_json FROM documents ORDER BY seq")

        matches = []
        for row in cursor.fetchall():
            document = json.loads(row["body_json"])
            if match_document(document, query):
                matches.append((row["seq"], document))
        return matches

    async def insert(self, document: dict[str, Any]) -> dict[str, Any]:
        """Insert a document.

        Args:
            document: Document to store (not mutated)

        Returns:
            Stored document including its _id

        Raises:
            InvalidDocumentError: If the document has unusable field names
            DuplicateIdError: If the _id is already taken
        """
        if not isinstance(document, dict):
            raise InvalidDocumentError(
                f"Document must be a dict, got {type(document).__name__}"
            )
        check_field_names(document)

        stored = json.loads(_encode(document))
        if ID_FIELD not in stored:
            stored[ID_FIELD] = generate_id()
        elif not isinstance(stored[ID_FIELD], str):
            raise InvalidDocumentError("_id must be a string", field_name=ID_FIELD)

        if self.options.timestamp_data:
            now = _now_ms()
            stored.setdefault(CREATED_AT_FIELD, now)
            stored.setdefault(UPDATED_AT_FIELD, now)

        async with self._lock:
            conn = self._connection()
            try:
                conn.execute(
                    "INSERT INTO documents (doc_id, body_json) VALUES (?, ?)",
                    (stored[ID_FIELD], _encode(stored)),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateIdError(stored[ID_FIELD]) from exc

        logger.debug("Inserted document", extra={"_id": stored[ID_FIELD]})
        return stored

    async def find(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        """Find documents matching a query.

        Args:
            query: Query dict

        Returns:
            Matching documents in insertion order (possibly empty)
        """
        async with self._lock:
            conn = self._connection()
            return [document for _, document in self._select(conn, query)]

    async def count(self, query: dict[str, Any]) -> int:
        """Count documents matching a query."""
        async with self._lock:
            conn = self._connection()
            return len(self._select(conn, query))

    async def update(
        self,
        query: dict[str, Any],
        patch: dict[str, Any],
        multi: bool = False,
    ) -> int:
        """Update documents matching a query.

        Args:
            query: Query selecting documents
            patch: Replacement document or modifier dict ($set, ...)
            multi: Update every match instead of only the first

        Returns:
            Number of documents updated
        """
        async with self._lock:
            conn = self._connection()
            matches = self._select(conn, query)
            if not multi:
                matches = matches[:1]

            updated_rows = []
            for seq, document in matches:
                updated = apply_patch(document, patch)
                check_field_names(updated)
                if self.options.timestamp_data:
                    if CREATED_AT_FIELD in document:
                        updated[CREATED_AT_FIELD] = document[CREATED_AT_FIELD]
                    updated[UPDATED_AT_FIELD] = _now_ms()
                updated_rows.append((_encode(updated), seq))

            conn.execute("BEGIN IMMEDIATE")
            try:
                conn.executemany(
                    "UPDATE documents SET body_json = ? WHERE seq = ?", updated_rows
                )
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise

        logger.debug("Updated documents", extra={"count": len(updated_rows), "multi": multi})
        return len(updated_rows)

    async def remove(self, query: dict[str, Any], multi: bool = False) -> int:
        """Remove documents matching a query.

        Args:
            query: Query selecting documents
            multi: Remove every match instead of only the first

        Returns:
            Number of documents removed
        """
        async with self._lock:
            conn = self._connection()
            matches = self._select(conn, query)
            if not multi:
                matches = matches[:1]

            conn.execute("BEGIN IMMEDIATE")
            try:
                conn.executemany(
                    "DELETE FROM documents WHERE seq = ?", [(seq,) for seq, _ in matches]
                )
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise

        logger.debug("Removed documents", extra={"count": len(matches), "multi": multi})
        return len(matches)
