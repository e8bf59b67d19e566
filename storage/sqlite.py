"""SQLite-backed document store."""
from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

from config.settings import settings

from .documents import (
    Document,
    DocumentStoreError,
    MissingIndexError,
    check_field,
    new_document_id,
    strip_id,
)
from .migrate import migrate


class SqliteDocumentStore:  # JSON documents keyed by (collection, id)
    def __init__(self, path: Path | str, *, _conn: Optional[sqlite3.Connection] = None) -> None:
        self._path = Path(path)
        self._conn = _conn
        if _conn is None:
            try:
                migrate(str(self._path))
            except (sqlite3.Error, OSError) as exc:
                raise DocumentStoreError(f"Unable to prepare store at {self._path}: {exc}") from exc

    @property
    def path(self) -> Path:
        return self._path

    def _open(self, *, autocommit: bool = False) -> sqlite3.Connection:  # Create SQLite connection
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if autocommit:
            conn = sqlite3.connect(self._path, isolation_level=None)
        else:
            conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:  # Reuse transaction connection when bound
        try:
            if self._conn is not None:
                yield self._conn
                return
            conn = self._open()
            try:
                yield conn
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise DocumentStoreError(str(exc)) from exc

    @contextmanager
    def transaction(self) -> Iterator["SqliteDocumentStore"]:  # Run several writes atomically
        if self._conn is not None:
            yield self
            return
        try:
            conn = self._open(autocommit=True)
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            raise DocumentStoreError(f"Unable to begin transaction: {exc}") from exc
        try:
            yield SqliteDocumentStore(self._path, _conn=conn)
            conn.execute("COMMIT")
        except BaseException as exc:
            conn.execute("ROLLBACK")
            if isinstance(exc, sqlite3.Error):
                raise DocumentStoreError(str(exc)) from exc
            raise
        finally:
            conn.close()

    def add(self, collection: str, doc: Mapping[str, Any]) -> str:
        doc_id = new_document_id()
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO documents (collection, doc_id, body) VALUES (?, ?, ?)",
                (collection, doc_id, _dump(doc)),
            )
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT doc_id, body FROM documents WHERE collection = ? AND doc_id = ?",
                (collection, doc_id),
            ).fetchone()
        return _row_to_doc(row) if row is not None else None

    def set(self, collection: str, doc_id: str, doc: Mapping[str, Any]) -> None:  # Full replace, keeps insertion order
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO documents (collection, doc_id, body) VALUES (?, ?, ?)
                ON CONFLICT (collection, doc_id) DO UPDATE SET body = excluded.body
                """,
                (collection, doc_id, _dump(doc)),
            )

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:  # Partial merge of top-level fields
        with self._connection() as conn:
            row = conn.execute(
                "SELECT body FROM documents WHERE collection = ? AND doc_id = ?",
                (collection, doc_id),
            ).fetchone()
            if row is None:
                raise KeyError(f"Document '{collection}/{doc_id}' not found")
            body = json.loads(row["body"])
            body.update(strip_id(fields))
            conn.execute(
                "UPDATE documents SET body = ? WHERE collection = ? AND doc_id = ?",
                (_dump(body), collection, doc_id),
            )

    def query(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        filters = dict(filters or {})
        if order_by is not None:
            check_field(order_by)
            others = sorted(name for name in filters if name != order_by)
            if others:
                raise MissingIndexError(
                    f"Query on '{collection}' filtering {others} and ordering by '{order_by}' needs a composite index"
                )
        clauses = ["collection = ?"]
        params: List[Any] = [collection]
        for name, value in filters.items():
            if name == "id":
                clauses.append("doc_id = ?")
                params.append(value)
                continue
            check_field(name)
            if value is None:
                clauses.append(f"json_extract(body, '$.{name}') IS NULL")
                continue
            clauses.append(f"json_extract(body, '$.{name}') = ?")
            params.append(value)
        sql = "SELECT doc_id, body FROM documents WHERE " + " AND ".join(clauses)
        if order_by is not None:
            direction = "DESC" if descending else "ASC"
            sql += f" ORDER BY json_extract(body, '$.{order_by}') {direction}, seq {direction}"
        else:
            sql += " ORDER BY seq ASC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        with self._connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_doc(row) for row in rows]


def open_store(path: Optional[str] = None) -> SqliteDocumentStore:  # Store at the configured database path
    return SqliteDocumentStore(path or settings.DB_PATH)


def _dump(doc: Mapping[str, Any]) -> str:  # NaN and Infinity are not JSON and break json_extract
    try:
        return json.dumps(strip_id(doc), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise DocumentStoreError(f"Document is not storable as JSON: {exc}") from exc


def _row_to_doc(row: sqlite3.Row) -> Document:
    body: Dict[str, Any] = json.loads(row["body"])
    body["id"] = row["doc_id"]
    return body


__all__ = ["SqliteDocumentStore", "open_store"]
