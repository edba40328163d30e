# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository base: versioned JSON documents.

Each aggregate lives in one row (``id``, ``version``, ``body`` plus a few
indexed columns). Saves are compare-and-set on ``version``; a lost race
raises ConcurrencyConflict instead of silently overwriting.
NO business rules here — pure data access.
"""

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Engine

from clubflow.core.errors import ConcurrencyConflict
from clubflow.core.logging import get_logger
from clubflow.models.domain import Document

logger = get_logger(__name__)

DocT = TypeVar("DocT", bound=Document)


class DocumentRepository(Generic[DocT]):
    """Shared CRUD for one aggregate table."""

    table: str = ""
    model: type = Document
    # Extra indexed columns: column name -> attribute name on the document
    index_columns: dict[str, str] = {}

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # ── Read ──

    def get(self, doc_id: str) -> Optional[DocT]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT version, body FROM {self.table} WHERE id = :id"),
                {"id": doc_id},
            ).fetchone()
        return self._row_to_doc(row) if row else None

    def get_all(self) -> list[DocT]:
        """All documents, oldest first."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT version, body FROM {self.table}")
            ).fetchall()
        docs = [self._row_to_doc(r) for r in rows]
        return sorted(docs, key=lambda d: d.created_at)

    def find_by(self, column: str, value: Any) -> list[DocT]:
        if column not in self.index_columns:
            raise ValueError(f"'{column}' is not an indexed column of {self.table}")
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT version, body FROM {self.table} WHERE {column} = :value"),
                {"value": value},
            ).fetchall()
        return [self._row_to_doc(r) for r in rows]

    def exists(self, doc_id: str) -> bool:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT 1 FROM {self.table} WHERE id = :id"), {"id": doc_id}
            ).fetchone()
        return row is not None

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {self.table}")).scalar() or 0

    # ── Write ──

    def insert(self, doc: DocT) -> DocT:
        params = self._params(doc)
        params["version"] = 1
        columns = ", ".join(params)
        placeholders = ", ".join(f":{c}" for c in params)
        with self._engine.begin() as conn:
            conn.execute(
                text(f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})"),
                params,
            )
        doc.version = 1
        return doc

    def save(self, doc: DocT) -> DocT:
        """Write ``doc`` only if nobody saved it since it was loaded."""
        params = self._params(doc)
        params["expected"] = doc.version
        assignments = ", ".join(
            f"{c} = :{c}" for c in params if c not in ("id", "expected")
        )
        with self._engine.begin() as conn:
            result = conn.execute(
                text(
                    f"UPDATE {self.table} SET {assignments}, version = version + 1 "
                    f"WHERE id = :id AND version = :expected"
                ),
                params,
            )
        if result.rowcount == 0:
            logger.warning(
                "Stale write rejected: %s id=%s version=%d", self.table, doc.id, doc.version
            )
            raise ConcurrencyConflict(self.table, doc.id, doc.version)
        doc.version += 1
        return doc

    def delete(self, doc_id: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                text(f"DELETE FROM {self.table} WHERE id = :id"), {"id": doc_id}
            )
        return result.rowcount > 0

    # ── Bulk / internal ──

    def clear(self) -> None:
        with self._engine.begin() as conn:
            conn.execute(text(f"DELETE FROM {self.table}"))

    def verify_connection(self) -> int:
        return self.count()

    # ── Private ──

    def _params(self, doc: DocT) -> dict[str, Any]:
        params: dict[str, Any] = {"id": doc.id, "body": doc.model_dump_json()}
        for column, attr in self.index_columns.items():
            params[column] = getattr(doc, attr)
        return params

    def _row_to_doc(self, row) -> DocT:
        doc = self.model.model_validate_json(row[1])
        doc.version = row[0]
        return doc
