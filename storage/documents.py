"""Document store contract shared by the feedback pipeline and the query layer."""
from __future__ import annotations

import re
from typing import Any, ContextManager, Dict, List, Mapping, Optional, Protocol
from uuid import uuid4

INTERVIEWS = "interviews"
FEEDBACK = "feedback"

Document = Dict[str, Any]

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DocumentStoreError(RuntimeError):
    """Raised when the backing store cannot complete an operation."""


class MissingIndexError(DocumentStoreError):
    """Raised when a query combines filters and ordering without a composite index."""


class DocumentStore(Protocol):
    """Per-collection key/value store with equality queries.

    Returned documents always carry their identifier under ``id``. Equality
    filters and ``order_by`` on a different field are not combinable; callers
    filter with the store and sort in process.
    """

    def add(self, collection: str, doc: Mapping[str, Any]) -> str: ...

    def get(self, collection: str, doc_id: str) -> Optional[Document]: ...

    def set(self, collection: str, doc_id: str, doc: Mapping[str, Any]) -> None: ...

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None: ...

    def query(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]: ...

    def transaction(self) -> ContextManager["DocumentStore"]: ...


def new_document_id() -> str:
    return uuid4().hex


def check_field(name: str) -> str:
    if not _FIELD_RE.match(name):
        raise ValueError(f"Unsupported field name: {name!r}")
    return name


def strip_id(doc: Mapping[str, Any]) -> Document:
    """Copy a document without its ``id`` key; identity lives beside the body."""
    return {key: value for key, value in doc.items() if key != "id"}


__all__ = [
    "FEEDBACK",
    "INTERVIEWS",
    "Document",
    "DocumentStore",
    "DocumentStoreError",
    "MissingIndexError",
    "check_field",
    "new_document_id",
    "strip_id",
]
