"""Document persistence for interviews and feedback."""
from .documents import (
    FEEDBACK,
    INTERVIEWS,
    Document,
    DocumentStore,
    DocumentStoreError,
    MissingIndexError,
)
from .sqlite import SqliteDocumentStore, open_store

__all__ = [
    "FEEDBACK",
    "INTERVIEWS",
    "Document",
    "DocumentStore",
    "DocumentStoreError",
    "MissingIndexError",
    "SqliteDocumentStore",
    "open_store",
]
