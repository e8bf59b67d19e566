"""Read-side accessors for interviews and feedback.

All filtering beyond simple equality, and all ordering, happens here after
retrieval. The store is never asked to combine an equality filter with a sort
on another field because no composite indexes are declared. That keeps the
queries portable but means every call scans the matching documents; revisit
with real indexes before the collections grow large.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from feedback.models import Feedback
from storage import FEEDBACK, INTERVIEWS, DocumentStore

from .models import Interview

DEFAULT_LATEST_LIMIT = 20

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _parse_timestamp(value: Any) -> datetime:  # Parse ISO timestamp; unparseable values sort oldest
    if not isinstance(value, str) or not value:
        return _OLDEST
    try:
        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return _OLDEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _newest_first(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(docs, key=lambda doc: _parse_timestamp(doc.get("createdAt")), reverse=True)


def get_interview_by_id(store: DocumentStore, interview_id: Optional[str]) -> Optional[Interview]:
    if not interview_id or not interview_id.strip():
        return None
    doc = store.get(INTERVIEWS, interview_id)
    if doc is None:
        return None
    return Interview.model_validate(doc)


def get_interviews_by_user_id(store: DocumentStore, user_id: Optional[str]) -> List[Interview]:
    if not user_id or not user_id.strip():
        return []
    docs = store.query(INTERVIEWS, {"userId": user_id})
    return [Interview.model_validate(doc) for doc in _newest_first(docs)]


def get_latest_interviews(
    store: DocumentStore,
    user_id: Optional[str],
    limit: int = DEFAULT_LATEST_LIMIT,
) -> List[Interview]:
    """Finalized interviews owned by someone other than ``user_id``, newest first."""
    if limit <= 0:
        return []
    docs = store.query(INTERVIEWS, {"finalized": True})
    others = [doc for doc in docs if doc.get("userId") != user_id]
    return [Interview.model_validate(doc) for doc in _newest_first(others)[:limit]]


def get_feedback_by_interview_id(
    store: DocumentStore,
    interview_id: Optional[str],
    user_id: Optional[str],
) -> Optional[Feedback]:
    if not interview_id or not user_id:
        return None
    docs = store.query(FEEDBACK, {"interviewId": interview_id, "userId": user_id})
    if not docs:
        return None
    # Store order is insertion order, so the stable sort breaks createdAt ties by creation.
    earliest = sorted(docs, key=lambda doc: _parse_timestamp(doc.get("createdAt")))[0]
    return Feedback.model_validate(earliest)


__all__ = [
    "DEFAULT_LATEST_LIMIT",
    "get_feedback_by_interview_id",
    "get_interview_by_id",
    "get_interviews_by_user_id",
    "get_latest_interviews",
]
