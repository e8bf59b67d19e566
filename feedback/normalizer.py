from __future__ import annotations  # Category canonicalization and schema validation

import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .errors import SchemaViolation
from .models import CATEGORY_NAMES, FeedbackAssessment

_CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Communication Skills", ("communication", "communicating", "communicate")),
    ("Technical Knowledge", ("technical", "knowledge", "tech")),
    ("Problem Solving", ("problem", "problemsolving", "solving")),
    ("Cultural Fit", ("cultural", "culture", "fit")),
    ("Confidence and Clarity", ("confidence", "confident", "clarity")),
)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_WORD = re.compile(r"[^a-z0-9]+")


def _words(label: str) -> List[str]:
    spaced = _CAMEL_BOUNDARY.sub(" ", label)
    return [word for word in _NON_WORD.split(spaced.lower()) if word]


def canonical_category(label: str) -> Optional[str]:  # Map a generator label onto the fixed vocabulary
    words = _words(label)
    if not words:
        return None
    joined = " ".join(words)
    compact = "".join(words)
    for canonical in CATEGORY_NAMES:
        if joined == " ".join(_words(canonical)):
            return canonical
    for canonical, keywords in _CATEGORY_KEYWORDS:
        for keyword in keywords:
            if keyword in words or (len(keyword) >= 6 and keyword in compact):
                return canonical
    return None


def _category_entries(raw: Any) -> Any:  # Accept the keyed mapping form as well as the list form
    if not isinstance(raw, Mapping):
        return raw
    entries: List[Dict[str, Any]] = []
    for key, value in raw.items():
        if isinstance(value, Mapping):
            entry = dict(value)
            entry["name"] = str(value.get("name") or key)
            entry.setdefault("comment", "")
        else:
            entry = {"name": str(key), "score": value, "comment": ""}
        entries.append(entry)
    return entries


def normalize_feedback(data: Any) -> Any:
    """Rewrite category labels to their canonical names.

    Anything that is not shaped like a feedback payload is returned untouched
    so validation can report it.
    """
    if not isinstance(data, Mapping):
        return data
    normalized = dict(data)
    entries = _category_entries(normalized.get("categoryScores"))
    if isinstance(entries, list):
        rewritten: List[Any] = []
        for entry in entries:
            if isinstance(entry, Mapping) and isinstance(entry.get("name"), str):
                entry = dict(entry)
                entry["name"] = canonical_category(entry["name"]) or entry["name"]
            rewritten.append(entry)
        normalized["categoryScores"] = rewritten
    return normalized


def validate_feedback(data: Any) -> FeedbackAssessment:
    try:
        return FeedbackAssessment.model_validate(data)
    except ValidationError as exc:
        violations = [
            (".".join(str(part) for part in error["loc"]) or "<root>", error["msg"])
            for error in exc.errors()
        ]
        raise SchemaViolation("Feedback payload failed validation", violations) from exc


def normalize_and_validate(data: Any) -> FeedbackAssessment:
    return validate_feedback(normalize_feedback(data))


__all__ = ["canonical_category", "normalize_and_validate", "normalize_feedback", "validate_feedback"]
