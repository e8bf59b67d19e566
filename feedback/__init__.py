from __future__ import annotations  # Re-export feedback public API

from .errors import (
    EmptyResponse,
    FeedbackPipelineError,
    InvalidInput,
    MalformedResponse,
    SchemaViolation,
)
from .models import CATEGORY_NAMES, CategoryScore, Feedback, FeedbackAssessment, FeedbackOutcome
from .normalizer import canonical_category, normalize_and_validate, normalize_feedback, validate_feedback
from .pipeline import FeedbackService, persist_feedback
from .sanitizer import sanitize_response, strip_code_fences
from .transcript import TranscriptTurn, format_transcript

__all__ = [
    "CATEGORY_NAMES",
    "CategoryScore",
    "EmptyResponse",
    "Feedback",
    "FeedbackAssessment",
    "FeedbackOutcome",
    "FeedbackPipelineError",
    "FeedbackService",
    "InvalidInput",
    "MalformedResponse",
    "SchemaViolation",
    "TranscriptTurn",
    "canonical_category",
    "format_transcript",
    "normalize_and_validate",
    "normalize_feedback",
    "persist_feedback",
    "sanitize_response",
    "strip_code_fences",
    "validate_feedback",
]
