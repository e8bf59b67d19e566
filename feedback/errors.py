from __future__ import annotations  # Failure taxonomy for the feedback pipeline

from typing import List, Sequence, Tuple


class FeedbackPipelineError(RuntimeError):  # Base error for pipeline stages
    pass


class InvalidInput(FeedbackPipelineError):  # Missing or empty required input
    pass


class EmptyResponse(FeedbackPipelineError):  # Generator returned no text
    pass


class MalformedResponse(FeedbackPipelineError):  # Generator text is not parseable JSON
    pass


class SchemaViolation(FeedbackPipelineError):  # Parsed payload does not match the expected shape
    def __init__(self, message: str, violations: Sequence[Tuple[str, str]] = ()) -> None:
        self.violations: List[Tuple[str, str]] = list(violations)
        if self.violations:
            detail = "; ".join(f"{field}: {constraint}" for field, constraint in self.violations)
            message = f"{message} ({detail})"
        super().__init__(message)


__all__ = [
    "EmptyResponse",
    "FeedbackPipelineError",
    "InvalidInput",
    "MalformedResponse",
    "SchemaViolation",
]
