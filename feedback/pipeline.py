from __future__ import annotations  # Feedback generation pipeline and persistence

import logging
from datetime import datetime, timezone
from textwrap import dedent
from typing import Any, Dict, List, Optional, Sequence

from llm_gateway import CompletionClient, LlmGatewayError
from observability import log_event, span
from storage import FEEDBACK, INTERVIEWS, DocumentStore, DocumentStoreError

from .errors import FeedbackPipelineError, InvalidInput
from .models import CATEGORY_NAMES, FeedbackAssessment, FeedbackOutcome
from .normalizer import normalize_and_validate
from .sanitizer import sanitize_response
from .transcript import TurnLike, format_transcript


logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a professional interviewer. Return ONLY valid JSON. No markdown. No explanations."


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FeedbackService:  # Turns a transcript into a stored, scored feedback record
    def __init__(self, client: CompletionClient, store: DocumentStore) -> None:
        self.client = client
        self.store = store

    def create_feedback(
        self,
        interview_id: str,
        user_id: str,
        transcript: Sequence[TurnLike],
        feedback_id: Optional[str] = None,
    ) -> FeedbackOutcome:  # Run every stage once; failures become success=False
        stages: List[Dict[str, Any]] = []
        stage = "received"
        try:
            _require(interview_id, "interviewId")
            _require(user_id, "userId")
            if feedback_id is not None:
                _require(feedback_id, "feedbackId")
            with span(stages, "formatted"):
                stage = "formatted"
                formatted = format_transcript(transcript)
            with span(stages, "generated"):
                stage = "generated"
                raw = self.client.generate(SYSTEM_PROMPT, build_task(formatted))
            with span(stages, "sanitized"):
                stage = "sanitized"
                parsed = sanitize_response(raw)
            with span(stages, "validated"):
                stage = "validated"
                assessment = normalize_and_validate(parsed)
            with span(stages, "stored"):
                stage = "stored"
                stored_id = persist_feedback(
                    self.store,
                    interview_id=interview_id,
                    user_id=user_id,
                    assessment=assessment,
                    feedback_id=feedback_id,
                )
        except (FeedbackPipelineError, LlmGatewayError, DocumentStoreError) as exc:
            logger.warning("Feedback generation failed at %s for interview %s: %s", stage, interview_id, exc)
            _record(
                "feedback.failed",
                str(interview_id),
                level=logging.WARNING,
                stage=stage,
                reason=type(exc).__name__,
                user_id=user_id,
                stages=stages,
            )
            return FeedbackOutcome(success=False)
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error saving feedback for interview %s", interview_id)
            _record(
                "feedback.failed",
                str(interview_id),
                level=logging.ERROR,
                stage=stage,
                reason="unexpected",
                user_id=user_id,
                stages=stages,
            )
            return FeedbackOutcome(success=False)
        _record(
            "feedback.done",
            interview_id,
            outcome="success",
            feedback_id=stored_id,
            user_id=user_id,
            total_score=assessment.totalScore,
            stages=stages,
        )
        return FeedbackOutcome(success=True, feedbackId=stored_id)


def persist_feedback(
    store: DocumentStore,
    *,
    interview_id: str,
    user_id: str,
    assessment: FeedbackAssessment,
    feedback_id: Optional[str] = None,
) -> str:  # Upsert feedback and finalize its interview in one transaction
    now = utc_now()
    document = assessment.model_dump()
    document.update({"interviewId": interview_id, "userId": user_id, "createdAt": now})
    with store.transaction() as tx:
        if feedback_id:
            tx.set(FEEDBACK, feedback_id, document)
            stored_id = feedback_id
        else:
            stored_id = tx.add(FEEDBACK, document)
        stubbed = reconcile_interview(tx, interview_id=interview_id, user_id=user_id, now=now)
    if stubbed:
        logger.warning("Interview %s was missing while saving feedback; created stub for user %s", interview_id, user_id)
        _record("feedback.interview_stub", interview_id, level=logging.WARNING, user_id=user_id, feedback_id=stored_id)
    return stored_id


def reconcile_interview(store: DocumentStore, *, interview_id: str, user_id: str, now: str) -> bool:  # True when a stub was created
    interview = store.get(INTERVIEWS, interview_id)
    if interview is not None:
        store.update(INTERVIEWS, interview_id, {"finalized": True, "updatedAt": now})
        return False
    store.set(INTERVIEWS, interview_id, {"userId": user_id, "finalized": True, "createdAt": now})
    return True


def build_task(formatted_transcript: str) -> str:  # Build user prompt embedding the transcript
    categories = "\n".join(
        f'    {{"name": "{name}", "score": number, "comment": string}}{"," if index < len(CATEGORY_NAMES) - 1 else ""}'
        for index, name in enumerate(CATEGORY_NAMES)
    )
    return dedent(
        """
        Analyze the following mock interview transcript and generate structured feedback.
        Score the candidate from 0 to 100 overall and in each category. Be thorough and
        point out mistakes or areas for improvement; do not be lenient.

        Transcript:
        {transcript}

        Return JSON ONLY in this exact format:
        {{
          "totalScore": number,
          "categoryScores": [
        {categories}
          ],
          "strengths": string[],
          "areasForImprovement": string[],
          "finalAssessment": string
        }}
        Use exactly these five category names, each once.
        """
    ).strip().format(transcript=formatted_transcript, categories=categories)


def _record(kind: str, subject_id: str, **fields: Any) -> None:  # Event logging never changes an outcome
    try:
        log_event(kind, subject_id, **fields)
    except Exception:  # noqa: BLE001
        logger.exception("Unable to record %s event for %s", kind, subject_id)


def _require(value: Optional[str], field: str) -> None:
    if value is None or not str(value).strip():
        raise InvalidInput(f"{field} is required")


__all__ = [
    "FeedbackService",
    "SYSTEM_PROMPT",
    "build_task",
    "persist_feedback",
    "reconcile_interview",
    "utc_now",
]
