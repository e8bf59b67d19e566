from __future__ import annotations  # Interview question generation

import logging
from textwrap import dedent
from typing import List

from pydantic import StrictStr, TypeAdapter, ValidationError

from feedback.errors import SchemaViolation
from feedback.pipeline import utc_now
from feedback.sanitizer import sanitize_response
from llm_gateway import CompletionClient
from observability import log_event
from storage import INTERVIEWS, DocumentStore

from .covers import random_interview_cover
from .models import Interview, InterviewRequest


logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You generate interview questions. Return ONLY a valid JSON array of strings. No markdown. No explanation."
)

_QUESTIONS = TypeAdapter(List[StrictStr])


def generate_questions(client: CompletionClient, request: InterviewRequest) -> List[str]:  # Ask the generator for questions
    raw = client.generate(SYSTEM_PROMPT, _build_task(request))
    parsed = sanitize_response(raw)
    try:
        questions = _QUESTIONS.validate_python(parsed)
    except ValidationError as exc:
        violations = [
            (".".join(str(part) for part in error["loc"]) or "<root>", error["msg"]) for error in exc.errors()
        ]
        raise SchemaViolation("Question payload failed validation", violations) from exc
    questions = [question.strip() for question in questions if question.strip()]
    if not questions:
        raise SchemaViolation("Question payload failed validation", [("<root>", "at least one question required")])
    return questions


def generate_interview(client: CompletionClient, store: DocumentStore, request: InterviewRequest) -> Interview:  # Generate and store a new interview
    questions = generate_questions(client, request)
    document = {
        "role": request.role,
        "type": request.type,
        "level": request.level,
        "techstack": split_techstack(request.techstack),
        "questions": questions,
        "userId": request.userId,
        "finalized": False,
        "coverImage": random_interview_cover(),
        "createdAt": utc_now(),
    }
    interview_id = store.add(INTERVIEWS, document)
    logger.info("Stored interview %s with %d questions", interview_id, len(questions))
    log_event("interview.created", interview_id, user_id=request.userId, outcome="success")
    return Interview.model_validate({"id": interview_id, **document})


def split_techstack(techstack: str) -> List[str]:
    return [item.strip() for item in techstack.split(",") if item.strip()]


def _build_task(request: InterviewRequest) -> str:  # Build task prompt for LLM
    return dedent(
        f"""
        Prepare questions for a job interview.

        Role: {request.role}
        Experience Level: {request.level}
        Tech Stack: {request.techstack}
        Focus: {request.type}
        Number of questions: {request.amount}

        Rules:
        - Return ONLY a JSON array
        - Do not include extra text
        - Do not use special characters like / or * (the questions are read aloud)
        - Format example:
        ["Question 1", "Question 2"]
        """
    ).strip()


__all__ = [
    "SYSTEM_PROMPT",
    "generate_interview",
    "generate_questions",
    "split_techstack",
]
