from __future__ import annotations  # FastAPI server exposing interview generation and feedback

import logging
from pathlib import Path
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from config import FEEDBACK_TARGET, QUESTIONS_TARGET, load_route, settings
from feedback import Feedback, FeedbackOutcome, FeedbackPipelineError, FeedbackService
from interviews import (
    Interview,
    InterviewRequest,
    generate_interview,
    get_feedback_by_interview_id,
    get_interview_by_id,
    get_interviews_by_user_id,
    get_latest_interviews,
)
from llm_gateway import CompletionClient, HttpCompletionClient, LlmGatewayError
from storage import DocumentStore, DocumentStoreError, SqliteDocumentStore


logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).resolve().parent / settings.APP_CONFIG_PATH
DATA_PATH = Path(settings.DB_PATH)

app = FastAPI(title="Mock Interview Feedback API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)


class CreateInterviewResponse(BaseModel):  # Result of question generation
    success: bool
    interviewId: str


class CreateFeedbackRequest(BaseModel):  # Transcript submission; ids and turns are checked by the pipeline
    userId: Optional[str] = None
    transcript: Optional[List[Any]] = None
    feedbackId: Optional[str] = None


def _document_store() -> DocumentStore:  # Store for the configured database path
    return SqliteDocumentStore(DATA_PATH)


def _completion_client(target: str) -> CompletionClient:  # Generator bound to a registry target
    return HttpCompletionClient(load_route(CONFIG_PATH, target))


def _read_store() -> DocumentStore:
    try:
        return _document_store()
    except DocumentStoreError as exc:
        logger.exception("Document store unavailable")
        raise HTTPException(status_code=503, detail="Document store unavailable") from exc


@app.get("/api/health")
def health() -> dict:  # Liveness probe
    return {"success": True}


@app.post("/api/interviews", response_model=CreateInterviewResponse, status_code=201)
def create_interview(payload: InterviewRequest) -> CreateInterviewResponse:  # Generate questions and store interview
    store = _read_store()
    try:
        interview = generate_interview(_completion_client(QUESTIONS_TARGET), store, payload)
    except LlmGatewayError as exc:
        logger.exception("Question generation request failed")
        raise HTTPException(status_code=502, detail=f"LLM request failed: {exc}") from exc
    except FeedbackPipelineError as exc:
        logger.warning("Question generation returned unusable output: %s", exc)
        raise HTTPException(status_code=422, detail=f"Invalid generator output: {exc}") from exc
    except DocumentStoreError as exc:
        logger.exception("Unable to store interview")
        raise HTTPException(status_code=503, detail="Document store unavailable") from exc
    return CreateInterviewResponse(success=True, interviewId=interview.id)


@app.get("/api/interviews/latest", response_model=List[Interview])
def list_latest_interviews(
    userId: str = Query(default=""),
    limit: int = Query(default=settings.LATEST_INTERVIEWS_LIMIT, ge=1, le=100),
) -> List[Interview]:  # Finalized interviews from other users
    store = _read_store()
    try:
        return get_latest_interviews(store, userId, limit)
    except DocumentStoreError as exc:
        logger.exception("Unable to list latest interviews")
        raise HTTPException(status_code=503, detail="Document store unavailable") from exc


@app.get("/api/interviews/{interview_id}", response_model=Interview)
def fetch_interview(interview_id: str) -> Interview:  # Retrieve one interview
    store = _read_store()
    try:
        interview = get_interview_by_id(store, interview_id)
    except DocumentStoreError as exc:
        logger.exception("Unable to load interview %s", interview_id)
        raise HTTPException(status_code=503, detail="Document store unavailable") from exc
    if interview is None:
        raise HTTPException(status_code=404, detail="Interview not found")
    return interview


@app.get("/api/users/{user_id}/interviews", response_model=List[Interview])
def list_user_interviews(user_id: str) -> List[Interview]:  # Interviews owned by a user, newest first
    store = _read_store()
    try:
        return get_interviews_by_user_id(store, user_id)
    except DocumentStoreError as exc:
        logger.exception("Unable to list interviews for %s", user_id)
        raise HTTPException(status_code=503, detail="Document store unavailable") from exc


@app.post("/api/interviews/{interview_id}/feedback", response_model=FeedbackOutcome)
def create_feedback(interview_id: str, payload: CreateFeedbackRequest) -> FeedbackOutcome:  # Score a transcript
    try:
        store = _document_store()
        client = _completion_client(FEEDBACK_TARGET)
    except (DocumentStoreError, OSError, KeyError, ValueError):
        logger.exception("Unable to prepare feedback pipeline")
        return FeedbackOutcome(success=False)
    service = FeedbackService(client, store)
    return service.create_feedback(
        interview_id,
        payload.userId,
        payload.transcript or [],
        feedback_id=payload.feedbackId,
    )


@app.get("/api/interviews/{interview_id}/feedback", response_model=Feedback)
def fetch_feedback(interview_id: str, userId: str = Query(default="")) -> Feedback:  # Feedback for an interview/user pair
    store = _read_store()
    try:
        feedback = get_feedback_by_interview_id(store, interview_id, userId)
    except DocumentStoreError as exc:
        logger.exception("Unable to load feedback for %s", interview_id)
        raise HTTPException(status_code=503, detail="Document store unavailable") from exc
    if feedback is None:
        raise HTTPException(status_code=404, detail="Feedback not found")
    return feedback
