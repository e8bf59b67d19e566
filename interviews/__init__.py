from __future__ import annotations  # Re-export interviews public API

from .covers import INTERVIEW_COVERS, random_interview_cover
from .generation import generate_interview, generate_questions, split_techstack
from .models import Interview, InterviewRequest
from .queries import (
    DEFAULT_LATEST_LIMIT,
    get_feedback_by_interview_id,
    get_interview_by_id,
    get_interviews_by_user_id,
    get_latest_interviews,
)

__all__ = [
    "DEFAULT_LATEST_LIMIT",
    "INTERVIEW_COVERS",
    "Interview",
    "InterviewRequest",
    "generate_interview",
    "generate_questions",
    "get_feedback_by_interview_id",
    "get_interview_by_id",
    "get_interviews_by_user_id",
    "get_latest_interviews",
    "random_interview_cover",
    "split_techstack",
]
