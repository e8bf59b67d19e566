from __future__ import annotations  # Feedback domain models

from typing import Annotated, List, Literal, Optional, Tuple, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator

CategoryName = Literal[
    "Communication Skills",
    "Technical Knowledge",
    "Problem Solving",
    "Cultural Fit",
    "Confidence and Clarity",
]
CATEGORY_NAMES: Tuple[str, ...] = get_args(CategoryName)

Score = Union[StrictInt, Annotated[StrictFloat, Field(allow_inf_nan=False)]]  # finite only, bool rejected


class CategoryScore(BaseModel):  # Score for one canonical category
    model_config = ConfigDict(extra="ignore")

    name: CategoryName
    score: Score
    comment: StrictStr


class FeedbackAssessment(BaseModel):  # Validated generator payload
    model_config = ConfigDict(extra="ignore")

    totalScore: Score
    categoryScores: List[CategoryScore]
    strengths: List[StrictStr]
    areasForImprovement: List[StrictStr]
    finalAssessment: StrictStr

    @field_validator("categoryScores")
    @classmethod
    def _require_every_category_once(cls, value: List[CategoryScore]) -> List[CategoryScore]:
        names = [entry.name for entry in value]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate categories: {', '.join(duplicates)}")
        if len(value) != len(CATEGORY_NAMES):
            raise ValueError(f"expected exactly {len(CATEGORY_NAMES)} categories, got {len(value)}")
        return value


class Feedback(FeedbackAssessment):  # Stored feedback document
    id: str
    interviewId: str
    userId: str
    createdAt: str


class FeedbackOutcome(BaseModel):  # Caller-facing result of a feedback run
    success: bool
    feedbackId: Optional[str] = None


__all__ = [
    "CATEGORY_NAMES",
    "CategoryName",
    "CategoryScore",
    "Feedback",
    "FeedbackAssessment",
    "FeedbackOutcome",
    "Score",
]
