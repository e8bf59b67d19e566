from __future__ import annotations  # Interview domain models

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Interview(BaseModel):  # Stored interview document; stubs only carry userId/finalized/createdAt
    model_config = ConfigDict(extra="ignore")

    id: str
    role: str = ""
    type: str = ""
    level: str = ""
    techstack: List[str] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)
    userId: str
    finalized: bool = False
    coverImage: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class InterviewRequest(BaseModel):  # Question generation request
    type: str
    role: str
    level: str
    techstack: str
    amount: int = Field(default=5, ge=1, le=20)
    userId: str = Field(min_length=1)


__all__ = ["Interview", "InterviewRequest"]
