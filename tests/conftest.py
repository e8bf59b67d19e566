import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import settings
from storage import SqliteDocumentStore


class FakeCompletionClient:
    """Completion client returning canned replies and recording prompts."""

    def __init__(self, *replies) -> None:
        self.replies: List[object] = list(replies)
        self.calls: List[Tuple[str, str]] = []

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


def feedback_payload(total: float = 78, **overrides) -> Dict[str, object]:
    payload: Dict[str, object] = {
        "totalScore": total,
        "categoryScores": [
            {"name": "Communication Skills", "score": 80, "comment": "Clear and structured."},
            {"name": "Technical Knowledge", "score": 75, "comment": "Solid backend basics."},
            {"name": "Problem Solving", "score": 70, "comment": "Reasoned through trade-offs."},
            {"name": "Cultural Fit", "score": 85, "comment": "Collaborative tone."},
            {"name": "Confidence and Clarity", "score": 80, "comment": "Calm delivery."},
        ],
        "strengths": ["Concise answers", "Relevant examples"],
        "areasForImprovement": ["Quantify impact"],
        "finalAssessment": "A promising backend candidate.",
    }
    payload.update(overrides)
    return payload


TRANSCRIPT = [
    {"role": "assistant", "content": "Tell me about yourself"},
    {"role": "user", "content": "I am a backend engineer"},
]


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch, tmp_path):
    db_path = tmp_path / "test.db"
    monkeypatch.setattr(settings, "DB_PATH", str(db_path), raising=False)
    yield db_path


@pytest.fixture
def store(tmp_db) -> SqliteDocumentStore:
    return SqliteDocumentStore(tmp_db)


@pytest.fixture
def fake_client_factory():
    def _make(*replies) -> FakeCompletionClient:
        return FakeCompletionClient(*replies)

    return _make
