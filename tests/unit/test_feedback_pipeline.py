import json
from typing import Any, Dict, List

import pytest

from conftest import TRANSCRIPT, feedback_payload
from feedback import FeedbackService, persist_feedback, validate_feedback
from feedback.pipeline import SYSTEM_PROMPT, build_task
from interviews import get_feedback_by_interview_id, get_interview_by_id
from llm_gateway import UpstreamError, UpstreamUnavailable
from storage import FEEDBACK, INTERVIEWS, DocumentStoreError


def _service(store, fake_client_factory, *replies) -> FeedbackService:
    return FeedbackService(fake_client_factory(*replies), store)


def test_scenario_scores_and_finalizes_interview(store, fake_client_factory) -> None:
    store.set(INTERVIEWS, "i1", {"userId": "u1", "role": "Backend", "finalized": False, "createdAt": "2024-01-01T00:00:00+00:00"})
    service = _service(store, fake_client_factory, json.dumps(feedback_payload(total=78)))

    outcome = service.create_feedback("i1", "u1", TRANSCRIPT)

    assert outcome.success is True
    assert outcome.feedbackId
    interview = get_interview_by_id(store, "i1")
    assert interview is not None
    assert interview.finalized is True
    assert interview.updatedAt
    assert interview.role == "Backend"
    feedback = get_feedback_by_interview_id(store, "i1", "u1")
    assert feedback is not None
    assert feedback.id == outcome.feedbackId
    assert feedback.totalScore == 78
    assert feedback.interviewId == "i1"
    assert feedback.createdAt


def test_prompt_embeds_formatted_transcript(store, fake_client_factory) -> None:
    client = fake_client_factory(json.dumps(feedback_payload()))
    FeedbackService(client, store).create_feedback("i1", "u1", TRANSCRIPT)
    system_prompt, user_prompt = client.calls[0]
    assert system_prompt == SYSTEM_PROMPT
    assert "- assistant: Tell me about yourself\n- user: I am a backend engineer" in user_prompt
    for name in ("Communication Skills", "Confidence and Clarity"):
        assert name in user_prompt


def test_build_task_keeps_braces_in_transcript() -> None:
    task = build_task("- user: I wrote {\"a\": 1}")
    assert '- user: I wrote {"a": 1}' in task
    assert '"totalScore": number' in task


def test_empty_transcript_never_calls_generator(store, fake_client_factory) -> None:
    client = fake_client_factory(json.dumps(feedback_payload()))
    outcome = FeedbackService(client, store).create_feedback("i1", "u1", [])
    assert outcome.success is False
    assert outcome.feedbackId is None
    assert client.calls == []
    assert store.query(FEEDBACK) == []


@pytest.mark.parametrize(("interview_id", "user_id"), [("", "u1"), ("i1", ""), ("  ", "u1")])
def test_missing_ids_fail_without_generator(store, fake_client_factory, interview_id, user_id) -> None:
    client = fake_client_factory(json.dumps(feedback_payload()))
    outcome = FeedbackService(client, store).create_feedback(interview_id, user_id, TRANSCRIPT)
    assert outcome.success is False
    assert client.calls == []


@pytest.mark.parametrize(
    "reply",
    [
        "",
        "I cannot help with that.",
        json.dumps({"totalScore": 50}),
        UpstreamUnavailable("down"),
        UpstreamError("401"),
    ],
)
def test_failures_become_unsuccessful_outcome(store, fake_client_factory, reply) -> None:
    store.set(INTERVIEWS, "i1", {"userId": "u1", "finalized": False})
    outcome = _service(store, fake_client_factory, reply).create_feedback("i1", "u1", TRANSCRIPT)
    assert outcome.success is False
    assert store.query(FEEDBACK) == []
    assert store.get(INTERVIEWS, "i1")["finalized"] is False


def test_fenced_reply_with_variant_labels_is_accepted(store, fake_client_factory) -> None:
    payload = feedback_payload()
    payload["categoryScores"][2]["name"] = "Problem-Solving"
    payload["categoryScores"][3]["name"] = "Cultural & Role Fit"
    payload["categoryScores"][4]["name"] = "Confidence & Clarity Score"
    reply = "```json\n" + json.dumps(payload) + "\n```"
    outcome = _service(store, fake_client_factory, reply).create_feedback("i1", "u1", TRANSCRIPT)
    assert outcome.success is True
    stored = store.get(FEEDBACK, outcome.feedbackId)
    assert [entry["name"] for entry in stored["categoryScores"]][2:] == [
        "Problem Solving",
        "Cultural Fit",
        "Confidence and Clarity",
    ]


def test_resubmission_with_same_id_upserts(store, fake_client_factory) -> None:
    store.set(INTERVIEWS, "i1", {"userId": "u1", "finalized": False})
    first = _service(store, fake_client_factory, json.dumps(feedback_payload(total=40)))
    second = _service(store, fake_client_factory, json.dumps(feedback_payload(total=90)))

    assert first.create_feedback("i1", "u1", TRANSCRIPT, feedback_id="fb-1").feedbackId == "fb-1"
    assert second.create_feedback("i1", "u1", TRANSCRIPT, feedback_id="fb-1").feedbackId == "fb-1"

    records = store.query(FEEDBACK, {"interviewId": "i1"})
    assert [record["id"] for record in records] == ["fb-1"]
    assert records[0]["totalScore"] == 90


def test_missing_interview_is_healed_with_stub(store, fake_client_factory) -> None:
    outcome = _service(store, fake_client_factory, json.dumps(feedback_payload())).create_feedback(
        "ghost", "u7", TRANSCRIPT
    )
    assert outcome.success is True
    stub = store.get(INTERVIEWS, "ghost")
    assert stub["userId"] == "u7"
    assert stub["finalized"] is True
    assert stub["createdAt"]
    interview = get_interview_by_id(store, "ghost")
    assert interview is not None and interview.questions == []


class FailingStore:
    """Store whose writes always fail."""

    def __init__(self, inner) -> None:
        self.inner = inner

    def transaction(self):
        raise DocumentStoreError("disk full")


def test_store_failure_is_reported_as_unsuccessful(store, fake_client_factory) -> None:
    service = FeedbackService(fake_client_factory(json.dumps(feedback_payload())), FailingStore(store))
    outcome = service.create_feedback("i1", "u1", TRANSCRIPT)
    assert outcome.success is False


class RecordingStore:
    """Store without real transactions that records the write sequence."""

    def __init__(self) -> None:
        self.docs: Dict[str, Dict[str, Dict[str, Any]]] = {FEEDBACK: {}, INTERVIEWS: {}}
        self.ops: List[str] = []

    def transaction(self):
        store = self

        class _Tx:
            def __enter__(self_inner):
                return store

            def __exit__(self_inner, *exc):
                return False

        return _Tx()

    def add(self, collection, doc):
        self.ops.append(f"add:{collection}")
        doc_id = f"{collection}-{len(self.docs[collection]) + 1}"
        self.docs[collection][doc_id] = dict(doc)
        return doc_id

    def get(self, collection, doc_id):
        self.ops.append(f"get:{collection}")
        doc = self.docs[collection].get(doc_id)
        return {"id": doc_id, **doc} if doc is not None else None

    def set(self, collection, doc_id, doc):
        self.ops.append(f"set:{collection}")
        self.docs[collection][doc_id] = dict(doc)

    def update(self, collection, doc_id, fields):
        self.ops.append(f"update:{collection}")
        self.docs[collection][doc_id].update(fields)


def test_existing_interview_gets_partial_update_only() -> None:
    recording = RecordingStore()
    recording.docs[INTERVIEWS]["i1"] = {"userId": "u1", "questions": ["Q1"], "finalized": False}
    assessment = validate_feedback(feedback_payload())

    feedback_id = persist_feedback(recording, interview_id="i1", user_id="u1", assessment=assessment)

    assert feedback_id == "feedback-1"
    assert recording.ops == ["add:feedback", "get:interviews", "update:interviews"]
    interview = recording.docs[INTERVIEWS]["i1"]
    assert interview["questions"] == ["Q1"]
    assert interview["finalized"] is True
    assert "updatedAt" in interview


def _broken_log_event(*args, **kwargs):
    raise NotADirectoryError("logs/feedback.log")


def test_log_failure_after_commit_keeps_success(store, fake_client_factory, monkeypatch) -> None:
    monkeypatch.setattr("feedback.pipeline.log_event", _broken_log_event)
    store.set(INTERVIEWS, "i1", {"userId": "u1", "finalized": False})

    outcome = _service(store, fake_client_factory, json.dumps(feedback_payload())).create_feedback("i1", "u1", TRANSCRIPT)

    assert outcome.success is True
    assert [record["id"] for record in store.query(FEEDBACK, {"interviewId": "i1"})] == [outcome.feedbackId]


def test_log_failure_never_rolls_back_stub_healing(store, fake_client_factory, monkeypatch) -> None:
    monkeypatch.setattr("feedback.pipeline.log_event", _broken_log_event)

    outcome = _service(store, fake_client_factory, json.dumps(feedback_payload())).create_feedback(
        "ghost", "u7", TRANSCRIPT
    )

    assert outcome.success is True
    assert store.get(FEEDBACK, outcome.feedbackId) is not None
    assert store.get(INTERVIEWS, "ghost")["finalized"] is True


def test_log_failure_on_error_path_still_reports_failure(store, fake_client_factory, monkeypatch) -> None:
    monkeypatch.setattr("feedback.pipeline.log_event", _broken_log_event)
    outcome = _service(store, fake_client_factory, "not json").create_feedback("i1", "u1", TRANSCRIPT)
    assert outcome.success is False


@pytest.mark.parametrize("literal", ["Infinity", "NaN"])
def test_non_finite_score_is_rejected_and_store_stays_readable(store, fake_client_factory, literal) -> None:
    healthy = _service(store, fake_client_factory, json.dumps(feedback_payload(total=64)))
    assert healthy.create_feedback("i2", "u2", TRANSCRIPT).success is True

    reply = json.dumps(feedback_payload()).replace('"totalScore": 78', f'"totalScore": {literal}')
    outcome = _service(store, fake_client_factory, reply).create_feedback("i1", "u1", TRANSCRIPT)

    assert outcome.success is False
    assert store.query(FEEDBACK, {"interviewId": "i1"}) == []
    assert get_feedback_by_interview_id(store, "i2", "u2").totalScore == 64
