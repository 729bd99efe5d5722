"""
Tests for the question store and the question endpoints.
"""
import json

import pytest

from app.core.exceptions import ValidationError
from app.db.models.question import Question
from app.schemas.question import QuestionCreate
from app.services import question_store
from app.services.question_generation import FALLBACK_TECHNICAL_PROBLEMS, generate_behavioral_questions
from tests.utils import FakeLLM


def test_create_behavioral_question_defaults(db_session, test_user, test_job):
    """A stored question starts pending with an empty tag list."""
    question = question_store.create_question(db_session, test_user.id, QuestionCreate(
        job_id=test_job.id,
        type="behavioral",
        title="  Tell me about a conflict  ",
        description="Conflict resolution",
    ))

    assert question.id is not None
    assert question.title == "Tell me about a conflict"
    assert question.status == "pending"
    assert question.tags == []


def test_technical_question_without_description(db_session, test_user, test_job):
    question = question_store.create_question(db_session, test_user.id, QuestionCreate(
        job_id=test_job.id,
        type="TECHNICAL",
        title="Two Sum",
        difficulty="Easy",
        external_url="https://leetcode.com/problems/two-sum/",
    ))

    assert question.type == "technical"
    assert question.difficulty == "easy"
    assert question.description is None


@pytest.mark.parametrize("fields,message", [
    ({"type": "behavioral", "title": "T", "description": "d"}, "Job ID is required"),
    ({"job_id": 1, "type": "system-design", "title": "T"}, "Invalid question type"),
    ({"job_id": 1, "type": "technical", "title": "   "}, "Title is required"),
    ({"job_id": 1, "type": "technical", "title": "x" * 201}, "Title too long (max 200 characters)"),
    ({"job_id": 1, "type": "behavioral", "title": "T"}, "Description is required for behavioral questions"),
    ({"job_id": 1, "type": "technical", "title": "T", "difficulty": "extreme"},
     "Invalid difficulty. Must be one of: easy, medium, hard"),
    ({"job_id": 1, "type": "technical", "title": "T", "external_url": "not a url"}, "Invalid URL format"),
])
def test_validate_question_messages(fields, message):
    """Each invalid field is reported with its own message."""
    with pytest.raises(ValidationError) as exc_info:
        question_store.validate_question(QuestionCreate(**fields))

    assert exc_info.value.message == message


def test_bulk_create_is_all_or_nothing(db_session, test_user, test_job):
    """One invalid item rejects the whole batch."""
    items = [
        QuestionCreate(type="technical", title="Two Sum"),
        QuestionCreate(type="behavioral", title="No description"),
    ]

    with pytest.raises(ValidationError):
        question_store.create_questions(db_session, test_user.id, test_job.id, items)

    assert db_session.query(Question).count() == 0


def test_bulk_create_empty_list(db_session, test_user, test_job):
    assert question_store.create_questions(db_session, test_user.id, test_job.id, []) == []


def test_progress_counts_only_completed(db_session, test_user, test_job):
    """In-progress and skipped questions do not count as completed."""
    created = question_store.create_questions(db_session, test_user.id, test_job.id, [
        QuestionCreate(type="technical", title="A"),
        QuestionCreate(type="technical", title="B"),
        QuestionCreate(type="behavioral", title="C", description="d"),
        QuestionCreate(type="behavioral", title="D", description="d"),
    ])
    question_store.update_status(db_session, created[0].id, test_user.id, "completed")
    question_store.update_status(db_session, created[1].id, test_user.id, "skipped")
    question_store.update_status(db_session, created[2].id, test_user.id, "in_progress")

    progress = question_store.get_progress_by_job(db_session, test_job.id, test_user.id)

    assert progress == {
        "technical": {"total": 2, "completed": 1},
        "behavioral": {"total": 2, "completed": 0},
        "overall": {"total": 4, "completed": 1},
    }


def test_update_status_missing_question(db_session, test_user):
    assert question_store.update_status(db_session, 404, test_user.id, "completed") is None


def test_update_status_rejects_unknown(db_session, test_user):
    with pytest.raises(ValidationError):
        question_store.update_status(db_session, 1, test_user.id, "done")


def test_delete_by_job_id(db_session, test_user, test_job):
    question_store.create_questions(db_session, test_user.id, test_job.id, [
        QuestionCreate(type="technical", title="A"),
        QuestionCreate(type="technical", title="B"),
    ])

    assert question_store.delete_by_job_id(db_session, test_job.id, test_user.id) == 2
    assert question_store.find_by_job_id(db_session, test_job.id, test_user.id) == []


def test_create_question_endpoint(client, headers, test_job):
    response = client.post("/api/questions", json={
        "jobId": test_job.id,
        "type": "technical",
        "title": "Two Sum",
        "tags": ["arrays", " "],
        "externalUrl": "https://leetcode.com/problems/two-sum/",
    }, headers=headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["tags"] == ["arrays"]
    assert data["externalUrl"] == "https://leetcode.com/problems/two-sum/"
    assert data["status"] == "pending"


def test_create_question_for_foreign_job(client, headers):
    response = client.post("/api/questions", json={
        "jobId": 999, "type": "technical", "title": "Two Sum",
    }, headers=headers)

    assert response.status_code == 404


def test_list_by_type_and_toggle(client, headers, test_job):
    """Type filter narrows the list; toggle flips completed and pending."""
    client.post("/api/questions", json={"jobId": test_job.id, "type": "technical", "title": "A"}, headers=headers)
    behavioral = client.post("/api/questions", json={
        "jobId": test_job.id, "type": "behavioral", "title": "B", "description": "d",
    }, headers=headers).json()["data"]

    listed = client.get(f"/api/questions/job/{test_job.id}?type=behavioral", headers=headers).json()["data"]
    assert [q["id"] for q in listed] == [behavioral["id"]]

    response = client.put(f"/api/questions/{behavioral['id']}/toggle", headers=headers)
    assert response.json()["data"]["status"] == "completed"
    assert response.json()["message"] == "Question marked as completed"

    response = client.put(f"/api/questions/{behavioral['id']}/toggle", headers=headers)
    assert response.json()["data"]["status"] == "pending"

    progress = client.get(f"/api/questions/job/{test_job.id}/progress", headers=headers).json()["data"]
    assert progress["overall"] == {"total": 2, "completed": 0}


def test_get_missing_question(client, headers):
    response = client.get("/api/questions/12345", headers=headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Question not found"


def test_generate_questions(client, headers, test_job, fake_llm, fake_leetcode):
    """Generation replaces old questions with LLM behavioral and LeetCode technical ones."""
    client.post("/api/questions", json={"jobId": test_job.id, "type": "technical", "title": "Old"}, headers=headers)
    fake_llm.replies.extend([
        json.dumps([
            {"question": "Describe a hard bug you fixed.", "context": "Debugging", "tips": ["Use STAR"]},
            {"question": "How do you handle code review feedback?", "context": "Collaboration", "tips": []},
        ]),
        "1. Arrays\n2. Two Pointers\n3. Quantum computing",
    ])

    response = client.post("/api/questions/generate", json={"jobId": test_job.id, "count": 4}, headers=headers)

    assert response.status_code == 201
    data = response.json()["data"]
    titles = [q["title"] for q in data["questions"]]
    assert data["total"] == 4
    assert "Old" not in titles
    assert "Describe a hard bug you fixed." in titles
    assert "Two Sum" in titles
    assert fake_leetcode.queries == ["arrays", "two pointers"]
    assert len(client.get(f"/api/questions/job/{test_job.id}", headers=headers).json()["data"]) == 4


def test_behavioral_generation_tolerates_non_text_fields(test_job):
    llm = FakeLLM(json.dumps([
        {"question": 42, "context": 7},
        {"question": {"text": "nested"}, "title": ["list"]},
        {"question": "Tell me about a conflict.", "context": ["not", "text"], "tips": [1, "STAR"]},
    ]))

    questions = generate_behavioral_questions(llm, test_job, 3)

    assert [(q.title, q.description) for q in questions] == [
        ("42", "7"),
        ("Tell me about a conflict.", "Tell me about a conflict."),
    ]
    assert questions[1].tags == ["1", "STAR"]


def test_generate_technical_falls_back_to_classics(client, headers, test_job, no_llm, fake_leetcode):
    """Without an LLM technical generation uses the built-in problem list."""
    response = client.post("/api/questions/generate", json={
        "jobId": test_job.id, "types": ["technical"], "count": 3,
    }, headers=headers)

    assert response.status_code == 201
    titles = [q["title"] for q in response.json()["data"]["questions"]]
    assert sorted(titles) == sorted(title for title, _, _ in FALLBACK_TECHNICAL_PROBLEMS[:3])
    assert fake_leetcode.queries == []


def test_generate_rejects_bad_count(client, headers, test_job):
    response = client.post("/api/questions/generate", json={"jobId": test_job.id, "count": 0}, headers=headers)

    assert response.status_code == 400


def test_behavioral_practice_answer(client, headers, test_job, fake_llm):
    """Practice answers outside a session get feedback and complete the question."""
    fake_llm.replies.append(json.dumps({"feedback": "Specific and clear.", "score": 9}))
    question = client.post("/api/questions", json={
        "jobId": test_job.id, "type": "behavioral", "title": "Conflict", "description": "d",
    }, headers=headers).json()["data"]

    response = client.post("/api/questions/behavioral/submit", json={
        "questionId": question["id"], "answer": "I listened first.",
    }, headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["feedback"]["score"] == 9
    assert data["feedback"]["strengths"] == []
    assert data["question"]["status"] == "completed"


def test_behavioral_practice_rejects_technical(client, headers, test_job, fake_llm):
    question = client.post("/api/questions", json={
        "jobId": test_job.id, "type": "technical", "title": "Two Sum",
    }, headers=headers).json()["data"]

    response = client.post("/api/questions/behavioral/submit", json={
        "questionId": question["id"], "answer": "hash map",
    }, headers=headers)

    assert response.status_code == 400
    assert response.json()["message"] == "This endpoint is only for behavioral questions"


def test_leetcode_search_endpoint(client, headers, fake_leetcode):
    response = client.get("/api/questions/leetcode-search?query=sum&limit=1", headers=headers)

    assert response.status_code == 200
    assert response.json()["data"] == [{
        "id": "1", "title": "Two Sum", "url": "https://leetcode.com/problems/two-sum/",
        "difficulty": "easy", "tags": ["arrays"],
    }]


def test_leetcode_search_requires_query(client, headers, fake_leetcode):
    response = client.get("/api/questions/leetcode-search", headers=headers)

    assert response.status_code == 400
    assert response.json()["message"] == "query is required"
