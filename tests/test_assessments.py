import pytest

from helpers import API_KEY_HEADER, complete_onboarding, create_employee, ready_for_assessments


def _assessment(client, **overrides) -> dict:
    body = {
        "title": "Code of Conduct Check",
        "description": "Basics every new joiner must know",
        "type": "compliance",
        "duration_minutes": 15,
        "passing_score": 60,
        "total_questions": 3,
    }
    body.update(overrides)
    r = client.post("/assessments", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 201, r.text
    return r.json()


def _question(client, assessment_id: int, **body) -> dict:
    r = client.post(f"/assessments/{assessment_id}/questions", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def quiz(test_client):
    a = _assessment(test_client)
    q1 = _question(
        test_client, a["id"],
        question_text="Who approves leave?",
        question_type="mcq",
        options=["Manager", "Client", "IT"],
        correct_answer="Manager",
        max_score=2,
    )
    q2 = _question(
        test_client, a["id"],
        question_text="Harassment must be reported.",
        question_type="true_false",
        correct_answer="True",
    )
    q3 = _question(
        test_client, a["id"],
        question_text="Describe our values.",
        question_type="essay",
    )
    return a, [q1, q2, q3]


def test_admin_crud(test_client):
    a = _assessment(test_client)
    assert a["is_active"] is True
    assert a["question_count"] == 0

    r = test_client.patch(f"/assessments/{a['id']}", json={"is_active": False, "passing_score": 75},
                          headers=API_KEY_HEADER)
    assert r.status_code == 200
    assert r.json()["is_active"] is False
    assert r.json()["passing_score"] == 75

    r = test_client.get("/assessments", params={"active_only": True}, headers=API_KEY_HEADER)
    assert r.json()["assessments"] == []
    r = test_client.get("/assessments", headers=API_KEY_HEADER)
    assert len(r.json()["assessments"]) == 1

    assert test_client.delete(f"/assessments/{a['id']}", headers=API_KEY_HEADER).status_code == 200
    assert test_client.get(f"/assessments/{a['id']}", headers=API_KEY_HEADER).status_code == 404


def test_assessment_validation(test_client):
    bad = {"title": "X", "type": "astrology", "duration_minutes": 10, "passing_score": 50, "total_questions": 1}
    assert test_client.post("/assessments", json=bad, headers=API_KEY_HEADER).status_code == 422
    bad = {**bad, "type": "skills", "passing_score": 120}
    assert test_client.post("/assessments", json=bad, headers=API_KEY_HEADER).status_code == 422
    ok = {**bad, "type": "360_feedback", "passing_score": 50}
    assert test_client.post("/assessments", json=ok).status_code == 401


def test_question_rules(test_client):
    a = _assessment(test_client)
    url = f"/assessments/{a['id']}/questions"

    r = test_client.post(url, json={"question_text": "Q", "question_type": "mcq", "options": ["A"],
                                    "correct_answer": "A"}, headers=API_KEY_HEADER)
    assert r.status_code == 422
    r = test_client.post(url, json={"question_text": "Q", "question_type": "mcq", "options": ["A", "B"],
                                    "correct_answer": "C"}, headers=API_KEY_HEADER)
    assert r.status_code == 422
    r = test_client.post(url, json={"question_text": "Q", "question_type": "true_false",
                                    "correct_answer": "maybe"}, headers=API_KEY_HEADER)
    assert r.status_code == 422

    q1 = _question(test_client, a["id"], question_text="Rate onboarding", question_type="rating_scale")
    q2 = _question(test_client, a["id"], question_text="T/F", question_type="true_false", correct_answer=" FALSE ")
    assert (q1["order_index"], q2["order_index"]) == (1, 2)
    assert q2["correct_answer"] == "false"
    assert q2["options"] == ["true", "false"]

    assert test_client.delete(f"/assessment-questions/{q1['id']}", headers=API_KEY_HEADER).status_code == 200
    r = test_client.get(url, headers=API_KEY_HEADER)
    assert [q["id"] for q in r.json()["questions"]] == [q2["id"]]
    assert test_client.delete(f"/assessment-questions/{q1['id']}", headers=API_KEY_HEADER).status_code == 404


def test_question_order_after_delete(test_client):
    a = _assessment(test_client)
    q1, q2, q3 = (
        _question(test_client, a["id"], question_text=f"Q{i}", question_type="rating_scale") for i in range(3)
    )
    test_client.delete(f"/assessment-questions/{q1['id']}", headers=API_KEY_HEADER)
    q4 = _question(test_client, a["id"], question_text="Q3", question_type="rating_scale")

    assert q4["order_index"] == q3["order_index"] + 1
    r = test_client.get(f"/assessments/{a['id']}/questions", headers=API_KEY_HEADER)
    questions = r.json()["questions"]
    assert [q["id"] for q in questions] == [q2["id"], q3["id"], q4["id"]]
    assert len({q["order_index"] for q in questions}) == 3


def test_generate_fallback(test_client):
    a = _assessment(test_client)
    r = test_client.post(f"/assessments/{a['id']}/generate", json={"count": 7}, headers=API_KEY_HEADER)
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["source"] == "fallback"
    assert data["added"] == 7
    assert [q["order_index"] for q in data["questions"]] == list(range(1, 8))
    assert all(q["correct_answer"] in q["options"] for q in data["questions"])

    r = test_client.post(f"/assessments/{a['id']}/generate", json={"count": 2, "replace": True},
                         headers=API_KEY_HEADER)
    assert r.json()["added"] == 2
    assert len(test_client.get(f"/assessments/{a['id']}/questions", headers=API_KEY_HEADER).json()["questions"]) == 2

    r = test_client.post(f"/assessments/{a['id']}/generate", json={"manualId": 999}, headers=API_KEY_HEADER)
    assert r.status_code == 404


def test_start_is_gated(test_client, quiz):
    a, _ = quiz
    eid = create_employee(test_client)
    r = test_client.post(f"/assessments/{a['id']}/start", json={"employee_id": eid})
    assert r.status_code == 409

    complete_onboarding(test_client, eid)
    r = test_client.post(f"/assessments/{a['id']}/start", json={"employee_id": eid})
    assert r.status_code == 409

    r = test_client.get(f"/assessments/available/{eid}")
    assert r.json()["assessments_unlocked"] is False


def test_full_flow(test_client, quiz):
    a, (q1, q2, q3) = quiz
    eid = ready_for_assessments(test_client)

    r = test_client.get(f"/assessments/available/{eid}")
    data = r.json()
    assert data["assessments_unlocked"] is True
    assert data["assessments"][0]["status"] == "not_started"

    r = test_client.post(f"/assessments/{a['id']}/start", json={"employee_id": eid})
    assert r.status_code == 200, r.text
    started = r.json()
    assert started["resumed"] is False
    assert 0 < started["time_remaining_seconds"] <= 15 * 60
    assert "correct_answer" not in started["questions"][0]
    assert [q["id"] for q in started["questions"]] == [q1["id"], q2["id"], q3["id"]]

    # resume
    r = test_client.post(f"/assessments/{a['id']}/start", json={"employee_id": eid})
    assert r.json()["attempt_id"] == started["attempt_id"]
    assert r.json()["resumed"] is True
    assert test_client.get(f"/assessments/available/{eid}").json()["assessments"][0]["status"] == "in_progress"

    answers = {str(q1["id"]): " manager ", str(q2["id"]): "false", str(q3["id"]): "Integrity first"}
    r = test_client.post(f"/attempts/{started['attempt_id']}/submit", json={"answers": answers})
    assert r.status_code == 200, r.text
    result = r.json()
    # 2 (mcq) + 0 (true_false) + 1 (essay) out of 4
    assert result["earned_points"] == 3
    assert result["max_points"] == 4
    assert result["score"] == 75.0
    assert result["passed"] is True
    assert result["status"] == "completed"
    assert [d["correct"] for d in result["details"]] == [True, False, True]

    assert test_client.post(f"/attempts/{started['attempt_id']}/submit", json={"answers": answers}).status_code == 409
    assert test_client.post(f"/assessments/{a['id']}/start", json={"employee_id": eid}).status_code == 409

    available = test_client.get(f"/assessments/available/{eid}").json()["assessments"][0]
    assert available["status"] == "passed"
    assert available["score"] == 75.0

    attempts = test_client.get("/attempts", params={"employee_id": eid}).json()["attempts"]
    assert len(attempts) == 1
    assert attempts[0]["assessment_title"] == "Code of Conduct Check"


def test_failed_attempt(test_client, quiz):
    a, _ = quiz
    eid = ready_for_assessments(test_client)
    attempt_id = test_client.post(f"/assessments/{a['id']}/start", json={"employee_id": eid}).json()["attempt_id"]

    r = test_client.post(f"/attempts/{attempt_id}/submit", json={"answers": {}})
    assert r.json()["score"] == 0.0
    assert r.json()["passed"] is False
    assert test_client.get(f"/assessments/available/{eid}").json()["assessments"][0]["status"] == "failed"


def test_start_inactive_or_empty(test_client, quiz):
    a, _ = quiz
    eid = ready_for_assessments(test_client)

    test_client.patch(f"/assessments/{a['id']}", json={"is_active": False}, headers=API_KEY_HEADER)
    assert test_client.post(f"/assessments/{a['id']}/start", json={"employee_id": eid}).status_code == 400

    empty = _assessment(test_client, title="Empty")
    assert test_client.post(f"/assessments/{empty['id']}/start", json={"employee_id": eid}).status_code == 400

    assert test_client.post("/assessments/999/start", json={"employee_id": eid}).status_code == 404
    assert test_client.post("/attempts/999/submit", json={"answers": {}}).status_code == 404
