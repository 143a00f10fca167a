from datetime import datetime, timedelta

from helpers import API_KEY_HEADER, complete_onboarding, create_employee, ready_for_assessments

from pulsehr.db.database import SessionLocal
from pulsehr.db.models import HRCategory
from pulsehr.services.analytics import (
    AttemptRow,
    ComplianceAttempt,
    ComplianceQuiz,
    EvaluationRow,
    TrainingRow,
    summarize_attempts,
    summarize_compliance,
    summarize_documents,
    summarize_performance,
    summarize_training,
)


def _row(emp, score, passed, atype="compliance", status="completed", name=None):
    return AttemptRow(emp, name or emp, atype, status, score, passed)


def test_summarize_attempts_empty():
    out = summarize_attempts([])
    assert out["total_assessments"] == 0
    assert out["average_score"] == 0.0
    assert out["pass_rate"] == 0.0
    assert out["top_performers"] == []
    assert out["assessment_type_breakdown"] == []


def test_summarize_attempts():
    rows = [
        _row("E1", 80.0, True, name="Asha"),
        _row("E1", 60.0, True, atype="360_feedback", name="Asha"),
        _row("E2", 90.0, True, name="Kiran"),
        _row("E3", 20.0, False, name="Meera"),
        _row("E4", None, None, status="in_progress"),
    ]
    out = summarize_attempts(rows)
    assert out["total_assessments"] == 5
    assert out["completed_assessments"] == 4
    assert out["average_score"] == 62.5
    assert out["pass_rate"] == 75.0
    assert [p["employee_id"] for p in out["top_performers"]] == ["E2", "E1", "E3"]
    assert out["top_performers"][1] == {"employee_id": "E1", "employee_name": "Asha", "average_score": 70.0}
    assert out["assessment_type_breakdown"] == [
        {"type": "360 feedback", "count": 1, "average_score": 60.0},
        {"type": "Compliance", "count": 3, "average_score": 63.33},
    ]


def test_top_performers_capped():
    rows = [_row(f"E{i}", float(i), True) for i in range(8)]
    assert len(summarize_attempts(rows)["top_performers"]) == 5


def test_summarize_documents():
    assert summarize_documents(["completed", "completed", "skipped"]) == {
        "completed": 2,
        "skipped": 1,
        "pending": 0,
        "total": 3,
    }


def test_dashboard_endpoint(test_client):
    assert test_client.get("/admin/analytics").status_code == 401

    r = test_client.get("/admin/analytics", headers=API_KEY_HEADER)
    assert r.status_code == 200
    empty = r.json()
    assert empty["period_days"] == 30
    assert empty["onboarding"]["completion_rate"] == 0.0
    assert empty["policies"]["acknowledgement_rate"] == 0.0

    eid = ready_for_assessments(test_client)
    other = create_employee(test_client, name="Kiran Rao")
    complete_onboarding(test_client, other)

    body = {"title": "Quiz", "type": "training", "duration_minutes": 5, "passing_score": 50, "total_questions": 1}
    a = test_client.post("/assessments", json=body, headers=API_KEY_HEADER).json()
    test_client.post(
        f"/assessments/{a['id']}/questions",
        json={"question_text": "2+2?", "question_type": "mcq", "options": ["3", "4"], "correct_answer": "4"},
        headers=API_KEY_HEADER,
    )
    attempt = test_client.post(f"/assessments/{a['id']}/start", json={"employee_id": eid}).json()
    test_client.post(f"/attempts/{attempt['attempt_id']}/submit", json={"answers": {"x": "y"}})

    data = test_client.get("/admin/analytics", params={"days": 7}, headers=API_KEY_HEADER).json()
    assert data["assessments"]["total_assessments"] == 1
    assert data["assessments"]["completed_assessments"] == 1
    assert data["assessments"]["pass_rate"] == 0.0
    assert data["assessments"]["top_performers"][0]["employee_name"] == "Asha Verma"
    assert data["onboarding"] == {"total_employees": 2, "completed": 2, "completion_rate": 100.0}
    assert data["documents"]["completed"] == 5


def test_company_description_matched_loosely(test_client):
    with SessionLocal() as db:
        db.add_all([
            HRCategory(name="  company description ", description="", order_index=1),
            HRCategory(name="Code of Conduct", description="", order_index=2),
        ])
        db.commit()

    assert [c["name"] for c in test_client.get("/policy-categories").json()["categories"]] == ["Code of Conduct"]
    data = test_client.get("/admin/analytics", headers=API_KEY_HEADER).json()
    assert data["policies"]["categories"] == 1


def test_summarize_performance():
    rows = [EvaluationRow("Sales", 5), EvaluationRow("Sales", 3), EvaluationRow("HR", 4), EvaluationRow("", 2)]
    out = summarize_performance(rows)
    assert out["total_evaluations"] == 4
    assert out["average_rating"] == 3.5
    assert [d["count"] for d in out["rating_distribution"]] == [0, 1, 1, 1, 1]
    assert out["rating_distribution"][1] == {"rating": 2, "count": 1, "percentage": 25.0}
    assert out["department_performance"] == [
        {"department": "HR", "average_rating": 4.0, "employee_count": 1},
        {"department": "Sales", "average_rating": 4.0, "employee_count": 2},
        {"department": "Unknown", "average_rating": 2.0, "employee_count": 1},
    ]

    empty = summarize_performance([])
    assert empty["average_rating"] == 0.0
    assert all(d["percentage"] == 0.0 for d in empty["rating_distribution"])


def test_summarize_training():
    now = datetime(2026, 3, 1, 12, 0)
    rows = [
        TrainingRow("E1", "Asha", "POSH Basics", "completed", 100, now - timedelta(days=40)),
        TrainingRow("E2", "Kiran", "POSH Basics", "in_progress", 50, now - timedelta(days=45)),
        TrainingRow("E3", "Meera", "Data Security", "in_progress", 20, now - timedelta(days=5)),
    ]
    out = summarize_training(2, rows, now)
    assert out["total_modules"] == 2
    assert out["completed_modules"] == 1
    assert out["completion_rate"] == 33.33
    assert out["average_progress"] == 56.67
    assert out["overdue_trainings"] == [
        {"employee_id": "E2", "employee_name": "Kiran", "module_title": "POSH Basics", "days_overdue": 15},
    ]


def test_summarize_compliance():
    now = datetime(2026, 3, 1, 12, 0)
    quizzes = [
        ComplianceQuiz(1, "POSH Quiz", now - timedelta(days=3)),
        ComplianceQuiz(2, "Security Quiz", now + timedelta(days=3)),
        ComplianceQuiz(3, "Ethics Quiz", None),
    ]
    attempts = [
        ComplianceAttempt(1, "E1", "completed", True),
        ComplianceAttempt(1, "E2", "in_progress", None),
        ComplianceAttempt(2, "E2", "completed", False),
    ]
    out = summarize_compliance(quizzes, attempts, [("E1", "Asha"), ("E2", "Kiran")], now)
    assert out["total_quizzes"] == 3
    assert out["completed_quizzes"] == 2
    assert out["compliance_rate"] == 50.0
    assert out["overdue_compliance"] == [
        {"employee_id": "E2", "employee_name": "Kiran", "quiz_title": "POSH Quiz", "days_overdue": 3},
    ]
