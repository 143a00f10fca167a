from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pulsehr.db.models import (
    Assessment,
    AssessmentAttempt,
    Employee,
    EmployeeDocument,
    EmployeeOnboarding,
    PerformanceEvaluation,
    PolicyAcknowledgement,
    TrainingModule,
    TrainingProgress,
)
from pulsehr.services.catalog import policy_categories
from pulsehr.services.scoring import percentage
from pulsehr.utils.text_utils import pretty_label

TOP_PERFORMERS = 5
RATINGS = (1, 2, 3, 4, 5)
TRAINING_WINDOW_DAYS = 30


@dataclass
class AttemptRow:
    employee_id: str
    employee_name: str
    assessment_type: str
    status: str
    score: Optional[float]
    passed: Optional[bool]


def _avg(total: float, count: int) -> float:
    return round(total / count, 2) if count else 0.0


def summarize_attempts(rows: Iterable[AttemptRow]) -> Dict:
    rows = list(rows)
    completed = [r for r in rows if r.status == "completed"]
    total_score = sum(r.score or 0 for r in completed)
    passed = [r for r in completed if r.passed]

    per_employee: Dict[str, Dict] = {}
    for r in completed:
        cur = per_employee.setdefault(r.employee_id, {"name": r.employee_name, "total": 0.0, "count": 0})
        cur["total"] += r.score or 0
        cur["count"] += 1

    top = sorted(
        (
            {"employee_id": eid, "employee_name": d["name"], "average_score": _avg(d["total"], d["count"])}
            for eid, d in per_employee.items()
        ),
        key=lambda x: (-x["average_score"], x["employee_id"]),
    )[:TOP_PERFORMERS]

    by_type: Dict[str, Dict] = defaultdict(lambda: {"count": 0, "total": 0.0})
    for r in completed:
        by_type[r.assessment_type or "unknown"]["count"] += 1
        by_type[r.assessment_type or "unknown"]["total"] += r.score or 0

    breakdown = [
        {"type": pretty_label(t), "count": d["count"], "average_score": _avg(d["total"], d["count"])}
        for t, d in sorted(by_type.items())
    ]

    return {
        "total_assessments": len(rows),
        "completed_assessments": len(completed),
        "average_score": _avg(total_score, len(completed)),
        "pass_rate": percentage(len(passed), len(completed)),
        "top_performers": top,
        "assessment_type_breakdown": breakdown,
    }


def summarize_documents(statuses: Iterable[str]) -> Dict:
    counts = {"completed": 0, "skipped": 0, "pending": 0}
    for s in statuses:
        counts[s] = counts.get(s, 0) + 1
    counts["total"] = sum(counts.values())
    return counts


@dataclass
class EvaluationRow:
    department: str
    rating: int


def summarize_performance(rows: Iterable[EvaluationRow]) -> Dict:
    rows = list(rows)
    per_dept: Dict[str, Dict] = defaultdict(lambda: {"total": 0, "count": 0})
    for r in rows:
        dept = per_dept[r.department or "Unknown"]
        dept["total"] += r.rating
        dept["count"] += 1

    return {
        "total_evaluations": len(rows),
        "average_rating": _avg(sum(r.rating for r in rows), len(rows)),
        "rating_distribution": [
            {
                "rating": rating,
                "count": sum(1 for r in rows if r.rating == rating),
                "percentage": percentage(sum(1 for r in rows if r.rating == rating), len(rows)),
            }
            for rating in RATINGS
        ],
        "department_performance": [
            {"department": name, "average_rating": _avg(d["total"], d["count"]), "employee_count": d["count"]}
            for name, d in sorted(per_dept.items())
        ],
    }


@dataclass
class TrainingRow:
    employee_id: str
    employee_name: str
    module_title: str
    status: str
    progress: int
    started_at: datetime


def summarize_training(total_modules: int, rows: Iterable[TrainingRow], now: datetime) -> Dict:
    """
    Unfinished trainings count as overdue once started more than
    TRAINING_WINDOW_DAYS ago; `days_overdue` counts past that window.
    """
    rows = list(rows)
    completed = [r for r in rows if r.status == "completed"]
    deadline = now - timedelta(days=TRAINING_WINDOW_DAYS)

    overdue = sorted(
        (
            {
                "employee_id": r.employee_id,
                "employee_name": r.employee_name,
                "module_title": r.module_title,
                "days_overdue": (deadline - r.started_at).days,
            }
            for r in rows
            if r.status != "completed" and r.started_at < deadline
        ),
        key=lambda x: (-x["days_overdue"], x["employee_id"], x["module_title"]),
    )

    return {
        "total_modules": total_modules,
        "completed_modules": len(completed),
        "completion_rate": percentage(len(completed), len(rows)),
        "average_progress": _avg(sum(r.progress for r in rows), len(rows)),
        "overdue_trainings": overdue,
    }


@dataclass
class ComplianceQuiz:
    id: int
    title: str
    due_date: Optional[datetime]


@dataclass
class ComplianceAttempt:
    quiz_id: int
    employee_id: str
    status: str
    passed: Optional[bool]


def summarize_compliance(
    quizzes: Iterable[ComplianceQuiz],
    attempts: Iterable[ComplianceAttempt],
    employees: Iterable[Tuple[str, str]],
    now: datetime,
) -> Dict:
    """
    Once a quiz is past its due date, every employee (code, name) without a
    completed attempt on it is listed as overdue.
    """
    quizzes = list(quizzes)
    employees = list(employees)
    completed = [a for a in attempts if a.status == "completed"]

    done: Dict[int, Set[str]] = defaultdict(set)
    for a in completed:
        done[a.quiz_id].add(a.employee_id)

    overdue = [
        {
            "employee_id": code,
            "employee_name": name,
            "quiz_title": quiz.title,
            "days_overdue": (now - quiz.due_date).days,
        }
        for quiz in quizzes
        if quiz.due_date is not None and quiz.due_date < now
        for code, name in employees
        if code not in done[quiz.id]
    ]
    overdue.sort(key=lambda x: (-x["days_overdue"], x["employee_id"], x["quiz_title"]))

    return {
        "total_quizzes": len(quizzes),
        "completed_quizzes": len(completed),
        "compliance_rate": percentage(sum(1 for a in completed if a.passed), len(completed)),
        "overdue_compliance": overdue,
    }


def build_dashboard(db: Session, days: int, now: Optional[datetime] = None) -> Dict:
    """
    Everything the admin dashboard shows, computed from already stored rows.
    """
    now = now or datetime.utcnow()
    since = now - timedelta(days=days)

    attempt_rows: List[AttemptRow] = [
        AttemptRow(
            employee_id=emp_code,
            employee_name=emp_name,
            assessment_type=a_type,
            status=status,
            score=score,
            passed=passed,
        )
        for emp_code, emp_name, a_type, status, score, passed in db.execute(
            select(
                Employee.employee_id,
                Employee.name,
                Assessment.type,
                AssessmentAttempt.status,
                AssessmentAttempt.score,
                AssessmentAttempt.passed,
            )
            .join(Employee, Employee.id == AssessmentAttempt.employee_id)
            .join(Assessment, Assessment.id == AssessmentAttempt.assessment_id)
            .where(AssessmentAttempt.started_at >= since)
        ).all()
    ]

    employees_total = db.execute(select(func.count(Employee.id))).scalar_one()
    onboarded = db.execute(
        select(func.count(EmployeeOnboarding.id)).where(EmployeeOnboarding.completed.is_(True))
    ).scalar_one()

    policy_ids = [c.id for c in policy_categories(db)]
    acknowledgements = 0
    if policy_ids:
        acknowledgements = db.execute(
            select(func.count(PolicyAcknowledgement.id))
            .where(PolicyAcknowledgement.policy_category_id.in_(policy_ids))
        ).scalar_one()

    evaluation_rows = [
        EvaluationRow(department=dept, rating=rating)
        for dept, rating in db.execute(
            select(Employee.department, PerformanceEvaluation.overall_rating)
            .join(Employee, Employee.id == PerformanceEvaluation.employee_id)
            .where(PerformanceEvaluation.evaluation_date >= since)
        ).all()
    ]

    modules_total = db.execute(select(func.count(TrainingModule.id))).scalar_one()
    training_rows = [
        TrainingRow(*row)
        for row in db.execute(
            select(
                Employee.employee_id,
                Employee.name,
                TrainingModule.title,
                TrainingProgress.status,
                TrainingProgress.progress_percentage,
                TrainingProgress.started_at,
            )
            .join(Employee, Employee.id == TrainingProgress.employee_id)
            .join(TrainingModule, TrainingModule.id == TrainingProgress.module_id)
        ).all()
    ]

    # compliance quizzes are the active assessments of type "compliance"
    quizzes = [
        ComplianceQuiz(*row)
        for row in db.execute(
            select(Assessment.id, Assessment.title, Assessment.due_date)
            .where(Assessment.type == "compliance", Assessment.is_active.is_(True))
        ).all()
    ]
    compliance_attempts: List[ComplianceAttempt] = []
    if quizzes:
        compliance_attempts = [
            ComplianceAttempt(*row)
            for row in db.execute(
                select(
                    AssessmentAttempt.assessment_id,
                    Employee.employee_id,
                    AssessmentAttempt.status,
                    AssessmentAttempt.passed,
                )
                .join(Employee, Employee.id == AssessmentAttempt.employee_id)
                .where(AssessmentAttempt.assessment_id.in_([q.id for q in quizzes]))
            ).all()
        ]
    employees = db.execute(select(Employee.employee_id, Employee.name).order_by(Employee.employee_id)).all()

    return {
        "period_days": days,
        "assessments": summarize_attempts(attempt_rows),
        "onboarding": {
            "total_employees": int(employees_total),
            "completed": int(onboarded),
            "completion_rate": percentage(onboarded, employees_total),
        },
        "documents": summarize_documents(db.execute(select(EmployeeDocument.status)).scalars().all()),
        "policies": {
            "categories": len(policy_ids),
            "acknowledgements": int(acknowledgements),
            "acknowledgement_rate": percentage(acknowledgements, employees_total * len(policy_ids)),
        },
        "performance": summarize_performance(evaluation_rows),
        "training": summarize_training(int(modules_total), training_rows, now),
        "compliance": summarize_compliance(quizzes, compliance_attempts, [tuple(e) for e in employees], now),
    }
