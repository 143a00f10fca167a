import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.status import HTTP_201_CREATED

from pulsehr.core.deps import require_admin
from pulsehr.db.database import get_db
from pulsehr.db.models import Employee, PerformanceEvaluation
from pulsehr.schemas.performance import EvaluationIn, EvaluationList, EvaluationOut
from pulsehr.services.employees import get_employee_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/performance-evaluations", tags=["performance"])


def as_utc_naive(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.utcnow()
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def evaluation_out(ev: PerformanceEvaluation, emp: Employee) -> EvaluationOut:
    return EvaluationOut(
        id=ev.id,
        employee_id=emp.employee_id,
        employee_name=emp.name,
        department=emp.department,
        overall_rating=ev.overall_rating,
        evaluator=ev.evaluator,
        comments=ev.comments,
        evaluation_date=ev.evaluation_date,
    )


@router.post("", response_model=EvaluationOut, status_code=HTTP_201_CREATED)
def create_evaluation(
    payload: EvaluationIn,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    emp = get_employee_or_404(db, payload.employee_id)
    ev = PerformanceEvaluation(
        employee_id=emp.id,
        overall_rating=payload.overall_rating,
        evaluator=payload.evaluator.strip(),
        comments=payload.comments.strip(),
        evaluation_date=as_utc_naive(payload.evaluation_date),
    )
    db.add(ev)
    db.commit()
    db.refresh(ev)
    logger.info("Evaluation %d recorded for %s (rating %d)", ev.id, emp.employee_id, ev.overall_rating)
    return evaluation_out(ev, emp)


@router.get("", response_model=EvaluationList)
def list_evaluations(
    employee_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    stmt = (
        select(PerformanceEvaluation, Employee)
        .join(Employee, Employee.id == PerformanceEvaluation.employee_id)
        .order_by(PerformanceEvaluation.evaluation_date.desc(), PerformanceEvaluation.id.desc())
    )
    if employee_id:
        emp = get_employee_or_404(db, employee_id)
        stmt = stmt.where(PerformanceEvaluation.employee_id == emp.id)

    return EvaluationList(evaluations=[evaluation_out(ev, emp) for ev, emp in db.execute(stmt).all()])
