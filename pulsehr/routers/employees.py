import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from starlette.status import HTTP_201_CREATED

from pulsehr.core.config import get_settings
from pulsehr.core.deps import require_admin
from pulsehr.db.database import get_db
from pulsehr.db.models import AssessmentAttempt, Employee, EmployeeDocument, EmployeeOnboarding
from pulsehr.routers.assessments import attempt_out
from pulsehr.routers.documents import document_out
from pulsehr.routers.onboarding import onboarding_out
from pulsehr.routers.policies import acknowledgement_out
from pulsehr.schemas.employees import (
    DocumentProgressOut,
    EmployeeCreate,
    EmployeeList,
    EmployeeOut,
    PolicyProgressOut,
    ProgressOut,
    StageOut,
)
from pulsehr.schemas.hr_manuals import DeleteResponse
from pulsehr.services.employees import generate_employee_id, get_employee_or_404
from pulsehr.services.progress import ProgressSnapshot, Stage, compute_progress

logger = logging.getLogger(__name__)

router = APIRouter(tags=["employees"])


def employee_out(emp: Employee, onboarding_completed: bool) -> EmployeeOut:
    return EmployeeOut(
        employee_id=emp.employee_id,
        name=emp.name,
        department=emp.department,
        email=emp.email,
        created_at=emp.created_at,
        onboarding_completed=onboarding_completed,
    )


def progress_out(snapshot: ProgressSnapshot) -> ProgressOut:
    stages = {s.key: s for s in snapshot.stages}
    return ProgressOut(
        employee_id=snapshot.employee_id,
        current_stage=snapshot.current_stage.value,
        onboarding_completed=snapshot.onboarding_completed,
        documents_completed=stages[Stage.documents].completed,
        policies_completed=stages[Stage.policies].completed,
        assessments_unlocked=snapshot.assessments_unlocked,
        documents=DocumentProgressOut(**snapshot.documents.__dict__),
        policies=PolicyProgressOut(**snapshot.policies.__dict__),
        stages=[StageOut(key=s.key.value, title=s.title, completed=s.completed, unlocked=s.unlocked) for s in snapshot.stages],
    )


@router.post("/employees", response_model=EmployeeOut, status_code=HTTP_201_CREATED)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    emp = Employee(
        employee_id=generate_employee_id(db, get_settings().EMPLOYEE_ID_PREFIX),
        name=payload.name,
        department=payload.department,
        email=(payload.email or "").strip().lower() or None,
    )
    db.add(emp)
    db.commit()
    db.refresh(emp)
    logger.info("Employee %s created (%s)", emp.employee_id, emp.department)
    return employee_out(emp, False)


@router.get("/employees", response_model=EmployeeList)
def list_employees(
    q: Optional[str] = Query(None, description="Search on name, employee ID or department"),
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    stmt = (
        select(Employee, EmployeeOnboarding.completed)
        .outerjoin(EmployeeOnboarding, EmployeeOnboarding.employee_id == Employee.id)
        .order_by(Employee.created_at.desc(), Employee.id.desc())
    )
    if q and q.strip():
        like = f"%{q.strip()}%"
        stmt = stmt.where(
            or_(
                Employee.name.ilike(like),
                Employee.employee_id.ilike(like),
                Employee.department.ilike(like),
            )
        )

    rows = db.execute(stmt).all()
    return EmployeeList(employees=[employee_out(emp, bool(done)) for emp, done in rows])


@router.get("/employees/{employee_id}", response_model=EmployeeOut)
def get_employee(employee_id: str, db: Session = Depends(get_db)):
    emp = get_employee_or_404(db, employee_id)
    return employee_out(emp, bool(emp.onboarding and emp.onboarding.completed))


@router.get("/employees/{employee_id}/progress", response_model=ProgressOut)
def get_progress(employee_id: str, db: Session = Depends(get_db)):
    emp = get_employee_or_404(db, employee_id)
    return progress_out(compute_progress(db, emp))


@router.delete("/employees/{employee_id}", response_model=DeleteResponse)
def delete_employee(
    employee_id: str,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    emp = get_employee_or_404(db, employee_id)
    pk = emp.id
    db.delete(emp)
    db.commit()
    logger.info("Employee %s deleted", employee_id)
    return DeleteResponse(ok=True, id=pk)


@router.get("/admin/employees/{employee_id}/export")
def export_employee(
    employee_id: str,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    """
    Everything stored about one employee, file contents excluded.
    """
    emp = get_employee_or_404(db, employee_id)
    onboarding = emp.onboarding

    docs = db.execute(
        select(EmployeeDocument).where(EmployeeDocument.employee_id == emp.id).order_by(EmployeeDocument.id)
    ).scalars().all()
    attempts = db.execute(
        select(AssessmentAttempt).where(AssessmentAttempt.employee_id == emp.id).order_by(AssessmentAttempt.id)
    ).scalars().all()

    return {
        "employee": employee_out(emp, bool(onboarding and onboarding.completed)).model_dump(mode="json"),
        "onboarding": onboarding_out(onboarding, emp).model_dump(mode="json") if onboarding else None,
        "documents": [document_out(d, emp.employee_id).model_dump(mode="json") for d in docs],
        "policy_acknowledgements": [
            acknowledgement_out(a, emp.employee_id, a.category.name).model_dump(mode="json")
            for a in emp.acknowledgements
        ],
        "attempts": [attempt_out(att, emp.employee_id).model_dump(mode="json") for att in attempts],
        "progress": progress_out(compute_progress(db, emp)).model_dump(mode="json"),
    }
