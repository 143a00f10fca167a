import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from pulsehr.db.database import get_db
from pulsehr.db.models import Employee, EmployeeOnboarding
from pulsehr.schemas.onboarding import (
    OnboardingFields,
    OnboardingIn,
    OnboardingOut,
    OnboardingStep,
    OnboardingStepsOut,
)
from pulsehr.services.catalog import BLOOD_TYPES, INDIAN_STATES, ONBOARDING_STEPS
from pulsehr.services.employees import get_employee_or_404
from pulsehr.services.onboarding import clean_conditionals, missing_required

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

FORM_FIELDS = list(OnboardingFields.model_fields.keys())


def onboarding_out(row: EmployeeOnboarding, employee: Employee) -> OnboardingOut:
    data = {f: getattr(row, f) for f in FORM_FIELDS}
    return OnboardingOut(
        employee_id=employee.employee_id,
        completed=row.completed,
        submitted_at=row.submitted_at,
        **data,
    )


@router.get("/steps", response_model=OnboardingStepsOut)
def steps():
    return OnboardingStepsOut(
        steps=[OnboardingStep(index=i, **s) for i, s in enumerate(ONBOARDING_STEPS)],
        states=INDIAN_STATES,
        blood_types=BLOOD_TYPES,
    )


@router.post("", response_model=OnboardingOut, status_code=HTTP_201_CREATED)
def submit(payload: OnboardingIn, db: Session = Depends(get_db)):
    # 1) Employee
    emp = get_employee_or_404(db, payload.employee_id)

    # 2) One submission per employee
    if emp.onboarding is not None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Onboarding already submitted")

    # 3) Required fields, step by step
    data = payload.model_dump(include=set(FORM_FIELDS))
    missing = missing_required(data)
    if missing:
        detail = "; ".join(f"{step}: {', '.join(fields)}" for step, fields in missing.items())
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=f"Missing required fields - {detail}")

    # 4) Save
    row = EmployeeOnboarding(
        employee_id=emp.id,
        completed=True,
        submitted_at=datetime.utcnow(),
        **clean_conditionals(data),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Onboarding submitted for %s", emp.employee_id)

    return onboarding_out(row, emp)


@router.get("/{employee_id}", response_model=OnboardingOut)
def get_onboarding(employee_id: str, db: Session = Depends(get_db)):
    emp = get_employee_or_404(db, employee_id)
    row = db.execute(
        select(EmployeeOnboarding).where(EmployeeOnboarding.employee_id == emp.id)
    ).scalar_one_or_none()
    if not row:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Onboarding not submitted")
    return onboarding_out(row, emp)
