import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.status import HTTP_404_NOT_FOUND

from pulsehr.db.database import get_db
from pulsehr.db.models import HRCategory, PolicyAcknowledgement
from pulsehr.schemas.hr_manuals import HRCategoryList
from pulsehr.schemas.policies import AcknowledgementIn, AcknowledgementList, AcknowledgementOut
from pulsehr.services.catalog import is_company_description
from pulsehr.services.employees import get_employee_or_404
from pulsehr.services.progress import Stage, policy_progress, require_stage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["policies"])


def acknowledgement_out(ack: PolicyAcknowledgement, employee_code: str, category_name: str) -> AcknowledgementOut:
    return AcknowledgementOut(
        id=ack.id,
        employeeId=employee_code,
        policyCategoryId=ack.policy_category_id,
        categoryName=category_name,
        acknowledgedAt=ack.acknowledged_at,
    )


@router.get("/policy-categories", response_model=HRCategoryList)
def list_policy_categories(db: Session = Depends(get_db)):
    cats = db.execute(select(HRCategory).order_by(HRCategory.order_index, HRCategory.id)).scalars().all()
    return HRCategoryList(categories=[c for c in cats if not is_company_description(c)])


@router.post("/policy-acknowledgements", response_model=AcknowledgementOut)
def acknowledge(payload: AcknowledgementIn, db: Session = Depends(get_db)):
    # 1) Existence checks
    emp = get_employee_or_404(db, payload.employeeId)
    category = db.get(HRCategory, payload.policyCategoryId)
    if not category or is_company_description(category):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Policy category not found")

    # 2) Stage gate
    require_stage(db, emp, Stage.policies)

    # 3) Idempotent: an existing acknowledgement is returned as is
    ack = db.execute(
        select(PolicyAcknowledgement).where(
            PolicyAcknowledgement.employee_id == emp.id,
            PolicyAcknowledgement.policy_category_id == category.id,
        )
    ).scalar_one_or_none()
    if ack is None:
        ack = PolicyAcknowledgement(employee_id=emp.id, policy_category_id=category.id)
        db.add(ack)
        db.commit()
        db.refresh(ack)
        logger.info("%s acknowledged %r", emp.employee_id, category.name)

    return acknowledgement_out(ack, emp.employee_id, category.name)


@router.get("/policy-acknowledgements/{employee_id}", response_model=AcknowledgementList)
def list_acknowledgements(employee_id: str, db: Session = Depends(get_db)):
    emp = get_employee_or_404(db, employee_id)
    rows = db.execute(
        select(PolicyAcknowledgement, HRCategory.name)
        .join(HRCategory, HRCategory.id == PolicyAcknowledgement.policy_category_id)
        .where(PolicyAcknowledgement.employee_id == emp.id)
        .order_by(PolicyAcknowledgement.acknowledged_at, PolicyAcknowledgement.id)
    ).all()
    progress = policy_progress(db, emp)

    return AcknowledgementList(
        acknowledgements=[acknowledgement_out(a, emp.employee_id, name) for a, name in rows],
        acknowledged=progress.acknowledged,
        total=progress.total,
        progress_pct=progress.progress_pct,
    )
