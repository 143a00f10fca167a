import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from pulsehr.core.deps import require_admin
from pulsehr.db.database import get_db
from pulsehr.db.models import TrainingModule, TrainingProgress
from pulsehr.schemas.performance import (
    TrainingModuleIn,
    TrainingModuleList,
    TrainingModuleOut,
    TrainingProgressIn,
    TrainingProgressList,
    TrainingProgressOut,
)
from pulsehr.services.employees import get_employee_or_404

logger = logging.getLogger(__name__)

router = APIRouter(tags=["training"])


def progress_out(p: TrainingProgress, employee_code: str) -> TrainingProgressOut:
    return TrainingProgressOut(
        id=p.id,
        employee_id=employee_code,
        module_id=p.module_id,
        module_title=p.module.title,
        status=p.status,
        progress_percentage=p.progress_percentage,
        started_at=p.started_at,
        completed_at=p.completed_at,
    )


# =========================================================
# Modules
# =========================================================
@router.post("/training-modules", response_model=TrainingModuleOut, status_code=HTTP_201_CREATED)
def create_module(
    payload: TrainingModuleIn,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    title = payload.title.strip()
    if db.execute(select(TrainingModule.id).where(TrainingModule.title == title)).first():
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Training module already exists")

    module = TrainingModule(**{**payload.model_dump(), "title": title})
    db.add(module)
    db.commit()
    db.refresh(module)
    logger.info("Training module %d %r created", module.id, module.title)
    return module


@router.get("/training-modules", response_model=TrainingModuleList)
def list_modules(active_only: bool = Query(False), db: Session = Depends(get_db)):
    stmt = select(TrainingModule).order_by(TrainingModule.title, TrainingModule.id)
    if active_only:
        stmt = stmt.where(TrainingModule.is_active.is_(True))
    return TrainingModuleList(modules=db.execute(stmt).scalars().all())


# =========================================================
# Progress
# =========================================================
@router.post("/training-progress", response_model=TrainingProgressOut)
def record_progress(payload: TrainingProgressIn, db: Session = Depends(get_db)):
    """
    Upsert the employee's progress on a module. Progress never goes back
    and reaching 100 marks the module completed.
    """
    emp = get_employee_or_404(db, payload.employee_id)
    module = db.get(TrainingModule, payload.module_id)
    if not module or not module.is_active:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Training module not found")

    now = datetime.utcnow()
    p = db.execute(
        select(TrainingProgress).where(
            TrainingProgress.employee_id == emp.id,
            TrainingProgress.module_id == module.id,
        )
    ).scalar_one_or_none()
    if p is None:
        p = TrainingProgress(
            employee_id=emp.id,
            module_id=module.id,
            status="in_progress",
            progress_percentage=0,
            started_at=now,
        )
        db.add(p)

    p.progress_percentage = max(p.progress_percentage, payload.progress_percentage)
    if p.progress_percentage >= 100 and p.status != "completed":
        p.status = "completed"
        p.completed_at = now
        logger.info("%s completed training %r", emp.employee_id, module.title)

    db.commit()
    db.refresh(p)
    return progress_out(p, emp.employee_id)


@router.get("/training-progress/{employee_id}", response_model=TrainingProgressList)
def list_progress(employee_id: str, db: Session = Depends(get_db)):
    emp = get_employee_or_404(db, employee_id)
    rows = db.execute(
        select(TrainingProgress)
        .where(TrainingProgress.employee_id == emp.id)
        .order_by(TrainingProgress.started_at, TrainingProgress.id)
    ).scalars().all()
    return TrainingProgressList(progress=[progress_out(p, emp.employee_id) for p in rows])
