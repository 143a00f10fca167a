import logging
import random
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.status import HTTP_404_NOT_FOUND, HTTP_503_SERVICE_UNAVAILABLE

from pulsehr.db.models import Employee

logger = logging.getLogger(__name__)

ID_DIGITS = 5
MAX_ID_ATTEMPTS = 20


def random_employee_id(prefix: str, rng: Optional[random.Random] = None) -> str:
    rng = rng or random.SystemRandom()
    return f"{prefix}{rng.randint(0, 10 ** ID_DIGITS - 1):0{ID_DIGITS}d}"


def generate_employee_id(db: Session, prefix: str, rng: Optional[random.Random] = None) -> str:
    """
    Draw `<prefix><5 digits>` until one is free.
    """
    for _ in range(MAX_ID_ATTEMPTS):
        candidate = random_employee_id(prefix, rng)
        taken = db.execute(select(Employee.id).where(Employee.employee_id == candidate)).first()
        if taken is None:
            return candidate
        logger.info("Employee ID %s already taken, drawing again", candidate)

    raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Could not allocate an employee ID")


def get_employee_or_404(db: Session, employee_id: str) -> Employee:
    emp = db.execute(
        select(Employee).where(Employee.employee_id == employee_id.strip())
    ).scalar_one_or_none()
    if not emp:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Employee not found")
    return emp
