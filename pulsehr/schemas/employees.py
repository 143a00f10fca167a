from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class EmployeeCreate(BaseModel):
    name: str = Field(..., max_length=120)
    department: str = Field(..., max_length=120)
    email: Optional[str] = Field(None, max_length=320)

    @field_validator("name", "department")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class EmployeeOut(BaseModel):
    employee_id: str
    name: str
    department: str
    email: Optional[str] = None
    created_at: datetime
    onboarding_completed: bool = False

    model_config = {"from_attributes": True}


class EmployeeList(BaseModel):
    employees: list[EmployeeOut]


class StageOut(BaseModel):
    key: str
    title: str
    completed: bool
    unlocked: bool


class DocumentProgressOut(BaseModel):
    total: int
    completed: int
    skipped: int
    mandatory_total: int
    mandatory_completed: int
    progress_pct: float
    mandatory_progress_pct: float


class PolicyProgressOut(BaseModel):
    total: int
    acknowledged: int
    progress_pct: float


class ProgressOut(BaseModel):
    employee_id: str
    current_stage: str
    onboarding_completed: bool
    documents_completed: bool
    policies_completed: bool
    assessments_unlocked: bool
    documents: DocumentProgressOut
    policies: PolicyProgressOut
    stages: list[StageOut]
