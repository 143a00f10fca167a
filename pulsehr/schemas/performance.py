from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ============================================================
# Performance evaluations
# ============================================================

class EvaluationIn(BaseModel):
    employee_id: str = Field(..., min_length=1)
    overall_rating: int = Field(..., ge=1, le=5)
    evaluator: str = ""
    comments: str = ""
    evaluation_date: Optional[datetime] = None  # defaults to now


class EvaluationOut(BaseModel):
    id: int
    employee_id: str
    employee_name: str
    department: str
    overall_rating: int
    evaluator: str
    comments: str
    evaluation_date: datetime


class EvaluationList(BaseModel):
    evaluations: list[EvaluationOut]


# ============================================================
# Training
# ============================================================

class TrainingModuleIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    duration_minutes: int = Field(0, ge=0, le=10000)
    is_active: bool = True


class TrainingModuleOut(TrainingModuleIn):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class TrainingModuleList(BaseModel):
    modules: list[TrainingModuleOut]


class TrainingProgressIn(BaseModel):
    employee_id: str = Field(..., min_length=1)
    module_id: int
    progress_percentage: int = Field(..., ge=0, le=100)


class TrainingProgressOut(BaseModel):
    id: int
    employee_id: str
    module_id: int
    module_title: str
    status: str
    progress_percentage: int
    started_at: datetime
    completed_at: Optional[datetime] = None


class TrainingProgressList(BaseModel):
    progress: list[TrainingProgressOut]
