from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from pulsehr.utils.text_utils import normalize_answer


class AssessmentType(str, Enum):
    skills = "skills"
    performance = "performance"
    training = "training"
    compliance = "compliance"
    feedback_360 = "360_feedback"


class QuestionType(str, Enum):
    mcq = "mcq"
    essay = "essay"
    rating_scale = "rating_scale"
    true_false = "true_false"


# ============================================================
# Admin
# ============================================================

class AssessmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    type: AssessmentType
    category: str = ""
    duration_minutes: int = Field(..., ge=1, le=600)
    passing_score: int = Field(..., ge=0, le=100, description="Percentage")
    total_questions: int = Field(..., ge=1, le=200)
    is_active: bool = True
    due_date: Optional[datetime] = None


class AssessmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    type: Optional[AssessmentType] = None
    category: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=1, le=600)
    passing_score: Optional[int] = Field(None, ge=0, le=100)
    total_questions: Optional[int] = Field(None, ge=1, le=200)
    is_active: Optional[bool] = None
    due_date: Optional[datetime] = None


class AssessmentOut(BaseModel):
    id: int
    title: str
    description: str
    type: str
    category: str
    duration_minutes: int
    passing_score: int
    total_questions: int
    is_active: bool
    due_date: Optional[datetime] = None
    question_count: int = 0
    created_at: datetime

    model_config = {"from_attributes": True}


class AssessmentList(BaseModel):
    assessments: list[AssessmentOut]


class QuestionIn(BaseModel):
    question_text: str = Field(..., min_length=1)
    question_type: QuestionType = QuestionType.mcq
    options: Optional[List[str]] = None
    correct_answer: str = ""
    max_score: int = Field(1, ge=1, le=100)

    @model_validator(mode="after")
    def check_answer(self):
        if self.question_type == QuestionType.mcq:
            opts = [o.strip() for o in (self.options or []) if o and o.strip()]
            if len(opts) < 2:
                raise ValueError("mcq questions need at least 2 options")
            wanted = normalize_answer(self.correct_answer)
            if wanted not in {normalize_answer(o) for o in opts}:
                raise ValueError("correct_answer must be one of the options")
            self.options = opts
            self.correct_answer = self.correct_answer.strip()
        elif self.question_type == QuestionType.true_false:
            answer = normalize_answer(self.correct_answer)
            if answer not in ("true", "false"):
                raise ValueError("true_false questions need correct_answer 'true' or 'false'")
            self.options = ["true", "false"]
            self.correct_answer = answer
        else:
            # essay / rating_scale are not matched against a key
            self.options = None
            self.correct_answer = ""
        return self


class QuestionOut(BaseModel):
    id: int
    question_text: str
    question_type: str
    options: Optional[List[str]] = None
    correct_answer: str
    max_score: int
    order_index: int

    model_config = {"from_attributes": True}


class QuestionPublic(BaseModel):
    """Question as shown to an employee (no answer key)."""
    id: int
    question_text: str
    question_type: str
    options: Optional[List[str]] = None
    max_score: int
    order_index: int

    model_config = {"from_attributes": True}


class QuestionList(BaseModel):
    questions: list[QuestionOut]


class GenerateIn(BaseModel):
    manualId: Optional[int] = Field(None, ge=1, description="HR manual used as source; none = static set")
    count: int = Field(5, ge=1, le=50)
    replace: bool = Field(False, description="Delete existing questions first")


class GenerateOut(BaseModel):
    assessment_id: int
    source: str
    added: int
    questions: list[QuestionOut]


# ============================================================
# Employee
# ============================================================

class AvailableAssessment(BaseModel):
    id: int
    title: str
    description: str
    type: str
    category: str
    duration_minutes: int
    passing_score: int
    total_questions: int
    # not_started | in_progress | passed | failed
    status: str
    attempt_id: Optional[int] = None
    score: Optional[float] = None


class AvailableList(BaseModel):
    employee_id: str
    assessments_unlocked: bool
    assessments: list[AvailableAssessment]


class StartIn(BaseModel):
    employee_id: str = Field(..., min_length=1)


class StartOut(BaseModel):
    attempt_id: int
    assessment_id: int
    title: str
    status: str
    resumed: bool
    started_at: datetime
    duration_minutes: int
    time_remaining_seconds: int
    answers: Dict[str, Any] = {}
    questions: list[QuestionPublic]


class SubmitIn(BaseModel):
    answers: Dict[str, Any] = Field(default_factory=dict, description='{"<question_id>": answer}')


class AnswerDetail(BaseModel):
    question_id: int
    answer: Optional[str] = None
    earned: int
    max_score: int
    correct: bool


class AttemptOut(BaseModel):
    id: int
    assessment_id: int
    assessment_title: str
    employee_id: str
    status: str
    score: Optional[float] = None
    earned_points: int
    max_points: int
    passed: Optional[bool] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    time_taken_seconds: Optional[int] = None


class SubmitOut(AttemptOut):
    details: list[AnswerDetail]


class AttemptList(BaseModel):
    attempts: list[AttemptOut]
