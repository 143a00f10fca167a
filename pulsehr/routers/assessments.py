import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from pulsehr.core.deps import get_ai_service, get_storage_service, require_admin
from pulsehr.db.database import get_db
from pulsehr.db.models import Assessment, AssessmentAttempt, AssessmentQuestion, HRManual
from pulsehr.schemas.assessments import (
    AnswerDetail,
    AssessmentCreate,
    AssessmentList,
    AssessmentOut,
    AssessmentUpdate,
    AttemptList,
    AttemptOut,
    AvailableAssessment,
    AvailableList,
    GenerateIn,
    GenerateOut,
    QuestionIn,
    QuestionList,
    QuestionOut,
    QuestionPublic,
    StartIn,
    StartOut,
    SubmitIn,
    SubmitOut,
)
from pulsehr.schemas.hr_manuals import DeleteResponse
from pulsehr.services.ai_service import AIService
from pulsehr.services.employees import get_employee_or_404
from pulsehr.services.progress import Stage, compute_progress, require_stage
from pulsehr.services.scoring import is_passed, score_attempt
from pulsehr.services.storage import DocumentStorage
from pulsehr.utils.pdf_extract import extract_text

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assessments"])


# =========================================================
# Helpers
# =========================================================
def get_assessment_or_404(db: Session, assessment_id: int) -> Assessment:
    a = db.get(Assessment, assessment_id)
    if not a:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Assessment not found")
    return a


def assessment_out(a: Assessment) -> AssessmentOut:
    return AssessmentOut(
        id=a.id,
        title=a.title,
        description=a.description,
        type=a.type,
        category=a.category,
        duration_minutes=a.duration_minutes,
        passing_score=a.passing_score,
        total_questions=a.total_questions,
        is_active=a.is_active,
        due_date=a.due_date,
        question_count=len(a.questions),
        created_at=a.created_at,
    )


def attempt_out(att: AssessmentAttempt, employee_code: str) -> AttemptOut:
    return AttemptOut(
        id=att.id,
        assessment_id=att.assessment_id,
        assessment_title=att.assessment.title,
        employee_id=employee_code,
        status=att.status,
        score=att.score,
        earned_points=att.earned_points,
        max_points=att.max_points,
        passed=att.passed,
        started_at=att.started_at,
        completed_at=att.completed_at,
        time_taken_seconds=att.time_taken_seconds,
    )


def attempt_status(att: Optional[AssessmentAttempt]) -> str:
    if att is None:
        return "not_started"
    if att.status != "completed":
        return "in_progress"
    return "passed" if att.passed else "failed"


def next_order_index(db: Session, assessment_id: int) -> int:
    last = db.execute(
        select(func.coalesce(func.max(AssessmentQuestion.order_index), 0))
        .where(AssessmentQuestion.assessment_id == assessment_id)
    ).scalar_one()
    return int(last) + 1


def time_remaining(att: AssessmentAttempt, duration_minutes: int, now: datetime) -> int:
    elapsed = (now - att.started_at).total_seconds()
    return max(0, int(duration_minutes * 60 - elapsed))


# =========================================================
# Admin: assessments
# =========================================================
@router.post("/assessments", response_model=AssessmentOut, status_code=HTTP_201_CREATED)
def create_assessment(
    payload: AssessmentCreate,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    data = payload.model_dump()
    data["type"] = payload.type.value
    a = Assessment(**data)
    db.add(a)
    db.commit()
    db.refresh(a)
    logger.info("Assessment %d %r created", a.id, a.title)
    return assessment_out(a)


@router.get("/assessments", response_model=AssessmentList)
def list_assessments(
    active_only: bool = Query(False),
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    stmt = select(Assessment).order_by(Assessment.created_at.desc(), Assessment.id.desc())
    if active_only:
        stmt = stmt.where(Assessment.is_active.is_(True))
    return AssessmentList(assessments=[assessment_out(a) for a in db.execute(stmt).scalars().all()])


@router.get("/assessments/{assessment_id}", response_model=AssessmentOut)
def get_assessment(
    assessment_id: int,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    return assessment_out(get_assessment_or_404(db, assessment_id))


@router.patch("/assessments/{assessment_id}", response_model=AssessmentOut)
def update_assessment(
    assessment_id: int,
    payload: AssessmentUpdate,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    a = get_assessment_or_404(db, assessment_id)

    changes = payload.model_dump(exclude_unset=True)
    if payload.type is not None:
        changes["type"] = payload.type.value
    for key, value in changes.items():
        if value is None:
            continue
        setattr(a, key, value)

    db.commit()
    db.refresh(a)
    return assessment_out(a)


@router.delete("/assessments/{assessment_id}", response_model=DeleteResponse)
def delete_assessment(
    assessment_id: int,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    a = get_assessment_or_404(db, assessment_id)
    db.delete(a)
    db.commit()
    logger.info("Assessment %d deleted", assessment_id)
    return DeleteResponse(ok=True, id=assessment_id)


# =========================================================
# Admin: questions
# =========================================================
@router.post("/assessments/{assessment_id}/questions", response_model=QuestionOut, status_code=HTTP_201_CREATED)
def add_question(
    assessment_id: int,
    payload: QuestionIn,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    a = get_assessment_or_404(db, assessment_id)

    q = AssessmentQuestion(
        assessment_id=a.id,
        question_text=payload.question_text.strip(),
        question_type=payload.question_type.value,
        options=payload.options,
        correct_answer=payload.correct_answer,
        max_score=payload.max_score,
        order_index=next_order_index(db, a.id),
    )
    db.add(q)
    db.commit()
    db.refresh(q)
    return q


@router.get("/assessments/{assessment_id}/questions", response_model=QuestionList)
def list_questions(
    assessment_id: int,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    a = get_assessment_or_404(db, assessment_id)
    return QuestionList(questions=a.questions)


@router.delete("/assessment-questions/{question_id}", response_model=DeleteResponse)
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    q = db.get(AssessmentQuestion, question_id)
    if not q:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Question not found")
    db.delete(q)
    db.commit()
    return DeleteResponse(ok=True, id=question_id)


@router.post("/assessments/{assessment_id}/generate", response_model=GenerateOut, status_code=HTTP_201_CREATED)
def generate_questions(
    assessment_id: int,
    payload: GenerateIn,
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage_service),
    ai: AIService = Depends(get_ai_service),
    _: str = Depends(require_admin),
):
    a = get_assessment_or_404(db, assessment_id)

    # 1) Source text (optional manual)
    source_text = ""
    if payload.manualId is not None:
        manual = db.get(HRManual, payload.manualId)
        if not manual:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Manual not found")
        source_text = extract_text(storage.decode(manual.content_base64))

    # 2) Generation (fallback set when AI is off or fails)
    result = ai.generate_quiz(source_text, payload.count, topic=a.title)

    # 3) Store as mcq questions
    if payload.replace:
        for old in list(a.questions):
            db.delete(old)
        db.flush()

    start = next_order_index(db, a.id)
    created = []
    for offset, item in enumerate(result.items):
        q = AssessmentQuestion(
            assessment_id=a.id,
            question_text=item["question_text"],
            question_type="mcq",
            options=item["options"],
            correct_answer=item["correct_answer"],
            max_score=1,
            order_index=start + offset,
        )
        db.add(q)
        created.append(q)

    db.commit()
    for q in created:
        db.refresh(q)
    logger.info("Generated %d questions for assessment %d (%s)", len(created), a.id, result.source)

    return GenerateOut(
        assessment_id=a.id,
        source=result.source,
        added=len(created),
        questions=[QuestionOut.model_validate(q) for q in created],
    )


# =========================================================
# Employee: take an assessment
# =========================================================
@router.get("/assessments/available/{employee_id}", response_model=AvailableList)
def available_assessments(employee_id: str, db: Session = Depends(get_db)):
    emp = get_employee_or_404(db, employee_id)
    snapshot = compute_progress(db, emp)

    assessments = db.execute(
        select(Assessment).where(Assessment.is_active.is_(True)).order_by(Assessment.created_at, Assessment.id)
    ).scalars().all()

    latest: dict[int, AssessmentAttempt] = {}
    for att in db.execute(
        select(AssessmentAttempt)
        .where(AssessmentAttempt.employee_id == emp.id)
        .order_by(AssessmentAttempt.started_at, AssessmentAttempt.id)
    ).scalars().all():
        latest[att.assessment_id] = att

    items = []
    for a in assessments:
        att = latest.get(a.id)
        items.append(
            AvailableAssessment(
                id=a.id,
                title=a.title,
                description=a.description,
                type=a.type,
                category=a.category,
                duration_minutes=a.duration_minutes,
                passing_score=a.passing_score,
                total_questions=a.total_questions,
                status=attempt_status(att),
                attempt_id=att.id if att else None,
                score=att.score if att else None,
            )
        )

    return AvailableList(
        employee_id=emp.employee_id,
        assessments_unlocked=snapshot.assessments_unlocked,
        assessments=items,
    )


@router.post("/assessments/{assessment_id}/start", response_model=StartOut)
def start_assessment(assessment_id: int, payload: StartIn, db: Session = Depends(get_db)):
    # 1) Employee, gate, assessment
    emp = get_employee_or_404(db, payload.employee_id)
    require_stage(db, emp, Stage.assessments)
    a = get_assessment_or_404(db, assessment_id)
    if not a.is_active:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Assessment is not active")
    if not a.questions:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Assessment has no questions")

    # 2) One attempt per employee: resume or refuse
    att = db.execute(
        select(AssessmentAttempt)
        .where(AssessmentAttempt.assessment_id == a.id, AssessmentAttempt.employee_id == emp.id)
        .order_by(AssessmentAttempt.started_at.desc(), AssessmentAttempt.id.desc())
    ).scalars().first()

    if att is not None and att.status == "completed":
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Assessment already completed")

    resumed = att is not None
    if att is None:
        att = AssessmentAttempt(
            assessment_id=a.id,
            employee_id=emp.id,
            status="in_progress",
            answers={},
            started_at=datetime.utcnow(),
        )
        db.add(att)
        db.commit()
        db.refresh(att)
        logger.info("%s started assessment %d", emp.employee_id, a.id)

    return StartOut(
        attempt_id=att.id,
        assessment_id=a.id,
        title=a.title,
        status=att.status,
        resumed=resumed,
        started_at=att.started_at,
        duration_minutes=a.duration_minutes,
        time_remaining_seconds=time_remaining(att, a.duration_minutes, datetime.utcnow()),
        answers=att.answers or {},
        questions=[QuestionPublic.model_validate(q) for q in a.questions],
    )


@router.post("/attempts/{attempt_id}/submit", response_model=SubmitOut)
def submit_attempt(attempt_id: int, payload: SubmitIn, db: Session = Depends(get_db)):
    att = db.get(AssessmentAttempt, attempt_id)
    if not att:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Attempt not found")
    if att.status == "completed":
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Attempt already submitted")

    a = att.assessment
    answers = {str(k): v for k, v in payload.answers.items()}
    result = score_attempt(a.questions, answers)

    now = datetime.utcnow()
    att.answers = answers
    att.score = result.percentage
    att.earned_points = result.earned
    att.max_points = result.possible
    att.passed = is_passed(result.percentage, a.passing_score)
    att.status = "completed"
    att.completed_at = now
    att.time_taken_seconds = max(0, int((now - att.started_at).total_seconds()))

    db.commit()
    db.refresh(att)
    logger.info("Attempt %d scored %.2f%% (passed=%s)", att.id, att.score, att.passed)

    out = attempt_out(att, att.employee.employee_id)
    return SubmitOut(
        **out.model_dump(),
        details=[AnswerDetail(**d.__dict__) for d in result.details],
    )


@router.get("/attempts", response_model=AttemptList)
def list_attempts(employee_id: str = Query(...), db: Session = Depends(get_db)):
    emp = get_employee_or_404(db, employee_id)
    rows = db.execute(
        select(AssessmentAttempt)
        .where(AssessmentAttempt.employee_id == emp.id)
        .order_by(AssessmentAttempt.started_at.desc(), AssessmentAttempt.id.desc())
    ).scalars().all()
    return AttemptList(attempts=[attempt_out(att, emp.employee_id) for att in rows])
