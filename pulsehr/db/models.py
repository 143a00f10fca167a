from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    String,
    Date,
    DateTime,
    Integer,
    Float,
    Boolean,
    ForeignKey,
    Text,
    JSON,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pulsehr.db.database import Base


# ============================================================
# ADMINS
# ============================================================

class AdminUser(Base):
    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


# ============================================================
# EMPLOYEES
# ============================================================

class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # public identifier typed by the employee (ex: BST12345)
    employee_id: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    department: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    # ============================================================
    # Relations
    # ============================================================
    onboarding: Mapped["EmployeeOnboarding | None"] = relationship(
        "EmployeeOnboarding",
        back_populates="employee",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    documents: Mapped[list["EmployeeDocument"]] = relationship(
        "EmployeeDocument",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    acknowledgements: Mapped[list["PolicyAcknowledgement"]] = relationship(
        "PolicyAcknowledgement",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    attempts: Mapped[list["AssessmentAttempt"]] = relationship(
        "AssessmentAttempt",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    evaluations: Mapped[list["PerformanceEvaluation"]] = relationship(
        "PerformanceEvaluation",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    training_progress: Mapped[list["TrainingProgress"]] = relationship(
        "TrainingProgress",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class EmployeeOnboarding(Base):
    __tablename__ = "employee_onboarding"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"),
        unique=True,
        index=True,
        nullable=False,
    )

    # Employee details
    employee_name: Mapped[str] = mapped_column(String(120), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str] = mapped_column(String(16), default="", nullable=False)
    nationality: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    marital_status: Mapped[str] = mapped_column(String(16), default="", nullable=False)
    number_of_kids: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Contact
    personal_email: Mapped[str] = mapped_column(String(320), default="", nullable=False)
    contact_number: Mapped[str] = mapped_column(String(32), default="", nullable=False)
    current_address: Mapped[str] = mapped_column(Text, default="", nullable=False)
    current_city: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    state: Mapped[str] = mapped_column(String(64), default="", nullable=False)

    # Job
    joining_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    reporting_manager: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    office_time: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    office_department: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    job_status: Mapped[str] = mapped_column(String(32), default="", nullable=False)
    job_title: Mapped[str] = mapped_column(String(120), default="", nullable=False)

    # Identification
    aadhar_card: Mapped[str] = mapped_column(String(32), default="", nullable=False)
    pan_number: Mapped[str] = mapped_column(String(16), default="", nullable=False)
    driving_license: Mapped[str] = mapped_column(String(32), default="", nullable=False)

    # Emergency contact
    emergency_contact_person: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    emergency_contact_number: Mapped[str] = mapped_column(String(32), default="", nullable=False)
    emergency_relationship: Mapped[str] = mapped_column(String(64), default="", nullable=False)

    # Health
    blood_type: Mapped[str] = mapped_column(String(4), default="", nullable=False)
    has_health_problem: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    health_problem_details: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # Banking
    account_holder_name: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    bank_name: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    account_number: Mapped[str] = mapped_column(String(34), default="", nullable=False)
    ifsc_code: Mapped[str] = mapped_column(String(11), default="", nullable=False)

    # Nominee (optional)
    nominee_name: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    nominee_relation: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    nominee_gender: Mapped[str] = mapped_column(String(16), default="", nullable=False)
    nominee_date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    nominee_aadhar_number: Mapped[str] = mapped_column(String(32), default="", nullable=False)

    # Previous employment / education
    previous_company_name: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    graduation_degree: Mapped[str] = mapped_column(String(120), default="", nullable=False)

    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="onboarding")


# ============================================================
# IDENTITY DOCUMENTS
# ============================================================

class DocumentType(Base):
    __tablename__ = "document_types"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    type_key: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    is_mandatory: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_applicable: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class EmployeeDocument(Base):
    __tablename__ = "employee_documents"
    __table_args__ = (UniqueConstraint("employee_id", "document_type", name="uq_employee_document_type"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    document_type: Mapped[str] = mapped_column(String(64), nullable=False)  # DocumentType.type_key
    document_name: Mapped[str] = mapped_column(String(120), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size_bytes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    content_base64: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # pending | completed | skipped
    status: Mapped[str] = mapped_column(String(16), default="pending", nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="documents")


# ============================================================
# HR MANUALS / POLICIES
# ============================================================

class HRCategory(Base):
    __tablename__ = "hr_categories"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    manuals: Mapped[list["HRManual"]] = relationship(
        "HRManual",
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class HRManual(Base):
    __tablename__ = "hr_manuals"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("hr_categories.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(120), default="application/pdf", nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    pages: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    content_base64: Mapped[str] = mapped_column(Text, nullable=False)

    # [{"title": ..., "content": ...}] once extracted
    extracted_policies: Mapped[list | None] = mapped_column(JSON, nullable=True)

    uploaded_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    category: Mapped["HRCategory"] = relationship("HRCategory", back_populates="manuals")


class PolicyAcknowledgement(Base):
    __tablename__ = "policy_acknowledgements"
    __table_args__ = (UniqueConstraint("employee_id", "policy_category_id", name="uq_policy_ack"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    policy_category_id: Mapped[int] = mapped_column(
        ForeignKey("hr_categories.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    acknowledged_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="acknowledgements")
    category: Mapped["HRCategory"] = relationship("HRCategory")


class CompanyDescriptionPage(Base):
    __tablename__ = "company_description_pages"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    page_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)  # 1..4
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_base64: Mapped[str] = mapped_column(Text, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


# ============================================================
# ASSESSMENTS
# ============================================================

class Assessment(Base):
    __tablename__ = "assessments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    # skills | performance | training | compliance | 360_feedback
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    category: Mapped[str] = mapped_column(String(120), default="", nullable=False)

    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False)  # percentage 0..100
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # compliance quizzes only, drives the overdue list
    due_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    questions: Mapped[list["AssessmentQuestion"]] = relationship(
        "AssessmentQuestion",
        back_populates="assessment",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [AssessmentQuestion.order_index, AssessmentQuestion.id],
    )
    attempts: Mapped[list["AssessmentAttempt"]] = relationship(
        "AssessmentAttempt",
        back_populates="assessment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class AssessmentQuestion(Base):
    __tablename__ = "assessment_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    # mcq | essay | rating_scale | true_false
    question_type: Mapped[str] = mapped_column(String(16), nullable=False)
    options: Mapped[list | None] = mapped_column(JSON, nullable=True)
    correct_answer: Mapped[str] = mapped_column(Text, default="", nullable=False)
    max_score: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    assessment: Mapped["Assessment"] = relationship("Assessment", back_populates="questions")


class AssessmentAttempt(Base):
    __tablename__ = "assessment_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    # in_progress | completed
    status: Mapped[str] = mapped_column(String(16), default="in_progress", nullable=False)
    answers: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)  # {"<question_id>": "<answer>"}

    score: Mapped[float | None] = mapped_column(Float, nullable=True)  # percentage
    earned_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    passed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    time_taken_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    assessment: Mapped["Assessment"] = relationship("Assessment", back_populates="attempts")
    employee: Mapped["Employee"] = relationship("Employee", back_populates="attempts")


# ============================================================
# PERFORMANCE / TRAINING
# ============================================================

class PerformanceEvaluation(Base):
    __tablename__ = "performance_evaluations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    evaluator: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    overall_rating: Mapped[int] = mapped_column(Integer, nullable=False)  # 1..5
    comments: Mapped[str] = mapped_column(Text, default="", nullable=False)
    evaluation_date: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="evaluations")


class TrainingModule(Base):
    __tablename__ = "training_modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    progress: Mapped[list["TrainingProgress"]] = relationship(
        "TrainingProgress",
        back_populates="module",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TrainingProgress(Base):
    __tablename__ = "training_progress"
    __table_args__ = (UniqueConstraint("employee_id", "module_id", name="uq_training_progress_employee_module"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    module_id: Mapped[int] = mapped_column(
        ForeignKey("training_modules.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    # in_progress | completed
    status: Mapped[str] = mapped_column(String(16), default="in_progress", nullable=False)
    progress_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="training_progress")
    module: Mapped["TrainingModule"] = relationship("TrainingModule", back_populates="progress")
