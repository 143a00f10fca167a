"""
Onboarding gating: onboarding form -> documents -> policies -> assessments.

Each stage is complete when a plain existence check against the database
succeeds, and a stage is unlocked only when every earlier stage is complete.
Nothing is cached: the state is recomputed from the rows on every call.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.status import HTTP_409_CONFLICT

from pulsehr.db.models import (
    DocumentType,
    Employee,
    EmployeeDocument,
    EmployeeOnboarding,
    PolicyAcknowledgement,
)
from pulsehr.services.catalog import policy_categories
from pulsehr.services.scoring import percentage


class Stage(str, Enum):
    onboarding = "onboarding"
    documents = "documents"
    policies = "policies"
    assessments = "assessments"


STAGE_ORDER: List[Stage] = [Stage.onboarding, Stage.documents, Stage.policies, Stage.assessments]

STAGE_TITLES: Dict[Stage, str] = {
    Stage.onboarding: "Onboarding Form",
    Stage.documents: "Document Upload",
    Stage.policies: "Policy Acknowledgement",
    Stage.assessments: "Assessments",
}

_LOCKED_DETAIL: Dict[Stage, str] = {
    Stage.documents: "Complete the onboarding form first.",
    Stage.policies: "Upload all mandatory documents first.",
    Stage.assessments: "Acknowledge all HR policies first.",
}


@dataclass
class StageState:
    key: Stage
    title: str
    completed: bool
    unlocked: bool


@dataclass
class DocumentProgress:
    total: int = 0
    completed: int = 0
    skipped: int = 0
    mandatory_total: int = 0
    mandatory_completed: int = 0
    progress_pct: float = 0.0
    mandatory_progress_pct: float = 0.0

    @property
    def done(self) -> bool:
        return self.mandatory_completed >= self.mandatory_total


@dataclass
class PolicyProgress:
    total: int = 0
    acknowledged: int = 0
    progress_pct: float = 0.0

    @property
    def done(self) -> bool:
        return self.acknowledged >= self.total


@dataclass
class ProgressSnapshot:
    employee_id: str
    onboarding_completed: bool
    documents: DocumentProgress
    policies: PolicyProgress
    stages: List[StageState] = field(default_factory=list)

    @property
    def current_stage(self) -> Stage:
        for st in self.stages:
            if not st.completed:
                return st.key
        return Stage.assessments

    @property
    def assessments_unlocked(self) -> bool:
        return self.is_unlocked(Stage.assessments)

    def is_unlocked(self, stage: Stage) -> bool:
        return next(st.unlocked for st in self.stages if st.key == stage)


def resolve_stages(onboarding_done: bool, documents_done: bool, policies_done: bool) -> List[StageState]:
    """
    Pure transition table: stage N is unlocked iff stages 0..N-1 are completed.
    The assessments stage never "completes" here; it only unlocks.
    """
    completed = {
        Stage.onboarding: onboarding_done,
        Stage.documents: documents_done,
        Stage.policies: policies_done,
        Stage.assessments: False,
    }
    out: List[StageState] = []
    all_previous = True
    for stage in STAGE_ORDER:
        out.append(
            StageState(
                key=stage,
                title=STAGE_TITLES[stage],
                completed=completed[stage] and all_previous,
                unlocked=all_previous,
            )
        )
        all_previous = all_previous and completed[stage]
    return out


# =========================================================
# Database checks
# =========================================================
def onboarding_completed(db: Session, employee: Employee) -> bool:
    row = db.execute(
        select(EmployeeOnboarding.id).where(
            EmployeeOnboarding.employee_id == employee.id,
            EmployeeOnboarding.completed.is_(True),
        )
    ).first()
    return row is not None


def document_progress(db: Session, employee: Employee) -> DocumentProgress:
    types = db.execute(select(DocumentType).where(DocumentType.is_applicable.is_(True))).scalars().all()
    uploads = db.execute(
        select(EmployeeDocument.document_type, EmployeeDocument.status).where(EmployeeDocument.employee_id == employee.id)
    ).all()
    status_by_type = {t: s for t, s in uploads}
    applicable = {t.type_key for t in types}

    mandatory = [t for t in types if t.is_mandatory]
    completed = [k for k, s in status_by_type.items() if s == "completed" and k in applicable]
    skipped = [k for k, s in status_by_type.items() if s == "skipped" and k in applicable]
    mandatory_completed = [t for t in mandatory if status_by_type.get(t.type_key) == "completed"]

    return DocumentProgress(
        total=len(types),
        completed=len(completed),
        skipped=len(skipped),
        mandatory_total=len(mandatory),
        mandatory_completed=len(mandatory_completed),
        progress_pct=percentage(len(completed), len(types)),
        mandatory_progress_pct=percentage(len(mandatory_completed), len(mandatory)),
    )


def policy_progress(db: Session, employee: Employee) -> PolicyProgress:
    categories = policy_categories(db)
    wanted = {c.id for c in categories}
    acked = set(
        db.execute(
            select(PolicyAcknowledgement.policy_category_id).where(PolicyAcknowledgement.employee_id == employee.id)
        ).scalars().all()
    )
    acknowledged = len(wanted & acked)
    return PolicyProgress(
        total=len(wanted),
        acknowledged=acknowledged,
        progress_pct=percentage(acknowledged, len(wanted)),
    )


def compute_progress(db: Session, employee: Employee) -> ProgressSnapshot:
    onboarding_done = onboarding_completed(db, employee)
    docs = document_progress(db, employee)
    pols = policy_progress(db, employee)

    return ProgressSnapshot(
        employee_id=employee.employee_id,
        onboarding_completed=onboarding_done,
        documents=docs,
        policies=pols,
        stages=resolve_stages(onboarding_done, docs.done, pols.done),
    )


def require_stage(db: Session, employee: Employee, stage: Stage) -> ProgressSnapshot:
    """
    409 unless `stage` is unlocked for this employee.
    """
    snapshot = compute_progress(db, employee)
    if not snapshot.is_unlocked(stage):
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail=_LOCKED_DETAIL.get(stage, "Stage locked."))
    return snapshot
