import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND

from pulsehr.core.deps import get_ai_service, get_storage_service, require_admin
from pulsehr.db.database import get_db
from pulsehr.db.models import HRCategory, HRManual
from pulsehr.schemas.hr_manuals import (
    DeleteResponse,
    ExtractPoliciesIn,
    ExtractPoliciesOut,
    HRCategoryList,
    HRManualList,
    HRManualOut,
    PolicyItem,
)
from pulsehr.services.ai_service import AIService
from pulsehr.services.catalog import ensure_hr_categories
from pulsehr.services.storage import DocumentStorage, content_disposition
from pulsehr.utils.pdf_extract import count_pages, extract_text

logger = logging.getLogger(__name__)

router = APIRouter(tags=["hr-manuals"])


def manual_out(m: HRManual, category_name: str) -> HRManualOut:
    return HRManualOut(
        id=m.id,
        category_id=m.category_id,
        category_name=category_name,
        file_name=m.file_name,
        size_bytes=m.size_bytes,
        pages=m.pages,
        uploaded_at=m.uploaded_at,
        extracted_policies=m.extracted_policies,
    )


def get_manual_or_404(db: Session, manual_id: int) -> HRManual:
    m = db.get(HRManual, manual_id)
    if not m:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Manual not found")
    return m


# =========================================================
# Categories
# =========================================================
@router.get("/hr-categories", response_model=HRCategoryList)
def list_categories(db: Session = Depends(get_db)):
    cats = db.execute(select(HRCategory).order_by(HRCategory.order_index, HRCategory.id)).scalars().all()
    return HRCategoryList(categories=cats)


@router.post("/hr-categories/ensure", response_model=HRCategoryList)
def ensure_categories(db: Session = Depends(get_db)):
    return HRCategoryList(categories=ensure_hr_categories(db))


# =========================================================
# Manuals
# =========================================================
@router.post("/hr-manuals/upload", response_model=HRManualOut, status_code=HTTP_201_CREATED)
def upload_manual(
    file: UploadFile = File(...),
    category_id: int = Form(...),
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage_service),
    _: str = Depends(require_admin),
):
    category = db.get(HRCategory, category_id)
    if not category:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Category not found")

    stored, raw = storage.read_pdf_upload(file)

    manual = HRManual(
        category_id=category.id,
        file_name=stored.name,
        mime_type=stored.mime_type,
        size_bytes=stored.size,
        # page count is best effort, 0 when the PDF cannot be parsed
        pages=count_pages(raw),
        content_base64=stored.content_base64,
    )
    db.add(manual)
    db.commit()
    db.refresh(manual)
    logger.info("HR manual %r uploaded to %r (%d pages)", manual.file_name, category.name, manual.pages)

    return manual_out(manual, category.name)


@router.get("/hr-manuals", response_model=HRManualList)
def list_manuals(db: Session = Depends(get_db)):
    rows = db.execute(
        select(HRManual, HRCategory.name)
        .join(HRCategory, HRCategory.id == HRManual.category_id)
        .order_by(HRManual.uploaded_at.desc(), HRManual.id.desc())
    ).all()
    return HRManualList(manuals=[manual_out(m, name) for m, name in rows])


@router.get("/hr-manuals/{category_id}", response_model=HRManualList)
def list_category_manuals(category_id: int, db: Session = Depends(get_db)):
    category = db.get(HRCategory, category_id)
    if not category:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Category not found")

    manuals = db.execute(
        select(HRManual)
        .where(HRManual.category_id == category.id)
        .order_by(HRManual.uploaded_at.desc(), HRManual.id.desc())
    ).scalars().all()
    return HRManualList(manuals=[manual_out(m, category.name) for m in manuals])


@router.get("/hr-manual/{manual_id}/download")
def download_manual(
    manual_id: int,
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage_service),
):
    m = get_manual_or_404(db, manual_id)
    return Response(
        content=storage.decode(m.content_base64),
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition("inline", m.file_name)},
    )


@router.delete("/hr-manual/{manual_id}", response_model=DeleteResponse)
def delete_manual(
    manual_id: int,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    m = get_manual_or_404(db, manual_id)
    db.delete(m)
    db.commit()
    logger.info("HR manual %d deleted", manual_id)
    return DeleteResponse(ok=True, id=manual_id)


# =========================================================
# AI policy extraction
# =========================================================
@router.post("/extract-policies", response_model=ExtractPoliciesOut)
def extract_policies(
    payload: ExtractPoliciesIn,
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage_service),
    ai: AIService = Depends(get_ai_service),
    _: str = Depends(require_admin),
):
    m = get_manual_or_404(db, payload.manualId)

    text = extract_text(storage.decode(m.content_base64))
    result = ai.extract_policies(text, category=m.category.name)

    m.extracted_policies = result.items
    db.commit()
    logger.info("Extracted %d policies from manual %d (%s)", len(result.items), m.id, result.source)

    return ExtractPoliciesOut(
        manualId=m.id,
        source=result.source,
        policies=[PolicyItem(**p) for p in result.items],
    )
