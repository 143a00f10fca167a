import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.status import HTTP_404_NOT_FOUND

from pulsehr.core.deps import get_storage_service, require_admin
from pulsehr.db.database import get_db
from pulsehr.db.models import CompanyDescriptionPage
from pulsehr.schemas.hr_manuals import DeleteResponse
from pulsehr.schemas.policies import CompanyPageIn, CompanyPageList, CompanyPageOut
from pulsehr.services.storage import PDF_EXTENSIONS, PDF_MIME_TYPES, DocumentStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/company-description-pages", tags=["company"])


def page_out(p: CompanyDescriptionPage) -> CompanyPageOut:
    return CompanyPageOut(
        id=p.id,
        pageNumber=p.page_number,
        title=p.title,
        fileName=p.file_name,
        contentBase64=p.content_base64,
        uploadedAt=p.uploaded_at,
    )


@router.get("", response_model=CompanyPageList)
def list_pages(db: Session = Depends(get_db)):
    pages = db.execute(select(CompanyDescriptionPage).order_by(CompanyDescriptionPage.page_number)).scalars().all()
    return CompanyPageList(pages=[page_out(p) for p in pages])


@router.post("", response_model=CompanyPageOut)
def upsert_page(
    payload: CompanyPageIn,
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage_service),
    _: str = Depends(require_admin),
):
    # PDF by file name only, no MIME type in this payload
    stored = storage.read_base64(
        payload.contentBase64,
        payload.fileName,
        None,
        extensions=PDF_EXTENSIONS,
        mime_types=PDF_MIME_TYPES,
    )

    page = db.execute(
        select(CompanyDescriptionPage).where(CompanyDescriptionPage.page_number == payload.pageNumber)
    ).scalar_one_or_none()
    if page is None:
        page = CompanyDescriptionPage(page_number=payload.pageNumber)
        db.add(page)

    page.title = payload.title.strip()
    page.file_name = stored.name
    page.content_base64 = stored.content_base64

    db.commit()
    db.refresh(page)
    logger.info("Company description page %d saved (%r)", page.page_number, page.file_name)
    return page_out(page)


@router.delete("/{page_number}", response_model=DeleteResponse)
def delete_page(
    page_number: int,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    page = db.execute(
        select(CompanyDescriptionPage).where(CompanyDescriptionPage.page_number == page_number)
    ).scalar_one_or_none()
    if not page:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Page not found")

    db.delete(page)
    db.commit()
    return DeleteResponse(ok=True, id=page_number)
