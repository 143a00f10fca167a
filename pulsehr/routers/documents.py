import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from pulsehr.core.deps import get_storage_service, require_admin
from pulsehr.db.database import get_db
from pulsehr.db.models import DocumentType, Employee, EmployeeDocument
from pulsehr.schemas.documents import (
    DocumentStatus,
    DocumentTypeIn,
    DocumentTypeOut,
    EmployeeDocumentIn,
    EmployeeDocumentList,
    EmployeeDocumentOut,
)
from pulsehr.services.employees import get_employee_or_404
from pulsehr.services.progress import Stage, require_stage
from pulsehr.services.storage import DocumentStorage, content_disposition

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])


def document_out(doc: EmployeeDocument, employee_code: str) -> EmployeeDocumentOut:
    return EmployeeDocumentOut(
        id=doc.id,
        employeeId=employee_code,
        documentType=doc.document_type,
        documentName=doc.document_name,
        fileName=doc.file_name,
        fileSizeBytes=doc.file_size_bytes,
        mimeType=doc.mime_type,
        status=doc.status,
        uploadedAt=doc.uploaded_at,
    )


# =========================================================
# Document types
# =========================================================
@router.get("/document-types", response_model=list[DocumentTypeOut])
def list_document_types(db: Session = Depends(get_db)):
    return db.execute(
        select(DocumentType)
        .where(DocumentType.is_applicable.is_(True))
        .order_by(DocumentType.order_index, DocumentType.id)
    ).scalars().all()


@router.post("/document-types", response_model=DocumentTypeOut, status_code=HTTP_201_CREATED)
def create_document_type(
    payload: DocumentTypeIn,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    exists = db.execute(select(DocumentType.id).where(DocumentType.type_key == payload.type_key)).first()
    if exists:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Document type already exists")

    dt = DocumentType(**payload.model_dump())
    db.add(dt)
    db.commit()
    db.refresh(dt)
    return dt


# =========================================================
# Employee uploads
# =========================================================
@router.post("/employee-documents", response_model=EmployeeDocumentOut)
def upload_employee_document(
    payload: EmployeeDocumentIn,
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage_service),
):
    # 1) Employee + stage gate
    emp = get_employee_or_404(db, payload.employeeId)
    require_stage(db, emp, Stage.documents)

    # 2) Document type
    dt = db.execute(
        select(DocumentType).where(DocumentType.type_key == payload.documentType)
    ).scalar_one_or_none()
    if not dt or not dt.is_applicable:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Unknown document type")

    # 3) File or skip
    if payload.status == DocumentStatus.pending:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Status must be completed or skipped")

    if payload.status == DocumentStatus.skipped:
        if dt.is_mandatory:
            raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=f"{dt.display_name} is mandatory")
        file_name, mime_type, size, content = "", "", 0, ""
    else:
        stored = storage.read_base64(payload.fileContentBase64 or "", payload.fileName, payload.mimeType)
        file_name, mime_type, size, content = stored.name, stored.mime_type, stored.size, stored.content_base64

    # 4) Upsert on (employee, type)
    doc = db.execute(
        select(EmployeeDocument).where(
            EmployeeDocument.employee_id == emp.id,
            EmployeeDocument.document_type == dt.type_key,
        )
    ).scalar_one_or_none()
    if doc is None:
        doc = EmployeeDocument(employee_id=emp.id, document_type=dt.type_key)
        db.add(doc)

    doc.document_name = payload.documentName
    doc.file_name = file_name
    doc.mime_type = mime_type
    doc.file_size_bytes = size
    doc.content_base64 = content
    doc.status = payload.status.value
    doc.uploaded_at = datetime.utcnow()

    db.commit()
    db.refresh(doc)
    logger.info("Document %s %s for %s", dt.type_key, doc.status, emp.employee_id)

    return document_out(doc, emp.employee_id)


@router.get("/employee-documents/{employee_id}", response_model=EmployeeDocumentList)
def list_employee_documents(employee_id: str, db: Session = Depends(get_db)):
    emp = get_employee_or_404(db, employee_id)
    docs = db.execute(
        select(EmployeeDocument)
        .where(EmployeeDocument.employee_id == emp.id)
        .order_by(EmployeeDocument.uploaded_at, EmployeeDocument.id)
    ).scalars().all()
    return EmployeeDocumentList(documents=[document_out(d, emp.employee_id) for d in docs])


# =========================================================
# Admin review
# =========================================================
@router.get("/admin/employee-documents", response_model=EmployeeDocumentList)
def admin_list_documents(
    employee_id: Optional[str] = Query(None),
    status: Optional[DocumentStatus] = Query(None),
    q: Optional[str] = Query(None, description="Search on employee name / ID or document name"),
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    stmt = (
        select(EmployeeDocument, Employee.employee_id)
        .join(Employee, Employee.id == EmployeeDocument.employee_id)
        .order_by(EmployeeDocument.uploaded_at.desc(), EmployeeDocument.id.desc())
    )
    if employee_id:
        stmt = stmt.where(Employee.employee_id == employee_id.strip())
    if status:
        stmt = stmt.where(EmployeeDocument.status == status.value)
    if q and q.strip():
        like = f"%{q.strip()}%"
        stmt = stmt.where(
            or_(
                Employee.name.ilike(like),
                Employee.employee_id.ilike(like),
                EmployeeDocument.document_name.ilike(like),
            )
        )

    rows = db.execute(stmt).all()
    return EmployeeDocumentList(documents=[document_out(doc, code) for doc, code in rows])


@router.get("/admin/employee-documents/{document_id}/download")
def admin_download_document(
    document_id: int,
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_storage_service),
    _: str = Depends(require_admin),
):
    doc = db.get(EmployeeDocument, document_id)
    if not doc:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Document not found")
    if not doc.content_base64:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="No file stored for this document")

    return Response(
        content=storage.decode(doc.content_base64),
        media_type=doc.mime_type or "application/octet-stream",
        headers={"Content-Disposition": content_disposition("attachment", doc.file_name)},
    )
