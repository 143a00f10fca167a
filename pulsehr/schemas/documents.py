from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DocumentStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    skipped = "skipped"


class DocumentTypeIn(BaseModel):
    type_key: str = Field(..., min_length=1, max_length=64, pattern=r"^[a-z0-9_]+$")
    display_name: str = Field(..., min_length=1, max_length=120)
    description: str = ""
    is_mandatory: bool = True
    is_applicable: bool = True
    order_index: int = 0


class DocumentTypeOut(DocumentTypeIn):
    id: int

    model_config = {"from_attributes": True}


class EmployeeDocumentIn(BaseModel):
    employeeId: str = Field(..., min_length=1)
    documentType: str = Field(..., min_length=1, description="DocumentType.type_key")
    documentName: str = Field(..., min_length=1, max_length=120)
    fileName: Optional[str] = Field(None, description="Required unless status is skipped")
    fileContentBase64: Optional[str] = Field(None, description="Raw base64 or data URL")
    fileSizeBytes: Optional[int] = Field(None, ge=0)
    mimeType: Optional[str] = None
    status: DocumentStatus = DocumentStatus.completed


class EmployeeDocumentOut(BaseModel):
    id: int
    employeeId: str
    documentType: str
    documentName: str
    fileName: str
    fileSizeBytes: int
    mimeType: str
    status: DocumentStatus
    uploadedAt: datetime


class EmployeeDocumentList(BaseModel):
    documents: list[EmployeeDocumentOut]
