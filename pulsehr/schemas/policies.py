from datetime import datetime

from pydantic import BaseModel, Field


class AcknowledgementIn(BaseModel):
    employeeId: str = Field(..., min_length=1)
    policyCategoryId: int = Field(..., ge=1)


class AcknowledgementOut(BaseModel):
    id: int
    employeeId: str
    policyCategoryId: int
    categoryName: str
    acknowledgedAt: datetime


class AcknowledgementList(BaseModel):
    acknowledgements: list[AcknowledgementOut]
    acknowledged: int
    total: int
    progress_pct: float


class CompanyPageIn(BaseModel):
    pageNumber: int = Field(..., ge=1, le=4)
    title: str = Field(..., min_length=1, max_length=120)
    contentBase64: str = Field(..., min_length=1)
    fileName: str = Field(..., min_length=1)


class CompanyPageOut(BaseModel):
    id: int
    pageNumber: int
    title: str
    fileName: str
    contentBase64: str
    uploadedAt: datetime


class CompanyPageList(BaseModel):
    pages: list[CompanyPageOut]
