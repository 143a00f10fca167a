from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class HRCategoryOut(BaseModel):
    id: int
    name: str
    description: str
    order_index: int

    model_config = {"from_attributes": True}


class HRCategoryList(BaseModel):
    categories: list[HRCategoryOut]


class PolicyItem(BaseModel):
    title: str
    content: str


class HRManualOut(BaseModel):
    id: int
    category_id: int
    category_name: str
    file_name: str
    size_bytes: int
    pages: int
    uploaded_at: datetime
    extracted_policies: Optional[list[PolicyItem]] = None


class HRManualList(BaseModel):
    manuals: list[HRManualOut]


class ExtractPoliciesIn(BaseModel):
    manualId: int = Field(..., ge=1)


class ExtractPoliciesOut(BaseModel):
    manualId: int
    source: str = Field(..., description="ai | fallback")
    policies: list[PolicyItem]


class DeleteResponse(BaseModel):
    ok: bool = True
    id: Optional[int] = None
